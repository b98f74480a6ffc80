from __future__ import annotations

from pathlib import Path

import pytest

from twig_format.config import FormatterConfig
from twig_format.exceptions import InvalidRangeError
from twig_format.formatter import (
    FormatFileError,
    format_content,
    format_file,
    format_lines,
    format_range,
    format_text,
)


def _format(lines: list[str], **options) -> list[str]:
    return format_text("\n".join(lines), FormatterConfig(**options)).split("\n")


def test_template_block_is_indented():
    assert format_text("{% if x %}\nhello\n{% endif %}", FormatterConfig(indent_size=2)) == (
        "{% if x %}\n  hello\n{% endif %}"
    )


def test_markup_and_template_nesting_combine():
    source = ["<div>", "{% for i in items %}", "<p>{{ i }}</p>", "{% endfor %}", "</div>"]

    assert _format(source) == [
        "<div>",
        "    {% for i in items %}",
        "        <p>{{ i }}</p>",
        "    {% endfor %}",
        "</div>",
    ]


def test_existing_indentation_is_replaced():
    source = ["        {% if a %}", "  b", "\t\t{% endif %}"]

    assert _format(source) == ["{% if a %}", "    b", "{% endif %}"]


def test_single_line_block_keeps_depth():
    source = ["<div>", "{% if x %}y{% endif %}", "</div>"]

    assert _format(source) == ["<div>", "    {% if x %}y{% endif %}", "</div>"]


def test_single_line_loop_with_markup_keeps_depth():
    source = ["<ul>", "{% for i in items %}<li>{{ i }}</li>{% endfor %}", "</ul>"]

    assert _format(source) == ["<ul>", "    {% for i in items %}<li>{{ i }}</li>{% endfor %}", "</ul>"]


def test_tag_split_across_lines_is_collapsed():
    source = ["<div", '  class="a {{ b }} c">', "text", "</div>"]

    assert _format(source) == ['<div class="a {{ b }} c">', "    text", "</div>"]


def test_else_branches_share_the_opening_depth():
    source = ["{% if a %}", "X", "{% else %}", "Y", "{% endif %}"]

    assert _format(source) == ["{% if a %}", "    X", "{% else %}", "    Y", "{% endif %}"]


def test_elseif_branches_share_the_opening_depth():
    source = [
        "<div>",
        "{% if a %}",
        "A",
        "{% elseif b %}",
        "B",
        "{% else %}",
        "C",
        "{% endif %}",
        "</div>",
    ]

    assert _format(source) == [
        "<div>",
        "    {% if a %}",
        "        A",
        "    {% elseif b %}",
        "        B",
        "    {% else %}",
        "        C",
        "    {% endif %}",
        "</div>",
    ]


def test_whitespace_control_tags():
    source = ["{%- if a -%}", "b", "{%- endif -%}"]

    assert _format(source) == ["{%- if a -%}", "    b", "{%- endif -%}"]


def test_blank_lines_are_preserved_as_empty_lines():
    source = ["<div>", "", "   ", "<p>x</p>", "</div>"]

    assert _format(source) == ["<div>", "", "", "    <p>x</p>", "</div>"]


def test_blank_lines_can_be_stripped():
    source = ["<div>", "", "<p>x</p>", "   ", "</div>"]

    assert _format(source, preserve_blank_lines=False) == ["<div>", "    <p>x</p>", "</div>"]


def test_tabs_indent_one_tab_per_level():
    source = ["<div>", "{% if a %}", "b", "{% endif %}", "</div>"]

    assert _format(source, use_tabs=True) == [
        "<div>",
        "\t{% if a %}",
        "\t\tb",
        "\t{% endif %}",
        "</div>",
    ]


def test_trailing_newline_is_kept():
    assert format_text("{% if a %}\nb\n{% endif %}\n") == "{% if a %}\n    b\n{% endif %}\n"


def test_carriage_returns_are_trimmed():
    assert format_text("{% if a %}\r\nb\r\n{% endif %}") == "{% if a %}\n    b\n{% endif %}"


def test_line_count_is_preserved_without_multiline_attributes():
    source = ["<div>", "{% if a %}", "", "<br>", "{{ value }}", "{% endif %}", "</div>", ""]

    assert len(_format(source)) == len(source)


def test_comment_lines_are_not_interpreted():
    source = ["{% if a %}", "{# first", "   {% if b %}", "second #}", "{% endif %}"]

    assert _format(source) == [
        "{% if a %}",
        "    {# first",
        "    {% if b %}",
        "    second #}",
        "{% endif %}",
    ]


def test_single_line_comment_inside_block():
    source = ["<ul>", "{# items #}", "<li>x</li>", "</ul>"]

    assert _format(source) == ["<ul>", "    {# items #}", "    <li>x</li>", "</ul>"]


def test_verbatim_region_is_not_interpreted():
    source = ["<div>", "{% verbatim %}", "{% if raw %}", "<p>", "{% endverbatim %}", "</div>"]

    assert _format(source) == [
        "<div>",
        "    {% verbatim %}",
        "    {% if raw %}",
        "    <p>",
        "    {% endverbatim %}",
        "</div>",
    ]


def test_inline_verbatim_does_not_change_depth():
    source = ["{% verbatim %}{{ raw }}{% endverbatim %}", "<p>x</p>"]

    assert _format(source) == ["{% verbatim %}{{ raw }}{% endverbatim %}", "<p>x</p>"]


def test_script_body_follows_brace_balance():
    source = [
        "<body>",
        "<script>",
        "function greet(name) {",
        "if (name) {",
        "console.log(name);",
        "}",
        "}",
        "</script>",
        "</body>",
    ]

    assert _format(source) == [
        "<body>",
        "    <script>",
        "        function greet(name) {",
        "            if (name) {",
        "                console.log(name);",
        "            }",
        "        }",
        "    </script>",
        "</body>",
    ]


def test_script_callbacks_and_arrays():
    source = [
        "<script>",
        "$(function () {",
        "init({",
        "a: [1, 2],",
        "});",
        "});",
        "</script>",
    ]

    assert _format(source) == [
        "<script>",
        "    $(function () {",
        "        init({",
        "            a: [1, 2],",
        "        });",
        "    });",
        "</script>",
    ]


def test_style_body_follows_brace_balance():
    source = ["<style>", ".a {", "color: red;", "}", "</style>", "<p>x</p>"]

    assert _format(source) == [
        "<style>",
        "    .a {",
        "        color: red;",
        "    }",
        "</style>",
        "<p>x</p>",
    ]


def test_unbalanced_script_braces_are_reset_when_script_closes():
    source = ["<div>", "<script>", "if (a) {", "</script>", "<p>x</p>", "</div>"]

    assert _format(source) == [
        "<div>",
        "    <script>",
        "        if (a) {",
        "    </script>",
        "    <p>x</p>",
        "</div>",
    ]


def test_template_tags_inside_script_are_brace_counted():
    source = ["<script>", "{% if debug %}", "log();", "{% endif %}", "</script>"]

    assert _format(source) == [
        "<script>",
        "    {% if debug %}",
        "    log();",
        "    {% endif %}",
        "</script>",
    ]


def test_single_line_script_element():
    source = ["<head>", '<script src="app.js"></script>', "<title>x</title>", "</head>"]

    assert _format(source) == [
        "<head>",
        '    <script src="app.js"></script>',
        "    <title>x</title>",
        "</head>",
    ]


def test_multiline_script_tag_enters_script_body():
    source = ["<script", 'type="module">', "run();", "</script>"]

    assert _format(source) == ["<script", '    type="module">', "    run();", "</script>"]


def test_excess_closers_clamp_at_zero():
    source = ["</div>", "</div>", "{% endif %}", "text", "}"]

    assert _format(source) == ["</div>", "</div>", "{% endif %}", "text", "}"]


def test_void_elements_do_not_indent():
    source = ["<div>", "<br>", '<img src="a.png">', '<input type="text" />', "<p>x</p>", "</div>"]

    assert _format(source) == [
        "<div>",
        "    <br>",
        '    <img src="a.png">',
        '    <input type="text" />',
        "    <p>x</p>",
        "</div>",
    ]


def test_table_cells_keep_row_depth():
    source = ["<tr>", "<td>{{ x }}</td>", "</tr>"]

    assert _format(source) == ["<tr>", "    <td>{{ x }}</td>", "</tr>"]


def test_leading_closers_on_one_line():
    source = ["<div>", "{% if a %}", "x", "{% endif %}</div>", "y"]

    assert _format(source) == ["<div>", "    {% if a %}", "        x", "{% endif %}</div>", "y"]


def test_attribute_with_template_on_one_line():
    source = ["<ul>", '<li class="item {{ active }}">', "x", "</li>", "</ul>"]

    assert _format(source) == [
        "<ul>",
        '    <li class="item {{ active }}">',
        "        x",
        "    </li>",
        "</ul>",
    ]


def test_conditional_attribute_does_not_open_template_block():
    source = ["<div {% if hidden %}hidden{% endif %}>", "text", "</div>"]

    assert _format(source) == ["<div {% if hidden %}hidden{% endif %}>", "    text", "</div>"]


def test_multiline_quoted_attribute_is_collapsed():
    source = [
        '<div class="card {% if active %}',
        "active",
        '{% endif %}">',
        "content",
        "</div>",
    ]

    assert _format(source) == [
        '<div class="card {% if active %} active {% endif %}">',
        "    content",
        "</div>",
    ]


def test_multiline_tag_without_templates_keeps_its_lines():
    source = ["<input", 'type="text"', 'name="q">', "<p>after</p>"]

    assert _format(source) == ["<input", '    type="text"', '    name="q">', "<p>after</p>"]


def test_multiline_opening_tag_indents_its_content():
    source = ["<section", '   class="box">', "text", "</section>"]

    assert _format(source) == ["<section", '    class="box">', "    text", "</section>"]


def test_set_assignment_keeps_depth():
    source = ["{% set total = 0 %}", "<p>{{ total }}</p>"]

    assert _format(source) == ["{% set total = 0 %}", "<p>{{ total }}</p>"]


def test_set_capture_indents_body():
    source = ["{% set body %}", "<p>x</p>", "{% endset %}"]

    assert _format(source) == ["{% set body %}", "    <p>x</p>", "{% endset %}"]


def test_standalone_tags_keep_depth():
    source = ["{% extends 'base.twig' %}", "{% include 'header.twig' %}", "<main>", "</main>"]

    assert _format(source) == source


def test_blocks_and_macros():
    source = [
        "{% block content %}",
        "{% macro input(name) %}",
        '<input name="{{ name }}">',
        "{% endmacro %}",
        "{% endblock %}",
    ]

    assert _format(source) == [
        "{% block content %}",
        "    {% macro input(name) %}",
        '        <input name="{{ name }}">',
        "    {% endmacro %}",
        "{% endblock %}",
    ]


def test_unterminated_attribute_is_dropped_with_warning():
    warnings: list[str] = []

    formatted = format_text('<p>ok</p>\n<div class="{{ a', warn=warnings.append)

    assert formatted == "<p>ok</p>"
    assert len(warnings) == 1
    assert "line 2" in warnings[0]


def test_unterminated_tag_is_flushed_with_warning():
    warnings: list[str] = []

    formatted = format_text("<div\nclass=x", warn=warnings.append)

    assert formatted == "<div\nclass=x"
    assert len(warnings) == 1
    assert "unterminated tag" in warnings[0]


def test_unclosed_comment_warns():
    warnings: list[str] = []

    formatted = format_text("{# open\nstill comment", warn=warnings.append)

    assert formatted == "{# open\nstill comment"
    assert warnings == ["Warning: comment is not closed at the end of the document"]


def test_unclosed_verbatim_warns():
    warnings: list[str] = []

    format_text("{% verbatim %}\n{{ raw }}", warn=warnings.append)

    assert warnings == ["Warning: verbatim block is not closed at the end of the document"]


def test_well_formed_template_emits_no_warnings():
    warnings: list[str] = []

    format_text("{% if a %}\n<p>{{ a }}</p>\n{% endif %}", warn=warnings.append)

    assert warnings == []


def test_empty_document():
    assert format_text("") == ""
    assert format_lines([]) == []


def test_format_range_splices_formatted_lines():
    text = "<div>\n<p>\nx\n</p>\n</div>"

    assert format_range(text, 2, 4) == "<div>\n<p>\n    x\n</p>\n</div>"


def test_format_range_covering_document_matches_format_text():
    text = "<div>\n{% if a %}\nb\n{% endif %}\n</div>"

    assert format_range(text, 1, 5) == format_text(text)


@pytest.mark.parametrize(("start", "end"), [(0, 1), (3, 2), (1, 99)])
def test_format_range_rejects_invalid_ranges(start, end):
    with pytest.raises(InvalidRangeError) as excinfo:
        format_range("a\nb\nc", start, end)

    assert excinfo.value.line_count == 3
    assert f"{start}:{end}" in str(excinfo.value)


def test_format_file_returns_original_and_formatted(tmp_path: Path):
    target = tmp_path / "page.twig"
    target.write_text("{% if a %}\nb\n{% endif %}\n", encoding="utf-8")

    original, formatted = format_file(target, FormatterConfig(indent_size=2))

    assert original == "{% if a %}\nb\n{% endif %}\n"
    assert formatted == "{% if a %}\n  b\n{% endif %}\n"


def test_format_file_with_line_range(tmp_path: Path):
    target = tmp_path / "page.twig"
    target.write_text("<div>\n<p>\nx\n</p>\n</div>", encoding="utf-8")

    _, formatted = format_file(target, line_range=(2, 4))

    assert formatted == "<div>\n<p>\n    x\n</p>\n</div>"


def test_format_file_rejects_out_of_range_lines(tmp_path: Path):
    target = tmp_path / "page.twig"
    target.write_text("a\nb", encoding="utf-8")

    with pytest.raises(FormatFileError, match="Invalid line range"):
        format_file(target, line_range=(1, 5))


def test_format_file_validates_config(tmp_path: Path):
    target = tmp_path / "page.twig"
    target.write_text("a", encoding="utf-8")

    with pytest.raises(FormatFileError, match="indent_size"):
        format_file(target, FormatterConfig(indent_size=0))


def test_format_file_rejects_invalid_utf8(tmp_path: Path):
    target = tmp_path / "binary.twig"
    target.write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(FormatFileError, match="Invalid UTF-8"):
        format_file(target)


def test_format_file_missing_file(tmp_path: Path):
    with pytest.raises(FormatFileError, match="Cannot read"):
        format_file(tmp_path / "missing.twig")


def test_format_file_honours_configured_size_limit(tmp_path: Path):
    target = tmp_path / "page.twig"
    target.write_text("<p>\ntext\n</p>\n", encoding="utf-8")

    with pytest.raises(FormatFileError, match="maximum allowed size of 4 bytes"):
        format_file(target, FormatterConfig(max_file_size=4))


def test_format_content_formats_whole_document_without_range():
    source = "{% if a %}\nb\n{% endif %}"

    assert format_content(source) == format_text(source)


def test_format_content_limits_formatting_to_range():
    source = "<div>\n<p>\nx\n</p>\n</div>"

    assert format_content(source, line_range=(2, 4)) == "<div>\n<p>\n    x\n</p>\n</div>"


def test_less_than_in_text_is_not_a_tag():
    text = "<p>\nif a<b then\nmore\n</p>"

    assert format_text(text, FormatterConfig(indent_size=2)) == "<p>\n  if a<b then\n  more\n</p>"


def test_less_than_in_cell_text_keeps_cell_depth():
    source = ["{% if x %}", "<td>", "n<count", "</td>", "{% endif %}"]

    assert _format(source, indent_size=2) == [
        "{% if x %}",
        "  <td>",
        "    n<count",
        "  </td>",
        "{% endif %}",
    ]
