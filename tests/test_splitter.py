from __future__ import annotations

import pytest

from twig_format.splitter import split_runs


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("<p>{{ name }}</p>", ["<p>", "{{ name }}", "</p>"]),
        ("{% if a %}{% endif %}", ["{% if a %}", "{% endif %}"]),
        ("{{ a }} and {{ b }}", ["{{ a }}", "and", "{{ b }}"]),
        ("  plain text  ", ["plain text"]),
        ("<li>{% if x %}y{% endif %}</li>", ["<li>", "{% if x %}", "y", "{% endif %}", "</li>"]),
        ("{%- if a -%}", ["{%- if a -%}"]),
    ],
)
def test_split_runs(line, expected):
    assert split_runs(line) == expected


def test_blank_line_has_no_runs():
    assert split_runs("   \t ") == []
    assert split_runs("") == []


def test_unterminated_span_stays_in_text_run():
    assert split_runs("{{ a") == ["{{ a"]


def test_spans_are_matched_non_greedily():
    runs = split_runs("{{ a }}{{ b }}")

    assert runs == ["{{ a }}", "{{ b }}"]


def test_runs_are_trimmed_and_non_empty():
    for run in split_runs("  <div>  {{ a }}   {% if b %}  text  "):
        assert run
        assert run == run.strip()
