"""Predicates classifying template tags and markup runs."""

from __future__ import annotations

import re

from .constants import (
    MARKUP_CLOSING_PATTERN,
    MARKUP_OPENING_PATTERN,
    MARKUP_SELF_CLOSING_PATTERN,
    OPENING_TAGS,
    SCRIPT_CLOSE_PATTERN,
    SCRIPT_OPEN_PATTERN,
    STYLE_CLOSE_PATTERN,
    STYLE_OPEN_PATTERN,
    TEMPLATE_IN_ATTRIBUTE_PATTERN,
    TEMPLATE_TAG_KINDS,
    TEMPLATE_TAG_PATTERN,
)
from .models import TemplateTagKind

SINGLE_LINE_BLOCK_PATTERN = re.compile(
    rf"\{{%[-~]?\s*({'|'.join(OPENING_TAGS)})\b.*?%\}}.*\{{%[-~]?\s*end\1\s*[-~]?%\}}"
)


def template_tag_name(run: str) -> str | None:
    """Return the name of the first template tag in a run.

    Args:
        run: Text run, usually a single ``{% ... %}`` span.

    Returns:
        str | None: Tag name such as ``"if"`` or ``"endfor"``, or None when the
            run holds no ``{% ... %}`` tag.

    Examples:
        template_tag_name("{%- if user %}")  # "if"
        template_tag_name("{{ user }}")  # None
    """
    match = TEMPLATE_TAG_PATTERN.search(run)
    if match is None:
        return None
    return match.group("name")


def classify_template_tag(run: str) -> TemplateTagKind:
    """Classify a run by the template tag it starts with.

    The kind is looked up by tag name. Two tags depend on their arguments:
    ``set`` opens a block only in its capture form (``{% set name %}``), and
    ``block`` with a value after its name is the shortcut form that never
    opens a block.

    Args:
        run: Text run to classify.

    Returns:
        TemplateTagKind: Kind of the tag, `TemplateTagKind.OTHER` for
            expressions, plain text and unknown tags.

    Examples:
        classify_template_tag("{% for item in items %}")  # OPENER
        classify_template_tag("{% set total = 0 %}")  # OTHER
        classify_template_tag("{% set body %}")  # OPENER
    """
    match = TEMPLATE_TAG_PATTERN.search(run)
    if match is None:
        return TemplateTagKind.OTHER

    name = match.group("name")
    args = match.group("args").strip()

    if name == "set":
        if args and "=" not in args:
            return TemplateTagKind.OPENER
        return TemplateTagKind.OTHER

    if name == "block" and len(args.split()) > 1:
        return TemplateTagKind.SELF_CLOSING

    return TEMPLATE_TAG_KINDS.get(name, TemplateTagKind.OTHER)


def is_single_line_block(text: str) -> bool:
    """Check whether an opening tag and its matching end tag share the text.

    The formatter splits lines into runs before classifying them, so a run
    never holds both tags; this guards callers that classify unsplit text
    with `opens_template_block`.

    Examples:
        is_single_line_block("{% if x %}y{% endif %}")  # True
        is_single_line_block("{% if x %}")  # False
    """
    return SINGLE_LINE_BLOCK_PATTERN.search(text) is not None


def opens_template_block(run: str) -> bool:
    """Check whether a run increases the template depth after it is emitted."""
    return classify_template_tag(run) is TemplateTagKind.OPENER and not is_single_line_block(run)


def closes_template_block(run: str) -> bool:
    """Check whether a run decreases the template depth before it is emitted.

    Mid-block tags close the preceding branch, so they count as closers here.
    """
    return classify_template_tag(run) in (TemplateTagKind.CLOSER, TemplateTagKind.MID_BLOCK)


def is_mid_block_tag(run: str) -> bool:
    return classify_template_tag(run) is TemplateTagKind.MID_BLOCK


def is_template_inside_attribute(run: str) -> bool:
    """Check whether a run is a template span inside a quoted attribute value.

    Such runs are emitted as they are and never change nesting depth.

    Examples:
        is_template_inside_attribute('class="{{ cls }}"')  # True
    """
    return TEMPLATE_IN_ATTRIBUTE_PATTERN.search(run) is not None


def is_markup_opening(run: str) -> bool:
    return MARKUP_OPENING_PATTERN.search(run) is not None


def is_markup_closing(run: str) -> bool:
    return MARKUP_CLOSING_PATTERN.search(run) is not None


def is_markup_self_closing(run: str) -> bool:
    """Check whether a run ends with a void element or a ``/>`` tag.

    Examples:
        is_markup_self_closing('<img src="a.png">')  # True
        is_markup_self_closing("<my-icon />")  # True
        is_markup_self_closing("<div>")  # False
    """
    trimmed = run.strip()
    return MARKUP_SELF_CLOSING_PATTERN.search(trimmed) is not None or trimmed.endswith("/>")


def is_complete_markup(run: str) -> bool:
    """Check whether a run both opens and closes markup (``<p>text</p>``)."""
    return is_markup_opening(run) and is_markup_closing(run)


def should_decrease_markup(run: str) -> bool:
    """Check whether a run closes a markup element before it is emitted."""
    return (
        not is_complete_markup(run)
        and is_markup_closing(run)
        and not is_markup_self_closing(run)
    )


def should_increase_markup(run: str) -> bool:
    """Check whether a run opens a markup element after it is emitted."""
    return (
        not is_complete_markup(run)
        and is_markup_opening(run)
        and not is_markup_self_closing(run)
        and not is_markup_closing(run)
    )


def opens_script(line: str) -> bool:
    return SCRIPT_OPEN_PATTERN.search(line) is not None and not closes_script(line)


def closes_script(line: str) -> bool:
    return SCRIPT_CLOSE_PATTERN.search(line) is not None


def opens_style(line: str) -> bool:
    return STYLE_OPEN_PATTERN.search(line) is not None and not closes_style(line)


def closes_style(line: str) -> bool:
    return STYLE_CLOSE_PATTERN.search(line) is not None
