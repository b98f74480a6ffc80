"""Collapsing markup attributes that embed template expressions."""

from __future__ import annotations

import re

from .constants import (
    ATTRIBUTE_START_PATTERN,
    QUOTED_VALUE_PATTERN,
    SINGLE_LINE_ATTRIBUTE_PATTERN,
    TEMPLATE_OPEN_PATTERN,
)

_NEWLINE_RUN = re.compile(r"\s*\n\s*")
_WHITESPACE_RUN = re.compile(r"\s{2,}")
_BEFORE_FIRST_TEMPLATE = re.compile(r"^([^{%]+?)\s*(\{[{%])")
_AFTER_LAST_TEMPLATE = re.compile(r"(%\}|\}\})\s*$")
_LOOSE_BEFORE_TEMPLATE = re.compile(r"([^{%]+?)\s*(\{[{%])")
_LOOSE_AFTER_TEMPLATE = re.compile(r"(%\}|\}\})\s*(['\"])")

_TEMPLATE_SPAN_CLOSERS = {"{{": "}}", "{%": "%}", "{#": "#}"}


def contains_template_delimiter(text: str) -> bool:
    """Check whether text contains a ``{{`` or ``{%`` delimiter."""
    return TEMPLATE_OPEN_PATTERN.search(text) is not None


def collapse_attribute(lines: list[str]) -> str:
    """Collapse a (possibly multi-line) attribute into a single line.

    Lines are joined with single spaces and whitespace runs are collapsed.
    When the result contains template delimiters, the quoted attribute value
    is normalized so that exactly one space separates the text before the
    first template span from it; the value itself is trimmed. When no quoted
    value can be located, the same spacing rule is applied to the whole text.

    Args:
        lines: Raw source lines forming one tag or attribute.

    Returns:
        str: The collapsed, trimmed line.

    Examples:
        collapse_attribute(['<div', '  class="a {{ b }} c">'])
        # '<div class="a {{ b }} c">'
        collapse_attribute(['<a href="', "   {{ url }}", '">'])
        # '<a href="{{ url }}">'
    """
    collapsed = " ".join(lines)
    collapsed = _NEWLINE_RUN.sub(" ", collapsed)
    collapsed = _WHITESPACE_RUN.sub(" ", collapsed)

    if not contains_template_delimiter(collapsed):
        return collapsed.strip()

    value_match = QUOTED_VALUE_PATTERN.search(collapsed)
    if value_match:
        quote = value_match.group(1)
        value = value_match.group(2)
        value = _BEFORE_FIRST_TEMPLATE.sub(
            lambda match: f"{match.group(1).strip()} {match.group(2)}", value, count=1
        )
        value = _AFTER_LAST_TEMPLATE.sub(lambda match: f"{match.group(1)} ", value, count=1)
        value = _WHITESPACE_RUN.sub(" ", value).strip()
        collapsed = (
            f"{collapsed[: value_match.start()]}={quote}{value}{quote}"
            f"{collapsed[value_match.end() :]}"
        )
    else:
        collapsed = _LOOSE_BEFORE_TEMPLATE.sub(
            lambda match: f"{match.group(1).strip()} {match.group(2)}", collapsed, count=1
        )
        collapsed = _LOOSE_AFTER_TEMPLATE.sub(r"\1 \2", collapsed)
        collapsed = _WHITESPACE_RUN.sub(" ", collapsed)

    return collapsed.strip()


def match_attribute_start(line: str) -> str | None:
    """Detect a tag line whose quoted attribute value continues on the next line.

    The value must open with a quote, contain a template delimiter and not be
    closed before the end of the line.

    Args:
        line: Raw source line.

    Returns:
        str | None: The quote character that opened the value, or None when
            the line does not start a multi-line attribute.

    Examples:
        match_attribute_start('<div class="{% if active %}')  # '"'
        match_attribute_start('<div class="{{ cls }}">')  # None
    """
    if "=" not in line or not contains_template_delimiter(line):
        return None

    match = ATTRIBUTE_START_PATTERN.search(line)
    if match is None:
        return None
    return match.group("quote")


def is_single_line_attribute(line: str) -> bool:
    """Check whether a tag line holds a complete attribute with a template span."""
    if "=" not in line or not contains_template_delimiter(line):
        return False
    return SINGLE_LINE_ATTRIBUTE_PATTERN.search(line) is not None


def attribute_closed(text: str, quote: str) -> bool:
    """Check whether the quoted value opened in `text` has been closed.

    The value is closed once the quote character occurs an even number of
    times. Escaped quote characters are counted like any other quote.

    Examples:
        attribute_closed('<div class="a\\n b">', '"')  # True
        attribute_closed('<div class="a', '"')  # False
    """
    return text.count(quote) % 2 == 0


def ends_inside_tag(text: str) -> bool:
    """Check whether text ends inside an unterminated markup tag.

    A ``<`` followed by a letter or ``/`` starts a tag, which ends at the next
    ``>`` outside a quoted attribute value. Template spans (``{{ }}``,
    ``{% %}``, ``{# #}``) are skipped so that comparisons inside them never
    close a tag; an unterminated template span inside a tag keeps it open.

    Args:
        text: One line, or several buffered lines joined with newlines.

    Returns:
        bool: True when the last tag opened in `text` is still open.

    Examples:
        ends_inside_tag("<div")  # True
        ends_inside_tag('<div class="{{ a > b }}">')  # False
        ends_inside_tag("{% if a < b %}")  # False
    """
    return _scan_tags(text)[1]


def mask_tag_templates(text: str) -> str:
    """Remove template spans that sit inside markup tags.

    Used to classify a tag line by its markup alone: conditional attributes
    such as ``<div {% if hidden %}hidden{% endif %}>`` or values such as
    ``class="{{ cls }}"`` never change nesting depth.

    Examples:
        mask_tag_templates('<div class="{{ cls }}">{{ body }}')
        # '<div class="">{{ body }}'
    """
    return _scan_tags(text)[0]


def _scan_tags(text: str) -> tuple[str, bool]:
    masked: list[str] = []
    in_tag = False
    quote: str | None = None
    position = 0
    length = len(text)

    while position < length:
        closer = _TEMPLATE_SPAN_CLOSERS.get(text[position : position + 2])
        if closer is not None:
            end = text.find(closer, position + 2)
            if end == -1:
                masked.append(text[position:])
                break
            if not in_tag:
                masked.append(text[position : end + 2])
            position = end + 2
            continue

        character = text[position]
        masked.append(character)
        if in_tag:
            if quote is not None:
                if character == quote:
                    quote = None
            elif character in "\"'":
                quote = character
            elif character == ">":
                in_tag = False
        elif character == "<" and position + 1 < length:
            following = text[position + 1]
            if following.isalpha() or following == "/":
                in_tag = True
        position += 1

    return "".join(masked), in_tag
