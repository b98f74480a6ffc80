"""Static completion suggestions for Twig templates.

Suggestions are grouped by the language at the cursor: template tags and
expressions, markup, stylesheet properties inside ``style`` attributes, and
script keywords inside ``<script>`` elements. The template tag vocabulary is
built from the same tables the formatter classifies tags with.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

from .constants import CLOSING_TAGS, MID_BLOCK_TAGS, OPENING_TAGS, SELF_CLOSING_TAGS


class CompletionKind(Enum):
    """Kinds of completion items, mirroring common editor item kinds."""

    KEYWORD = auto()
    FUNCTION = auto()
    OPERATOR = auto()
    CONSTANT = auto()
    PROPERTY = auto()
    METHOD = auto()


@dataclass(frozen=True)
class CompletionItem:
    """A single completion suggestion.

    Attributes:
        label: Text shown in the completion list.
        kind: Kind of the suggestion.
        detail: Short description shown next to the label.
        insert_text: Snippet inserted on acceptance (``$1`` and ``$0`` mark tab
            stops), or None to insert the label.
    """

    label: str
    kind: CompletionKind
    detail: str
    insert_text: str | None = None


@dataclass
class CompletionSettings:
    """Per-language switches for completion providers."""

    twig: bool = True
    html: bool = True
    css: bool = True
    javascript: bool = True


TEMPLATE_TAGS = tuple(
    dict.fromkeys((*OPENING_TAGS, "set", *MID_BLOCK_TAGS, *CLOSING_TAGS, *SELF_CLOSING_TAGS))
)
TEMPLATE_FILTERS = (
    "abs",
    "batch",
    "capitalize",
    "column",
    "convert_encoding",
    "country_name",
    "currency_name",
    "currency_symbol",
    "data_uri",
    "date",
    "date_modify",
    "default",
    "escape",
    "e",
    "filter",
    "first",
    "format",
    "format_currency",
    "format_date",
    "format_datetime",
    "format_number",
    "format_time",
    "inky_to_html",
    "inline_css",
    "join",
    "json_encode",
    "keys",
    "language_name",
    "last",
    "length",
    "locale_name",
    "lower",
    "map",
    "markdown_to_html",
    "merge",
    "nl2br",
    "number_format",
    "raw",
    "reduce",
    "replace",
    "reverse",
    "round",
    "slice",
    "sort",
    "spaceless",
    "split",
    "striptags",
    "title",
    "timezone_name",
    "trim",
    "u",
    "upper",
    "url_encode",
    "slug",
)
TEMPLATE_FUNCTIONS = (
    "attribute",
    "block",
    "constant",
    "country_timezones",
    "cycle",
    "date",
    "dump",
    "html_classes",
    "include",
    "max",
    "min",
    "parent",
    "random",
    "range",
    "source",
    "template_from_string",
)
TEMPLATE_TESTS = ("defined", "null", "empty", "even", "odd", "iterable", "same as", "divisible by")
TEMPLATE_OPERATORS = ("not", "and", "or", "in", "is", "as", "matches", "starts with", "ends with")
TEMPLATE_CONSTANTS = ("true", "false", "null", "none")

HTML_TAGS = (
    "div",
    "span",
    "p",
    "a",
    "img",
    "ul",
    "ol",
    "li",
    "table",
    "tr",
    "td",
    "th",
    "form",
    "input",
    "button",
    "select",
    "option",
    "textarea",
    "label",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "footer",
    "nav",
    "main",
    "section",
    "article",
    "aside",
    "strong",
    "em",
    "code",
    "pre",
)
HTML_ATTRIBUTES = (
    "class",
    "id",
    "style",
    "src",
    "href",
    "alt",
    "title",
    "type",
    "name",
    "value",
    "placeholder",
    "data-",
    "aria-",
    "role",
    "tabindex",
)
CSS_PROPERTIES = (
    "color",
    "background",
    "background-color",
    "border",
    "border-radius",
    "padding",
    "margin",
    "width",
    "height",
    "display",
    "position",
    "top",
    "left",
    "right",
    "bottom",
    "font-size",
    "font-family",
    "font-weight",
    "text-align",
    "text-decoration",
    "flex",
    "grid",
    "opacity",
    "z-index",
)
JS_KEYWORDS = (
    "function",
    "const",
    "let",
    "var",
    "if",
    "else",
    "for",
    "while",
    "return",
    "class",
    "new",
    "this",
    "typeof",
    "async",
    "await",
    "try",
    "catch",
)
JS_METHODS = (
    "console.log",
    "document.querySelector",
    "document.getElementById",
    "addEventListener",
    "fetch",
    "Promise",
    "Array",
    "Object",
    "JSON.parse",
    "JSON.stringify",
    "setTimeout",
    "setInterval",
)

TRIGGER_CHARACTERS = {
    "twig": ("{", "%", "|", " "),
    "html": ("<", " "),
    "css": (":", " "),
    "javascript": (".", " "),
}

_TEMPLATE_OPENERS = re.compile(r"\{\{|\{%|\{#")
_TEMPLATE_CLOSERS = re.compile(r"\}\}|%\}|#\}")
_OPEN_TAG_PREFIX = re.compile(r"<[a-zA-Z0-9-]+\s+[^>]*$")


def _twig_items() -> list[CompletionItem]:
    items = [CompletionItem(tag, CompletionKind.KEYWORD, "Twig tag") for tag in TEMPLATE_TAGS]
    items.extend(
        CompletionItem(name, CompletionKind.FUNCTION, "Twig filter", name)
        for name in TEMPLATE_FILTERS
    )
    items.extend(
        CompletionItem(name, CompletionKind.FUNCTION, "Twig function", f"{name}($1)$0")
        for name in TEMPLATE_FUNCTIONS
    )
    items.extend(
        CompletionItem(name, CompletionKind.OPERATOR, "Twig test") for name in TEMPLATE_TESTS
    )
    items.extend(
        CompletionItem(name, CompletionKind.OPERATOR, "Twig operator")
        for name in TEMPLATE_OPERATORS
    )
    items.extend(
        CompletionItem(name, CompletionKind.CONSTANT, "Twig constant")
        for name in TEMPLATE_CONSTANTS
    )
    return items


def _twig_completions(line_prefix: str, text_before_cursor: str) -> list[CompletionItem]:
    if "{{" not in line_prefix and "{%" not in line_prefix:
        return []
    return _twig_items()


def _html_completions(line_prefix: str, text_before_cursor: str) -> list[CompletionItem]:
    opened = len(_TEMPLATE_OPENERS.findall(text_before_cursor))
    closed = len(_TEMPLATE_CLOSERS.findall(text_before_cursor))
    if opened != closed:
        return []

    items = [
        CompletionItem(tag, CompletionKind.PROPERTY, "HTML tag", f"<{tag}>$1</{tag}>$0")
        for tag in HTML_TAGS
    ]
    if _OPEN_TAG_PREFIX.search(line_prefix):
        items.extend(
            CompletionItem(name, CompletionKind.PROPERTY, "HTML attribute", f'{name}="$1"$0')
            for name in HTML_ATTRIBUTES
        )
    return items


def _css_completions(line_prefix: str, text_before_cursor: str) -> list[CompletionItem]:
    if 'style="' not in line_prefix and "style='" not in line_prefix:
        return []
    return [
        CompletionItem(name, CompletionKind.PROPERTY, "CSS property", f"{name}: $1;$0")
        for name in CSS_PROPERTIES
    ]


def _javascript_completions(line_prefix: str, text_before_cursor: str) -> list[CompletionItem]:
    if text_before_cursor.rfind("<script") <= text_before_cursor.rfind("</script>"):
        return []

    items = [
        CompletionItem(name, CompletionKind.KEYWORD, "JavaScript keyword") for name in JS_KEYWORDS
    ]
    items.extend(
        CompletionItem(
            name,
            CompletionKind.METHOD,
            "JavaScript method",
            f"{name}($1)$0" if "." in name else None,
        )
        for name in JS_METHODS
    )
    return items


_PROVIDERS = {
    "twig": _twig_completions,
    "html": _html_completions,
    "css": _css_completions,
    "javascript": _javascript_completions,
}


def provide_completions(
    text_before_cursor: str,
    trigger_character: str | None = None,
    settings: CompletionSettings | None = None,
) -> list[CompletionItem]:
    """Return the completion items available at a cursor position.

    Each enabled provider inspects the document text before the cursor and
    answers only in its own context. When a trigger character is given, only
    providers registered for that character are asked.

    Args:
        text_before_cursor: Document text from the start up to the cursor.
        trigger_character: Character that triggered the request, if any.
        settings: Per-language switches; all providers are enabled when omitted.

    Returns:
        list[CompletionItem]: Suggestions in provider order (template, markup,
            stylesheet, script).

    Examples:
        provide_completions("{% ")  # template tags, filters, functions...
        provide_completions('<div style="', trigger_character=" ")
    """
    settings = settings or CompletionSettings()
    line_prefix = text_before_cursor.rsplit("\n", 1)[-1]

    items: list[CompletionItem] = []
    for language, provider in _PROVIDERS.items():
        if not getattr(settings, language):
            continue
        if trigger_character is not None and trigger_character not in TRIGGER_CHARACTERS[language]:
            continue
        items.extend(provider(line_prefix, text_before_cursor))
    return items
