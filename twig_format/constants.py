"""Constants used across the twig-format package."""

from __future__ import annotations

import re

from .models import TemplateTagKind

# Template tag vocabulary
OPENING_TAGS = (
    "block",
    "for",
    "if",
    "macro",
    "embed",
    "autoescape",
    "spaceless",
    "trans",
    "apply",
    "cache",
    "sandbox",
    "with",
    "verbatim",
)
CLOSING_TAGS = (
    "endblock",
    "endfor",
    "endif",
    "endmacro",
    "endset",
    "endembed",
    "endautoescape",
    "endspaceless",
    "endtrans",
    "endapply",
    "endcache",
    "endsandbox",
    "endwith",
    "endverbatim",
)
MID_BLOCK_TAGS = ("else", "elseif")
SELF_CLOSING_TAGS = ("include", "import", "from", "use", "extends", "do", "flush", "deprecated")

# `set` is resolved by the classifier: only the capture form opens a block.
TEMPLATE_TAG_KINDS: dict[str, TemplateTagKind] = {
    **{name: TemplateTagKind.OPENER for name in OPENING_TAGS},
    **{name: TemplateTagKind.CLOSER for name in CLOSING_TAGS},
    **{name: TemplateTagKind.MID_BLOCK for name in MID_BLOCK_TAGS},
    **{name: TemplateTagKind.SELF_CLOSING for name in SELF_CLOSING_TAGS},
}

# Markup elements that never take a closing tag
VOID_ELEMENTS = (
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
)

# Template delimiters
TEMPLATE_SPAN_PATTERN = re.compile(r"(\{%.*?%\}|\{\{.*?\}\})")
TEMPLATE_TAG_PATTERN = re.compile(r"\{%[-~]?\s*(?P<name>\w+)(?P<args>.*?)\s*[-~]?%\}")
TEMPLATE_OPEN_PATTERN = re.compile(r"\{[{%]")
COMMENT_OPEN = "{#"
COMMENT_CLOSE = "#}"
VERBATIM_OPEN_PATTERN = re.compile(r"\{%[-~]?\s*verbatim\s*[-~]?%\}")
VERBATIM_CLOSE_PATTERN = re.compile(r"\{%[-~]?\s*endverbatim\s*[-~]?%\}")

# Markup patterns
MARKUP_OPENING_PATTERN = re.compile(r"<[a-zA-Z][a-zA-Z0-9:\-]*(\s[^<>]*)?>")
MARKUP_CLOSING_PATTERN = re.compile(r"</[a-zA-Z][a-zA-Z0-9:\-]*>")
MARKUP_SELF_CLOSING_PATTERN = re.compile(
    rf"<({'|'.join(VOID_ELEMENTS)})(\s[^>]*)?/?>$", re.IGNORECASE
)
SCRIPT_OPEN_PATTERN = re.compile(r"<script[^>]*>", re.IGNORECASE)
SCRIPT_CLOSE_PATTERN = re.compile(r"</script>", re.IGNORECASE)
STYLE_OPEN_PATTERN = re.compile(r"<style[^>]*>", re.IGNORECASE)
STYLE_CLOSE_PATTERN = re.compile(r"</style>", re.IGNORECASE)

# Attribute patterns
TAG_START_PATTERN = re.compile(r"^\s*<[A-Za-z][\w:\-]*(\s|$)")
ATTRIBUTE_START_PATTERN = re.compile(
    r"<[\w\-]+[^>]*(class|style|[a-zA-Z\-]+)=(?P<quote>['\"])([^'\"]*(\{%|\{\{)[^'\"]*)$"
)
SINGLE_LINE_ATTRIBUTE_PATTERN = re.compile(r"<[\w\-]+[^>]*=['\"][^'\"]*(\{%|\{\{)[^'\"]*['\"][^>]*>")
TEMPLATE_IN_ATTRIBUTE_PATTERN = re.compile(r"[a-zA-Z0-9\-]+=([\"']).*\{[{%].*\1")
QUOTED_VALUE_PATTERN = re.compile(r"=\s*(['\"])(.*)\1")

# Embedded script and stylesheet brace accounting
BLOCK_OPENERS = "{["
BLOCK_CLOSERS = "}]"

# Configuration defaults
DEFAULT_INDENT_SIZE = 4
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
TEMPLATE_EXTENSIONS = (".twig",)
