"""Data models for twig-format."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class Mode(Enum):
    """Formatter modes used while walking a template line by line.

    Exactly one mode is active at a time.

    Attributes:
        NORMAL: Template and markup lines that are split into runs.
        IN_COMMENT: Inside a ``{# ... #}`` comment spanning several lines.
        IN_VERBATIM: Inside a ``{% verbatim %}`` region.
        IN_SCRIPT: Inside the body of a ``<script>`` element.
        IN_STYLE: Inside the body of a ``<style>`` element.
        IN_ATTRIBUTE: Buffering a markup tag whose attributes span several lines.
    """

    NORMAL = auto()
    IN_COMMENT = auto()
    IN_VERBATIM = auto()
    IN_SCRIPT = auto()
    IN_STYLE = auto()
    IN_ATTRIBUTE = auto()


class TemplateTagKind(Enum):
    """How a template tag affects block nesting.

    Attributes:
        OPENER: Opens a block (``if``, ``for``, ``block``...).
        CLOSER: Closes a block (``endif``, ``endfor``...).
        SELF_CLOSING: Standalone tag that never opens a block (``include``...).
        MID_BLOCK: Closes the current branch and opens the next (``else``).
        OTHER: Anything else, including expressions and plain text.
    """

    OPENER = auto()
    CLOSER = auto()
    SELF_CLOSING = auto()
    MID_BLOCK = auto()
    OTHER = auto()


@dataclass
class FormatterState:
    """Mutable state for a single formatting pass.

    Attributes:
        mode: Current formatter mode.
        template_depth: Nesting depth of open template blocks.
        markup_depth: Nesting depth of open markup tags and script/style braces.
        script_base_depth: Markup depth saved when a script element opened.
        style_base_depth: Markup depth saved when a style element opened.
        attribute_buffer: Raw lines of a multi-line tag being buffered.
        attribute_quote: Quote character that opened the buffered attribute
            value, or None when buffering an unterminated tag.
    """

    mode: Mode = Mode.NORMAL
    template_depth: int = 0
    markup_depth: int = 0
    script_base_depth: int = 0
    style_base_depth: int = 0
    attribute_buffer: list[str] = field(default_factory=list)
    attribute_quote: str | None = None

    @property
    def depth(self) -> int:
        """Combined template and markup depth used to indent emitted lines."""
        return self.template_depth + self.markup_depth
