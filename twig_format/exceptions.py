"""Package-specific exception types."""

from __future__ import annotations


class FormatError(ValueError):
    """Base class for formatting-related errors.

    Formatting decisions themselves never raise; these errors describe invalid
    requests made to the formatter.
    """


class InvalidRangeError(FormatError):
    """Raised when a line range does not fit inside the document.

    Args:
        start_line: One-based first line of the requested range.
        end_line: One-based last line of the requested range (inclusive).
        line_count: Number of lines in the document.
    """

    def __init__(self, start_line: int, end_line: int, line_count: int):
        self.start_line = start_line
        self.end_line = end_line
        self.line_count = line_count
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return (
            f"Invalid line range {self.start_line}:{self.end_line} "
            f"for a document of {self.line_count} lines"
        )
