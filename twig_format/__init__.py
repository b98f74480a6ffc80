"""
twig-format: indentation formatter for Twig templates.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    twig-format templates/base.html.twig --write

Library Usage:
    from twig_format import FormatterConfig, format_text

    formatted = format_text(source, FormatterConfig(indent_size=2))
"""

from .completions import CompletionItem, CompletionSettings, provide_completions
from .config import ConfigError, FormatterConfig
from .exceptions import FormatError, InvalidRangeError
from .formatter import (
    FormatFileError,
    format_content,
    format_file,
    format_line,
    format_lines,
    format_range,
    format_text,
)
from .models import FormatterState, Mode, TemplateTagKind

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "format_text",
    "format_lines",
    "format_line",
    "format_range",
    "format_content",
    "format_file",
    # Data models
    "FormatterConfig",
    "FormatterState",
    "Mode",
    "TemplateTagKind",
    # Completions
    "CompletionItem",
    "CompletionSettings",
    "provide_completions",
    # Exceptions
    "ConfigError",
    "FormatError",
    "FormatFileError",
    "InvalidRangeError",
    # Version
    "__version__",
]
