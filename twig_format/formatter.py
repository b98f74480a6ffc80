"""Line-by-line reformatting of Twig templates."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from .attributes import (
    attribute_closed,
    collapse_attribute,
    contains_template_delimiter,
    ends_inside_tag,
    is_single_line_attribute,
    mask_tag_templates,
    match_attribute_start,
)
from .classifiers import (
    closes_script,
    closes_style,
    closes_template_block,
    is_mid_block_tag,
    is_template_inside_attribute,
    opens_script,
    opens_style,
    opens_template_block,
    should_decrease_markup,
    should_increase_markup,
)
from .config import ConfigError, FormatterConfig, validate_config
from .constants import (
    BLOCK_CLOSERS,
    BLOCK_OPENERS,
    COMMENT_CLOSE,
    COMMENT_OPEN,
    TAG_START_PATTERN,
    VERBATIM_CLOSE_PATTERN,
    VERBATIM_OPEN_PATTERN,
)
from .exceptions import InvalidRangeError
from .filesystem import TemplateFileError, read_template
from .models import FormatterState, Mode
from .splitter import split_runs


def _indent(state: FormatterState, config: FormatterConfig, text: str) -> str:
    return f"{config.indent_unit * state.depth}{text}"


def _brace_delta(text: str) -> int:
    """Net number of block openers (``{``, ``[``) minus closers on a line.

    Examples:
        _brace_delta("function () {")  # 1
        _brace_delta("});")  # -1
    """
    opened = sum(text.count(character) for character in BLOCK_OPENERS)
    closed = sum(text.count(character) for character in BLOCK_CLOSERS)
    return opened - closed


def _open_embedded(state: FormatterState, text: str) -> bool:
    """Enter a script or style body, saving the markup depth as its base."""
    if opens_script(text):
        state.script_base_depth = state.markup_depth
        state.mode = Mode.IN_SCRIPT
    elif opens_style(text):
        state.style_base_depth = state.markup_depth
        state.mode = Mode.IN_STYLE
    else:
        return False

    state.markup_depth += 1
    return True


def _try_enter_embedded(
    state: FormatterState, text: str, config: FormatterConfig, output: list[str]
) -> bool:
    """Emit a ``<script>`` or ``<style>`` opening tag and enter its body.

    The opening line keeps the current indent; the body is indented one level
    deeper.

    Args:
        state: Formatter state to update.
        text: Trimmed line (or collapsed tag) to inspect.
        config: Formatting options.
        output: Emitted lines are appended here.

    Returns:
        bool: True when the line opened a script or style element.
    """
    if state.mode is not Mode.NORMAL:
        return False

    line = _indent(state, config, text)
    if not _open_embedded(state, text):
        return False

    output.append(line)
    return True


def _continuation(indent: str, lines: list[str], config: FormatterConfig) -> list[str]:
    """Indent the trailing lines of a multi-line tag one level deeper."""
    output: list[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped:
            output.append(f"{indent}{config.indent_unit}{stripped}")
        elif config.preserve_blank_lines:
            output.append("")
    return output


def _format_runs(
    state: FormatterState,
    text: str,
    config: FormatterConfig,
    output: list[str],
    continuation: list[str] | None = None,
) -> None:
    """Classify the runs of a normal line and emit the line once.

    Runs are processed left to right: closing runs lower the depth before the
    line is emitted, opening runs raise it afterwards. The line is indented at
    the depth reached after its leading closing runs. Template spans inside
    markup tags are masked out before splitting so they never change depth.

    Args:
        state: Formatter state to update.
        text: Trimmed line to emit.
        config: Formatting options.
        output: Emitted lines are appended here.
        continuation: Further lines of a multi-line tag; classified together
            with `text` and emitted one level deeper.
    """
    continuation = continuation or []
    classified = " ".join([text, *(line.strip() for line in continuation if line.strip())])
    line_depth: int | None = None
    leading = True

    for run in split_runs(mask_tag_templates(classified)):
        if is_template_inside_attribute(run):
            if leading:
                line_depth = state.depth
            leading = False
            continue

        closes_markup = should_decrease_markup(run)
        if closes_markup:
            state.markup_depth = max(0, state.markup_depth - 1)

        # Mid-block tags close the preceding branch here and reopen below.
        closes_block = closes_template_block(run)
        if closes_block:
            state.template_depth = max(0, state.template_depth - 1)

        if leading:
            line_depth = state.depth
        leading = leading and (closes_markup or closes_block) and not is_mid_block_tag(run)

        if opens_template_block(run):
            state.template_depth += 1

        if is_mid_block_tag(run):
            state.template_depth += 1

        if should_increase_markup(run):
            state.markup_depth += 1

    if line_depth is None:
        line_depth = state.depth

    indent = config.indent_unit * line_depth
    output.append(f"{indent}{text}")
    output.extend(_continuation(indent, continuation, config))


def _emit_tag(
    state: FormatterState, lines: list[str], config: FormatterConfig, output: list[str]
) -> None:
    """Emit a buffered tag, collapsing it when it embeds template spans."""
    state.mode = Mode.NORMAL
    state.attribute_buffer = []
    state.attribute_quote = None

    if contains_template_delimiter("\n".join(lines)):
        collapsed = collapse_attribute(lines)
        if not _try_enter_embedded(state, collapsed, config, output):
            _format_runs(state, collapsed, config, output)
        return

    first = lines[0].strip()
    joined = " ".join(line.strip() for line in lines if line.strip())
    indent = config.indent_unit * state.depth
    if _open_embedded(state, joined):
        output.append(f"{indent}{first}")
        output.extend(_continuation(indent, lines[1:], config))
        return
    _format_runs(state, first, config, output, continuation=lines[1:])


def _try_continue_attribute(
    state: FormatterState, line: str, config: FormatterConfig, output: list[str]
) -> bool:
    """Buffer the next line of a multi-line attribute or tag.

    A value opened with a quote is closed once the buffered text holds an even
    number of that quote; buffering then continues while the tag itself is
    still open. The buffer is emitted when the tag closes.

    Returns:
        bool: True when the line was consumed by the buffer.
    """
    if state.mode is not Mode.IN_ATTRIBUTE:
        return False

    state.attribute_buffer.append(line)
    buffered = "\n".join(state.attribute_buffer)

    if state.attribute_quote is not None:
        if not attribute_closed(buffered, state.attribute_quote):
            return True
        state.attribute_quote = None

    if ends_inside_tag(buffered):
        return True

    _emit_tag(state, state.attribute_buffer, config, output)
    return True


def _try_start_attribute(state: FormatterState, line: str) -> bool:
    """Start buffering a quoted attribute value that continues on later lines.

    Returns:
        bool: True when the line opened a multi-line attribute.
    """
    if state.mode is not Mode.NORMAL:
        return False

    quote = match_attribute_start(line)
    if quote is None:
        return False

    state.mode = Mode.IN_ATTRIBUTE
    state.attribute_quote = quote
    state.attribute_buffer = [line]
    return True


def _try_start_tag(state: FormatterState, line: str) -> bool:
    """Start buffering a markup tag whose attributes continue on later lines.

    Only a line that begins with a tag name followed by whitespace or the end
    of the line qualifies, so text such as `if a<b then` stays a normal line.

    Returns:
        bool: True when the line opens a tag that is still open at its end.
    """
    if state.mode is not Mode.NORMAL or not TAG_START_PATTERN.match(line):
        return False
    if not ends_inside_tag(line):
        return False

    state.mode = Mode.IN_ATTRIBUTE
    state.attribute_quote = None
    state.attribute_buffer = [line]
    return True


def _try_single_line_attribute(
    state: FormatterState, line: str, config: FormatterConfig, output: list[str]
) -> bool:
    if state.mode is not Mode.NORMAL or not is_single_line_attribute(line):
        return False

    _emit_tag(state, [line], config, output)
    return True


def _try_blank_line(line: str, config: FormatterConfig, output: list[str]) -> bool:
    if line.strip():
        return False

    if config.preserve_blank_lines:
        output.append("")
    return True


def _try_comment(
    state: FormatterState, trimmed: str, config: FormatterConfig, output: list[str]
) -> bool:
    """Emit comment lines without interpreting them.

    A line containing ``{#`` opens the region and the line containing ``#}``
    closes it; both are part of the region.

    Returns:
        bool: True when the line belongs to a comment region.
    """
    if state.mode is Mode.NORMAL and COMMENT_OPEN in trimmed:
        state.mode = Mode.IN_COMMENT

    if state.mode is not Mode.IN_COMMENT:
        return False

    output.append(_indent(state, config, trimmed))
    if COMMENT_CLOSE in trimmed:
        state.mode = Mode.NORMAL
    return True


def _try_verbatim(
    state: FormatterState, trimmed: str, config: FormatterConfig, output: list[str]
) -> bool:
    """Emit verbatim region lines at the current indent without interpreting them.

    Returns:
        bool: True when the line belongs to a verbatim region.
    """
    if state.mode is Mode.NORMAL and VERBATIM_OPEN_PATTERN.search(trimmed):
        state.mode = Mode.IN_VERBATIM

    if state.mode is not Mode.IN_VERBATIM:
        return False

    output.append(_indent(state, config, trimmed))
    if VERBATIM_CLOSE_PATTERN.search(trimmed):
        state.mode = Mode.NORMAL
    return True


def _try_exit_embedded(
    state: FormatterState, trimmed: str, config: FormatterConfig, output: list[str]
) -> bool:
    """Restore the saved base depth when a script or style element closes.

    Returns:
        bool: True when the line closed the active script or style element.
    """
    if state.mode is Mode.IN_SCRIPT and closes_script(trimmed):
        state.markup_depth = state.script_base_depth
    elif state.mode is Mode.IN_STYLE and closes_style(trimmed):
        state.markup_depth = state.style_base_depth
    else:
        return False

    state.mode = Mode.NORMAL
    output.append(_indent(state, config, trimmed))
    return True


def _try_embedded_body(
    state: FormatterState, trimmed: str, config: FormatterConfig, output: list[str]
) -> bool:
    """Indent script or style content by counting braces and brackets.

    A line that closes more blocks than it opens is dedented before it is
    emitted; a line that opens more blocks than it closes only indents the
    lines that follow it.

    Returns:
        bool: True when the line is part of a script or style body.
    """
    if state.mode not in (Mode.IN_SCRIPT, Mode.IN_STYLE):
        return False

    delta = _brace_delta(trimmed)
    if delta < 0:
        state.markup_depth = max(0, state.markup_depth + delta)

    output.append(_indent(state, config, trimmed))

    if delta > 0:
        state.markup_depth += delta
    return True


def format_line(state: FormatterState, line: str, config: FormatterConfig) -> list[str]:
    """Apply one source line to the formatter state.

    Rules are tried in order and the first one that applies wins: buffered
    multi-line attributes and tags, single-line attributes with template
    spans, blank lines, comment and verbatim regions, script and style
    elements, and finally normal template and markup lines.

    Args:
        state: Formatter state for the current pass; updated in place.
        line: Raw source line without its line terminator.
        config: Formatting options. Not validated here.

    Returns:
        list[str]: Output lines produced by this line. Empty while a
            multi-line attribute is being buffered or when a blank line is
            dropped.

    Examples:
        state = FormatterState()
        format_line(state, "{% if user %}", FormatterConfig())  # ["{% if user %}"]
        format_line(state, "hello", FormatterConfig())  # ["    hello"]
    """
    output: list[str] = []
    trimmed = line.strip()

    if _try_continue_attribute(state, line, config, output):
        return output

    if _try_start_attribute(state, line):
        return output

    if _try_start_tag(state, line):
        return output

    if _try_single_line_attribute(state, line, config, output):
        return output

    if _try_blank_line(line, config, output):
        return output

    if _try_comment(state, trimmed, config, output):
        return output

    if _try_verbatim(state, trimmed, config, output):
        return output

    if _try_enter_embedded(state, trimmed, config, output):
        return output

    if _try_exit_embedded(state, trimmed, config, output):
        return output

    if _try_embedded_body(state, trimmed, config, output):
        return output

    _format_runs(state, trimmed, config, output)
    return output


def _finish(
    state: FormatterState,
    config: FormatterConfig,
    buffer_start: int,
    warn: Callable[[str], None] | None,
) -> list[str]:
    """Handle regions still open at the end of the document."""
    output: list[str] = []

    if state.mode is Mode.IN_ATTRIBUTE:
        if state.attribute_quote is not None:
            # An attribute value that never closes is dropped from the output.
            if warn is not None:
                warn(
                    f"Warning: unterminated attribute value starting at line {buffer_start} "
                    "was dropped"
                )
        else:
            if warn is not None:
                warn(f"Warning: unterminated tag starting at line {buffer_start}")
            output.extend(
                _indent(state, config, line.strip())
                for line in state.attribute_buffer
                if line.strip()
            )
    elif state.mode is Mode.IN_COMMENT and warn is not None:
        warn("Warning: comment is not closed at the end of the document")
    elif state.mode is Mode.IN_VERBATIM and warn is not None:
        warn("Warning: verbatim block is not closed at the end of the document")

    return output


def format_lines(
    lines: list[str],
    config: FormatterConfig | None = None,
    warn: Callable[[str], None] | None = None,
) -> list[str]:
    """Reformat a sequence of template lines in a single pass.

    Args:
        lines: Source lines without line terminators.
        config: Formatting options. Defaults to a new `FormatterConfig` when
            omitted; not validated.
        warn: Optional callback for non-fatal diagnostics (unterminated
            attributes or tags, unclosed comment or verbatim regions).

    Returns:
        list[str]: Reformatted lines.

    Examples:
        format_lines(["{% if x %}", "y", "{% endif %}"])
        # ["{% if x %}", "    y", "{% endif %}"]
    """
    config = config or FormatterConfig()
    state = FormatterState()
    output: list[str] = []
    buffer_start = 0

    for line_number, line in enumerate(lines, start=1):
        if state.mode is not Mode.IN_ATTRIBUTE:
            buffer_start = line_number
        output.extend(format_line(state, line, config))

    output.extend(_finish(state, config, buffer_start, warn))
    return output


def format_text(
    text: str,
    config: FormatterConfig | None = None,
    warn: Callable[[str], None] | None = None,
) -> str:
    """Reformat Twig template source.

    Never raises for malformed templates: unbalanced tags leave the depth
    counters clamped at zero and the output is still produced.

    Args:
        text: Template source. Lines are split on ``\\n``.
        config: Formatting options. Defaults to a new `FormatterConfig` when
            omitted; not validated.
        warn: Optional callback for non-fatal diagnostics.

    Returns:
        str: Reformatted source joined with ``\\n``.

    Examples:
        format_text("{% if x %}\\nhello\\n{% endif %}", FormatterConfig(indent_size=2))
        # "{% if x %}\\n  hello\\n{% endif %}"
    """
    return "\n".join(format_lines(text.split("\n"), config, warn))


def format_range(
    text: str,
    start_line: int,
    end_line: int,
    config: FormatterConfig | None = None,
    warn: Callable[[str], None] | None = None,
) -> str:
    """Reformat a range of lines and splice it back into the document.

    The range is formatted as a document of its own, starting from a fresh
    state; lines outside the range are returned unchanged.

    Args:
        text: Full document source.
        start_line: One-based first line of the range.
        end_line: One-based last line of the range (inclusive).
        config: Formatting options.
        warn: Optional callback for non-fatal diagnostics.

    Returns:
        str: The document with the range reformatted.

    Raises:
        InvalidRangeError: If the range is empty, reversed, or extends past
            the end of the document.

    Examples:
        format_range("<div>\\n<p>\\nx\\n</p>\\n</div>", 2, 4)
    """
    lines = text.split("\n")
    if start_line < 1 or end_line < start_line or end_line > len(lines):
        raise InvalidRangeError(start_line, end_line, len(lines))

    formatted = format_lines(lines[start_line - 1 : end_line], config, warn)
    return "\n".join([*lines[: start_line - 1], *formatted, *lines[end_line:]])


def format_content(
    text: str,
    config: FormatterConfig | None = None,
    warn: Callable[[str], None] | None = None,
    line_range: tuple[int, int] | None = None,
) -> str:
    """Reformat a whole document, or only ``line_range`` when one is given.

    Raises:
        InvalidRangeError: If `line_range` falls outside the document.
    """
    if line_range is None:
        return format_text(text, config, warn)
    return format_range(text, *line_range, config=config, warn=warn)


class FormatFileError(Exception):
    """Raised when formatting a template file fails."""


def format_file(
    filepath: Path,
    config: FormatterConfig | None = None,
    warn: Callable[[str], None] | None = None,
    line_range: tuple[int, int] | None = None,
) -> tuple[str, str]:
    """Read and reformat a template file.

    Args:
        filepath: Path to the template to format.
        config: Formatting options; defaults to a new `FormatterConfig` when
            omitted. Validated before the file is read.
        warn: Optional callback for non-fatal diagnostics.
        line_range: Optional one-based, inclusive ``(start, end)`` range; only
            those lines are reformatted.

    Returns:
        tuple[str, str]: The original content and the reformatted content.

    Raises:
        FormatFileError: If the configuration or the line range is invalid, or
            the file cannot be read or decoded.

    Examples:
        original, formatted = format_file(Path("templates/base.html.twig"))
        original, formatted = format_file(Path("page.twig"), line_range=(10, 20))
    """
    config = config or FormatterConfig()
    try:
        validate_config(config)
    except ConfigError as error:
        raise FormatFileError(str(error)) from error

    try:
        template = read_template(filepath, config.max_file_size)
    except TemplateFileError as error:
        raise FormatFileError(str(error)) from error

    try:
        formatted = format_content(template.content, config, warn, line_range)
    except InvalidRangeError as error:
        raise FormatFileError(f"{filepath}: {error}") from error
    return template.content, formatted
