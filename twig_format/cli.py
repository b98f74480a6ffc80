"""
Reformats a Twig template.
Prints the formatted template to stdout, or rewrites it in place with --write.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from .config import ConfigError, build_config
from .exceptions import InvalidRangeError
from .filesystem import (
    TemplateFileError,
    max_file_size,
    read_template,
    resolve_template,
    write_template,
)
from .formatter import format_content

__all__ = ["cli"]


def parse_line_range(value: str) -> tuple[int, int]:
    """Parse a ``START:END`` line range given on the command line.

    Args:
        value: One-based, inclusive range such as ``"10:25"``.

    Returns:
        tuple[int, int]: The start and end line numbers.

    Raises:
        click.BadParameter: If the value is not two positive integers
            separated by a colon with START <= END.

    Examples:
        parse_line_range("3:8")  # (3, 8)
    """
    start_text, separator, end_text = value.partition(":")
    try:
        if not separator:
            raise ValueError(value)
        start_line, end_line = int(start_text), int(end_text)
    except ValueError as error:
        raise click.BadParameter(f"Expected START:END, got {value!r}") from error

    if start_line < 1 or end_line < start_line:
        raise click.BadParameter(f"Invalid line range {value!r}")
    return start_line, end_line


@click.command()
@click.version_option()
@click.option("--indent-size", type=int, help="Spaces per indentation level")
@click.option("--use-tabs/--use-spaces", default=None, help="Indent with tabs or spaces")
@click.option(
    "--preserve-blank-lines/--strip-blank-lines",
    default=None,
    help="Keep or drop blank lines",
)
@click.option("--lines", "line_range", help="Only format lines START:END (one-based, inclusive)")
@click.option("--write", "-w", is_flag=True, help="Rewrite the file in place")
@click.option("--check", is_flag=True, help="Exit with status 1 if the file is not formatted")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    indent_size: int | None = None,
    use_tabs: bool | None = None,
    preserve_blank_lines: bool | None = None,
    line_range: str | None = None,
    write: bool = False,
    check: bool = False,
):
    """
    Entry point for reformatting a Twig template.

    Args:
        filepath: Path to the template to format.
        indent_size: Override for the number of spaces per level.
        use_tabs: Override for indenting with tabs.
        preserve_blank_lines: Override for keeping blank lines.
        line_range: Optional ``START:END`` range restricting formatting.
        write: Rewrite the file instead of printing the result.
        check: Only report whether the file is already formatted.

    Returns:
        None.

    Raises:
        click.BadParameter: If CLI parameters reference invalid paths, ranges
            or configuration values.
        click.ClickException: If reading fails or filesystem safety checks fail.

    Examples:
        twig-format templates/base.html.twig --indent-size 2 --write
    """
    if write and check:
        raise click.BadParameter("--write and --check cannot be combined")

    base_dir = Path.cwd().resolve()
    try:
        path = resolve_template(filepath, base_dir)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    selected_lines = parse_line_range(line_range) if line_range is not None else None

    try:
        config = build_config(
            path.parent,
            indent_size=indent_size,
            use_tabs=use_tabs,
            preserve_blank_lines=preserve_blank_lines,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        size_limit = max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    def warn(message: str) -> None:
        click.echo(message, err=True)

    try:
        template = read_template(path, size_limit)
    except TemplateFileError as error:
        raise click.ClickException(str(error)) from error

    try:
        formatted = format_content(template.content, config, warn, selected_lines)
    except InvalidRangeError as error:
        raise click.ClickException(f"{path}: {error}") from error

    if check:
        if formatted != template.content:
            click.echo(f"{path} would be reformatted", err=True)
            sys.exit(1)
        return

    if write:
        if formatted == template.content:
            return
        try:
            write_template(template, formatted, warn=warn)
        except TemplateFileError as error:
            raise click.ClickException(str(error)) from error
        return

    click.echo(formatted, nl=False)


if __name__ == "__main__":
    cli()
