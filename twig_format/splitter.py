"""Splitting markup lines into template and text runs."""

from __future__ import annotations

from .constants import TEMPLATE_SPAN_PATTERN


def split_runs(line: str) -> list[str]:
    """Split a line into template spans and the text around them.

    Each ``{% ... %}`` or ``{{ ... }}`` span becomes its own run; the text
    before, between and after the spans forms the remaining runs. Matching is
    non-greedy and never crosses a line boundary. Runs are trimmed and runs
    that are empty after trimming are dropped, so splitting a single run again
    returns it unchanged.

    Args:
        line: A single line of template source.

    Returns:
        list[str]: Trimmed, non-empty runs in their original order.

    Examples:
        split_runs("<p>{{ name }}</p>")  # ["<p>", "{{ name }}", "</p>"]
        split_runs("   ")  # []
    """
    runs: list[str] = []
    offset = 0

    for match in TEMPLATE_SPAN_PATTERN.finditer(line):
        if match.start() > offset:
            runs.append(line[offset : match.start()])
        runs.append(match.group(0))
        offset = match.end()

    if offset < len(line):
        runs.append(line[offset:])

    return [run.strip() for run in runs if run.strip()]
