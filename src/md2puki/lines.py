"""Line-oriented post-processing of rendered fragments."""

from __future__ import annotations

from typing import Callable

LineFunc = Callable[[int, str], str]


def process_lines(text: str, fn: LineFunc) -> str:
    """Apply ``fn(index, line)`` to every line of *text*.

    *text* is split on ``"\\n"`` (empty lines included, so a trailing newline
    yields a final empty line) and the results are joined back with ``"\\n"``.
    """
    return "\n".join(fn(i, line) for i, line in enumerate(text.split("\n")))


def quote_line(index: int, line: str) -> str:
    """Blockquote prefix: ``>`` before already-quoted lines, ``> `` otherwise."""
    if index == 0 and not line:
        return line
    if line.startswith(">"):
        return ">" + line
    return "> " + line


def deepen_line(_index: int, line: str) -> str:
    """Nested-list prefix: repeat the line's first character (the list marker)."""
    if not line:
        return ""
    return line[0] + line
