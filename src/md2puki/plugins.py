"""mistune plugins used by :mod:`md2puki.parser`.

``ragged_table``
    Pipe tables whose body rows may have fewer (or more) cells than the
    header.  Missing trailing cells are left out, extra cells are dropped.

``autolink_tokens``
    Emit ``auto_link`` tokens for ``<scheme:...>`` / ``<user@host>``
    autolinks and for bare URLs found by the ``url`` plugin, instead of the
    ordinary ``link`` tokens mistune produces for them.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from mistune.util import escape_url

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

TABLE_PATTERN = r"^ {0,3}\|[^\n]*\|[ \t]*(?:\n|$)"
NP_TABLE_PATTERN = r"^ {0,3}\S[^\n]*\|[^\n]*(?:\n|$)"

_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")
_ALIGN_RE = re.compile(r"^(:?)-+(:?)$")


def _get_line(state: Any, pos: int) -> str:
    end = state.src.find("\n", pos, state.cursor_max)
    return state.src[pos:state.cursor_max if end < 0 else end + 1]


def _row_cells(line: str) -> Optional[list[str]]:
    text = line.rstrip("\n").strip(" \t")
    if "|" not in text:
        return None
    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|") and not text.endswith("\\|"):
        text = text[:-1]
    return [cell.strip() for cell in _CELL_SPLIT_RE.split(text)]


def _alignment(delimiter: str) -> tuple[bool, Optional[str]]:
    """Return ``(valid, align)`` for one delimiter-row cell."""
    if not delimiter:
        return True, None
    m = _ALIGN_RE.match(delimiter)
    if not m:
        return False, None
    left, right = bool(m.group(1)), bool(m.group(2))
    if left and right:
        return True, "center"
    if left:
        return True, "left"
    if right:
        return True, "right"
    return True, None


def _cell(text: str, align: Optional[str], head: bool) -> dict[str, Any]:
    return {"type": "table_cell", "text": text, "attrs": {"align": align, "head": head}}


def parse_ragged_table(block: Any, m: re.Match, state: Any) -> Optional[int]:
    header = _row_cells(m.group(0))
    pos = m.end()
    if header is None or pos >= state.cursor_max:
        return None

    align_line = _get_line(state, pos)
    delimiters = _row_cells(align_line)
    if delimiters is None or len(delimiters) != len(header):
        return None

    aligns: list[Optional[str]] = []
    for delimiter in delimiters:
        valid, align = _alignment(delimiter)
        if not valid:
            return None
        aligns.append(align)
    pos += len(align_line)

    rows = []
    while pos < state.cursor_max:
        line = _get_line(state, pos)
        cells = _row_cells(line)
        if cells is None:
            break
        rows.append({
            "type": "table_row",
            "children": [
                _cell(text, aligns[i], False)
                for i, text in enumerate(cells[:len(aligns)])
            ],
        })
        pos += len(line)

    thead = {
        "type": "table_head",
        "children": [_cell(text, aligns[i], True) for i, text in enumerate(header)],
    }
    state.append_token({
        "type": "table",
        "children": [thead, {"type": "table_body", "children": rows}],
    })
    return pos


def ragged_table(md: Any) -> None:
    """Table rule accepting rows with a cell count different from the header."""
    md.block.register("table", TABLE_PATTERN, parse_ragged_table, before="paragraph")
    md.block.register("nptable", NP_TABLE_PATTERN, parse_ragged_table, before="paragraph")


# ---------------------------------------------------------------------------
# Autolinks
# ---------------------------------------------------------------------------

def _append_auto_link(state: Any, url: str, text: str) -> None:
    state.append_token({"type": "auto_link", "raw": text, "attrs": {"url": escape_url(url)}})


def parse_auto_link(inline: Any, m: re.Match, state: Any) -> int:
    text = m.group(0)
    if state.in_link:
        inline.process_text(text, state)
        return m.end()
    _append_auto_link(state, text[1:-1], text[1:-1])
    return m.end()


def parse_auto_email(inline: Any, m: re.Match, state: Any) -> int:
    text = m.group(0)
    if state.in_link:
        inline.process_text(text, state)
        return m.end()
    _append_auto_link(state, "mailto:" + text[1:-1], text[1:-1])
    return m.end()


def parse_url_link(inline: Any, m: re.Match, state: Any) -> int:
    text = m.group(0)
    if state.in_link:
        inline.process_text(text, state)
        return m.end()
    _append_auto_link(state, text, text)
    return m.end()


def autolink_tokens(md: Any) -> None:
    """Must run after the ``url`` plugin so that bare URLs are covered too."""
    md.inline.register("auto_link", None, parse_auto_link)
    md.inline.register("auto_email", None, parse_auto_email)
    if "url_link" in md.inline.rules:
        md.inline.register("url_link", None, parse_url_link)
