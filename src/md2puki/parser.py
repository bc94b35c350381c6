"""Markdown parser that produces the document tree for PukiWiki rendering.

Uses mistune v3 in AST mode and converts its token stream into the
parent-linked :class:`~md2puki.nodes.ASTNode` tree the renderer consumes.
Literal text is recorded as :class:`~md2puki.nodes.Segment` ranges of the
UTF-8 source buffer whenever it can be found there verbatim.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import mistune

from md2puki.exceptions import ParsingError
from md2puki.nodes import Alignment, ASTNode, Line, NodeType, Segment
from md2puki.plugins import autolink_tokens, ragged_table

logger = logging.getLogger(__name__)

PLUGIN_PRESETS: dict[str, list[str]] = {
    "default": ["table"],
    "gfm": ["table", "strikethrough", "task_lists", "url"],
    "extra": ["table", "strikethrough", "task_lists", "url", "footnotes", "def_list"],
}

# Local replacements for mistune plugins of the same name
_PLUGIN_OVERRIDES = {
    "table": ragged_table,
}


# ---------------------------------------------------------------------------
# Source positions
# ---------------------------------------------------------------------------

class _SourceLocator:
    """Find literal token text in the source buffer, scanning forward."""

    def __init__(self, source: bytes) -> None:
        self.source = source
        self._cursor = 0

    def locate(self, text: str) -> Optional[Segment]:
        if not text:
            return None
        needle = text.encode("utf-8")
        start = self.source.find(needle, self._cursor)
        if start < 0:
            return None
        self._cursor = start + len(needle)
        return Segment(start, self._cursor)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class MarkdownParser:
    """Parse Markdown text into an :class:`ASTNode` tree.

    Args:
        preset: Name of a :data:`PLUGIN_PRESETS` entry selecting the mistune
            plugins to enable.  Tables are always enabled.

    Raises:
        ValueError: If *preset* is unknown.
    """

    PRESETS = list(PLUGIN_PRESETS)

    def __init__(self, preset: str = "default") -> None:
        if preset not in PLUGIN_PRESETS:
            raise ValueError(
                f"Unknown parser preset {preset!r}; "
                f"choose from {', '.join(PLUGIN_PRESETS)}"
            )
        self.preset = preset
        self._md = mistune.create_markdown(
            renderer=None,  # AST mode
            plugins=[
                *(_PLUGIN_OVERRIDES.get(name, name) for name in PLUGIN_PRESETS[preset]),
                autolink_tokens,
            ],
        )
        self._locator = _SourceLocator(b"")

    # -- public API ---------------------------------------------------------

    def parse(self, markdown_text: str) -> tuple[bytes, ASTNode]:
        """Return ``(source, document)`` for *markdown_text*.

        *source* is the UTF-8 buffer the document's segments refer to; it is
        *markdown_text* with a final newline added when missing.
        """
        if markdown_text and not markdown_text.endswith("\n"):
            markdown_text += "\n"
        source = markdown_text.encode("utf-8")

        try:
            tokens: list[dict[str, Any]] = self._md(markdown_text)  # type: ignore[assignment]
        except RecursionError as exc:
            raise ParsingError("Markdown nesting is too deep to parse", exc) from exc

        self._locator = _SourceLocator(source)
        doc = ASTNode(type=NodeType.DOCUMENT)
        self._convert_children(doc, tokens)
        logger.debug("Parsed %d bytes into %d top-level nodes", len(source), len(doc.children))
        return source, doc

    # -- token conversion ---------------------------------------------------

    def _convert_children(self, parent: ASTNode, tokens: Any) -> ASTNode:
        if isinstance(tokens, str):
            tokens = [{"type": "text", "raw": tokens}]
        if not isinstance(tokens, list):
            return parent

        blank = False
        for tok in tokens:
            ttype = tok.get("type", "")
            if ttype == "blank_line":
                blank = True
                continue
            if ttype in ("softbreak", "linebreak"):
                self._mark_break(parent, hard=ttype == "linebreak")
                continue

            node = self._convert_token(tok)
            if node is None:
                continue
            if not node.is_inline:
                node.blank_previous_lines = blank
                blank = False
            parent.append_child(node)
        return parent

    def _convert_token(self, tok: dict[str, Any]) -> Optional[ASTNode]:
        ttype = tok.get("type", "")
        handler = getattr(self, f"_handle_{ttype}", None)
        if handler:
            return handler(tok)
        # Fallback - treat unknown tokens as plain text if they carry text.
        raw = tok.get("raw", tok.get("text", ""))
        if raw:
            logger.debug("Unknown token %r kept as text", ttype)
            return self._make_text(str(raw))
        logger.debug("Unknown token %r dropped", ttype)
        return None

    def _mark_break(self, parent: ASTNode, *, hard: bool) -> None:
        last = parent.children[-1] if parent.children else None
        if (
            last is None
            or last.type != NodeType.TEXT
            or last.soft_line_break
            or last.hard_line_break
        ):
            last = parent.append_child(ASTNode(type=NodeType.TEXT))
        if hard:
            last.hard_line_break = True
        else:
            last.soft_line_break = True

    def _make_text(self, raw: str) -> ASTNode:
        segment = self._locator.locate(raw)
        if segment is not None:
            return ASTNode(type=NodeType.TEXT, segment=segment)
        return ASTNode(type=NodeType.TEXT, text=raw)

    def _make_lines(self, raw: str) -> list[Line]:
        if not raw:
            return []
        if raw.endswith("\n"):
            raw = raw[:-1]
        lines: list[Line] = []
        for line in raw.split("\n"):
            line += "\n"
            lines.append(self._locator.locate(line) or line)
        return lines

    def _container(self, ntype: NodeType, tok: dict[str, Any], **attrs: Any) -> ASTNode:
        node = ASTNode(type=ntype, **attrs)
        return self._convert_children(node, tok.get("children") or tok.get("text", ""))

    # -- block handlers -----------------------------------------------------

    def _handle_heading(self, tok: dict) -> ASTNode:
        level = tok.get("attrs", {}).get("level", 1)
        return self._container(NodeType.HEADING, tok, level=level)

    def _handle_paragraph(self, tok: dict) -> ASTNode:
        return self._container(NodeType.PARAGRAPH, tok)

    def _handle_block_text(self, tok: dict) -> ASTNode:
        """Block text inside tight list items."""
        return self._container(NodeType.TEXT_BLOCK, tok)

    def _handle_thematic_break(self, _tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.THEMATIC_BREAK)

    def _handle_block_code(self, tok: dict) -> ASTNode:
        """Fenced / indented code block."""
        raw = tok.get("raw", "")
        lines = self._make_lines(raw if isinstance(raw, str) else str(raw))
        if tok.get("style") == "fenced":
            info = tok.get("attrs", {}).get("info", "") or ""
            return ASTNode(type=NodeType.FENCED_CODE_BLOCK, lines=lines, language=info)
        return ASTNode(type=NodeType.CODE_BLOCK, lines=lines)

    def _handle_block_quote(self, tok: dict) -> ASTNode:
        return self._container(NodeType.BLOCKQUOTE, tok)

    def _handle_block_html(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.HTML_BLOCK, lines=self._make_lines(tok.get("raw", "")))

    # -- lists --------------------------------------------------------------

    def _handle_list(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        node = ASTNode(
            type=NodeType.LIST,
            ordered=bool(attrs.get("ordered", False)),
            start=attrs.get("start", 1) or 1,
        )
        loose = not tok.get("tight", True)
        for idx, item_tok in enumerate(tok.get("children", [])):
            item = self._convert_token(item_tok)
            if item is None:
                continue
            # Items of a loose list are separated by blank lines
            item.blank_previous_lines = loose and idx > 0
            node.append_child(item)
        return node

    def _handle_list_item(self, tok: dict) -> ASTNode:
        return self._container(NodeType.LIST_ITEM, tok)

    def _handle_task_list_item(self, tok: dict) -> ASTNode:
        item = self._container(NodeType.LIST_ITEM, tok)
        checked = bool(tok.get("attrs", {}).get("checked", False))
        box = ASTNode(type=NodeType.TASK_CHECK_BOX, checked=checked)

        target = item.first_child
        if target is None or target.type not in (NodeType.PARAGRAPH, NodeType.TEXT_BLOCK):
            target = item
        box.parent = target
        target.children.insert(0, box)
        return item

    # -- table --------------------------------------------------------------

    def _handle_table(self, tok: dict) -> ASTNode:
        table = ASTNode(type=NodeType.TABLE)
        for child in tok.get("children", []):
            ctype = child.get("type", "")
            if ctype == "table_head":
                header = self._make_table_row(NodeType.TABLE_HEADER, child)
                table.alignments = [cell.align for cell in header.children]
                table.append_child(header)
            elif ctype == "table_body":
                for row in child.get("children", []):
                    table.append_child(self._make_table_row(NodeType.TABLE_ROW, row))
            elif ctype == "table_row":
                table.append_child(self._make_table_row(NodeType.TABLE_ROW, child))
        return table

    def _make_table_row(self, ntype: NodeType, tok: dict) -> ASTNode:
        row = ASTNode(type=ntype)
        for cell_tok in tok.get("children", []):
            align = Alignment.from_token(cell_tok.get("attrs", {}).get("align"))
            row.append_child(self._container(NodeType.TABLE_CELL, cell_tok, align=align))
        return row

    # -- footnotes / definition lists ---------------------------------------

    def _handle_footnotes(self, tok: dict) -> ASTNode:
        return self._container(NodeType.FOOTNOTE_LIST, tok)

    def _handle_footnote_item(self, tok: dict) -> ASTNode:
        key = str(tok.get("attrs", {}).get("key", ""))
        return self._container(NodeType.FOOTNOTE, tok, label=key)

    def _handle_def_list(self, tok: dict) -> ASTNode:
        return self._container(NodeType.DEFINITION_LIST, tok)

    def _handle_def_list_head(self, tok: dict) -> ASTNode:
        return self._container(NodeType.DEFINITION_TERM, tok)

    def _handle_def_list_item(self, tok: dict) -> ASTNode:
        return self._container(NodeType.DEFINITION_DESCRIPTION, tok)

    # -- inline handlers ----------------------------------------------------

    def _handle_text(self, tok: dict) -> ASTNode:
        return self._make_text(str(tok.get("raw", "")))

    def _handle_emphasis(self, tok: dict) -> ASTNode:
        return self._container(NodeType.EMPHASIS, tok, level=1)

    def _handle_strong(self, tok: dict) -> ASTNode:
        return self._container(NodeType.EMPHASIS, tok, level=2)

    def _handle_strikethrough(self, tok: dict) -> ASTNode:
        return self._container(NodeType.STRIKETHROUGH, tok)

    def _handle_codespan(self, tok: dict) -> ASTNode:
        span = ASTNode(type=NodeType.CODE_SPAN)
        span.append_child(self._make_text(str(tok.get("raw", ""))))
        return span

    def _handle_inline_html(self, tok: dict) -> ASTNode:
        raw = str(tok.get("raw", ""))
        segment = self._locator.locate(raw)
        return ASTNode(type=NodeType.RAW_HTML, segment=segment, text="" if segment else raw)

    def _handle_footnote_ref(self, tok: dict) -> ASTNode:
        return ASTNode(type=NodeType.FOOTNOTE_LINK, label=str(tok.get("raw", "")))

    def _handle_auto_link(self, tok: dict) -> ASTNode:
        """Autolinks and bare URLs; the link text is not kept as children."""
        self._locator.locate(str(tok.get("raw", "")))
        return ASTNode(type=NodeType.AUTO_LINK, destination=tok.get("attrs", {}).get("url", ""))

    # -- link / image -------------------------------------------------------

    def _handle_link(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return self._container(
            NodeType.LINK,
            tok,
            destination=attrs.get("url", ""),
            title=attrs.get("title", "") or "",
        )

    def _handle_image(self, tok: dict) -> ASTNode:
        attrs = tok.get("attrs", {})
        return self._container(
            NodeType.IMAGE,
            tok,
            destination=attrs.get("url", ""),
            title=attrs.get("title", "") or "",
        )
