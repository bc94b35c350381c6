"""Tests for PukiWiki table row assembly."""

from __future__ import annotations

import pytest

from md2puki.exceptions import MalformedTreeError
from md2puki.nodes import Alignment, ASTNode, NodeType
from md2puki.table_handler import TableHandler


def _cell(value: str, align: Alignment = Alignment.NONE) -> ASTNode:
    return ASTNode(
        type=NodeType.TABLE_CELL,
        children=[ASTNode(type=NodeType.TEXT, text=value)],
        align=align,
    )


def _row(*cells: ASTNode, header: bool = False) -> ASTNode:
    ntype = NodeType.TABLE_HEADER if header else NodeType.TABLE_ROW
    return ASTNode(type=ntype, children=list(cells))


def _table(*rows: ASTNode, alignments: list[Alignment]) -> ASTNode:
    return ASTNode(type=NodeType.TABLE, children=list(rows), alignments=alignments)


@pytest.fixture
def handler() -> TableHandler:
    return TableHandler(lambda cell: cell.plain_text(b""))


class TestRenderRow:
    def test_header_row(self, handler: TableHandler) -> None:
        header = _row(_cell("A"), _cell("B"), header=True)
        table = _table(header, alignments=[Alignment.NONE, Alignment.RIGHT])
        assert handler.render_row(table, header) == "|A|RIGHT:B|h"

    def test_body_row(self, handler: TableHandler) -> None:
        row = _row(_cell("1"), _cell("2"))
        table = _table(row, alignments=[Alignment.NONE, Alignment.RIGHT])
        assert handler.render_row(table, row) == "|1|RIGHT:2|"

    @pytest.mark.parametrize("align, expected", [
        (Alignment.LEFT, "|LEFT:x|"),
        (Alignment.CENTER, "|CENTER:x|"),
        (Alignment.RIGHT, "|RIGHT:x|"),
        (Alignment.NONE, "|x|"),
    ])
    def test_column_alignment_annotation(self, handler: TableHandler, align: Alignment, expected: str) -> None:
        row = _row(_cell("x"))
        assert handler.render_row(_table(row, alignments=[align]), row) == expected

    def test_empty_cell(self, handler: TableHandler) -> None:
        row = _row(_cell(""), _cell("b"))
        table = _table(row, alignments=[Alignment.NONE, Alignment.NONE])
        assert handler.render_row(table, row) == "||b|"

    def test_cell_content_comes_from_callback(self) -> None:
        handler = TableHandler(lambda cell: "<" + cell.plain_text(b"") + ">")
        row = _row(_cell("a"))
        assert handler.render_row(_table(row, alignments=[Alignment.NONE]), row) == "|<a>|"

    def test_non_table_parent_is_fatal(self, handler: TableHandler) -> None:
        row = _row(_cell("a"))
        not_a_table = ASTNode(type=NodeType.PARAGRAPH, children=[row])
        with pytest.raises(MalformedTreeError):
            handler.render_row(not_a_table, row)


class TestCellAlignment:
    def test_cell_override(self) -> None:
        table = _table(alignments=[Alignment.RIGHT])
        assert TableHandler.cell_alignment(table, _cell("a", Alignment.CENTER), 0) is Alignment.CENTER

    def test_column_default(self) -> None:
        table = _table(alignments=[Alignment.NONE, Alignment.LEFT])
        assert TableHandler.cell_alignment(table, _cell("a"), 1) is Alignment.LEFT

    def test_column_out_of_range_even_with_override(self) -> None:
        table = _table(alignments=[Alignment.NONE])
        with pytest.raises(MalformedTreeError):
            TableHandler.cell_alignment(table, _cell("a", Alignment.LEFT), 1)
