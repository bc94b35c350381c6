"""PukiWiki table assembly.

A Markdown table becomes one PukiWiki line per row::

    |A|RIGHT:B|h
    |1|RIGHT:2|

Each cell is emitted as ``|`` followed by an optional ``LEFT:`` /
``CENTER:`` / ``RIGHT:`` alignment annotation and the rendered cell
content.  Header rows end in ``|h``, body rows in ``|``.
"""

from __future__ import annotations

import logging
from typing import Callable

from md2puki.exceptions import MalformedTreeError
from md2puki.nodes import Alignment, ASTNode, NodeType

logger = logging.getLogger(__name__)

CellRenderer = Callable[[ASTNode], str]


class TableHandler:
    """Renders TABLE_HEADER / TABLE_ROW nodes of a TABLE node.

    Cell content is rendered through *render_cell*, normally the renderer's
    own dispatcher, so inline formatting inside cells is preserved.
    """

    HEADER_TERMINATOR = "|h"
    ROW_TERMINATOR = "|"

    def __init__(self, render_cell: CellRenderer) -> None:
        self._render_cell = render_cell

    def render_row(self, table: ASTNode, row: ASTNode) -> str:
        """Render one header or body row of *table* as a single line.

        Raises:
            MalformedTreeError: If *table* is not a TABLE node, or a cell has
                no column alignment entry.
        """
        if table.type != NodeType.TABLE:
            raise MalformedTreeError(
                f"Expected TABLE node, got {table.type.value}",
                node_type=table.type.value,
            )

        parts: list[str] = []
        cells = [c for c in row.children if c.type == NodeType.TABLE_CELL]
        for idx, cell in enumerate(cells):
            align = self.cell_alignment(table, cell, idx)
            content = self._render_cell(cell)
            if align == Alignment.NONE:
                parts.append("|" + content)
            else:
                parts.append(f"|{align.value.upper()}:{content}")

        if len(cells) < len(table.alignments):
            logger.debug(
                "Row has %d of %d columns; trailing columns omitted",
                len(cells), len(table.alignments),
            )

        if row.type == NodeType.TABLE_HEADER:
            return "".join(parts) + self.HEADER_TERMINATOR
        return "".join(parts) + self.ROW_TERMINATOR

    @staticmethod
    def cell_alignment(table: ASTNode, cell: ASTNode, column: int) -> Alignment:
        """Return the cell's own alignment, else the table's default for *column*."""
        if column >= len(table.alignments):
            raise MalformedTreeError(
                f"Table cell in column {column} but only "
                f"{len(table.alignments)} column alignments declared",
                node_type=NodeType.TABLE_CELL.value,
            )
        if cell.align != Alignment.NONE:
            return cell.align
        return table.alignments[column]
