"""PukiWiki renderer - converts an AST to PukiWiki markup.

This module turns a document tree (produced by :mod:`md2puki.parser`) into
PukiWiki source text.  Every node type is dispatched to a ``_render_<type>``
handler that returns a :class:`Fragment`:

* ``Outcome.OK`` - the fragment text is the node's output.
* ``Outcome.UNHANDLED`` - no bespoke rule; the node's children are rendered
  in order and joined instead.
* ``Outcome.SKIP`` - the node and its subtree produce nothing.

Real failures are raised as exceptions and abort the whole render.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from md2puki.exceptions import MalformedTreeError, UnsupportedNodeError
from md2puki.lines import deepen_line, process_lines, quote_line
from md2puki.nodes import ASTNode, NodeType
from md2puki.table_handler import TableHandler
from md2puki.urlutil import escape_url

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Handler results
# ---------------------------------------------------------------------------

class Outcome(Enum):
    OK = "ok"
    UNHANDLED = "unhandled"
    SKIP = "skip"


@dataclass(frozen=True)
class Fragment:
    outcome: Outcome
    text: str = ""

    @classmethod
    def ok(cls, text: str) -> Fragment:
        return cls(Outcome.OK, text)


UNHANDLED = Fragment(Outcome.UNHANDLED)
SKIP = Fragment(Outcome.SKIP)

ChildHook = Callable[[ASTNode, str], str]
ChildRenderer = Callable[[ASTNode], Fragment]

# Node types rendered as the concatenation of their children
_FALLBACK_TYPES = frozenset({
    NodeType.DOCUMENT,
    NodeType.PARAGRAPH,
    NodeType.TEXT_BLOCK,
    NodeType.LIST,
    NodeType.HTML_BLOCK,
    NodeType.RAW_HTML,
    NodeType.AUTO_LINK,
    NodeType.STRING,
    NodeType.DEFINITION_LIST,
    NodeType.DEFINITION_TERM,
    NodeType.DEFINITION_DESCRIPTION,
    NodeType.FOOTNOTE,
    NodeType.FOOTNOTE_LINK,
    NodeType.FOOTNOTE_BACKLINK,
    NodeType.FOOTNOTE_LIST,
    NodeType.STRIKETHROUGH,
    NodeType.TABLE_CELL,
    NodeType.TABLE_HEADER,
    NodeType.TABLE_ROW,
    NodeType.TASK_CHECK_BOX,
})

_MAX_HEADING_LEVEL = 3


# ---------------------------------------------------------------------------
# PukiWikiRenderer
# ---------------------------------------------------------------------------

class PukiWikiRenderer:
    """Render an :class:`~md2puki.nodes.ASTNode` tree to PukiWiki text.

    The renderer keeps no state between calls; one instance may be shared
    by concurrent renders of independent trees.
    """

    # ======================================================================
    # Public API
    # ======================================================================

    def render(self, source: Union[bytes, str], doc: ASTNode) -> str:
        """Return the PukiWiki text for *doc*.

        Args:
            source: The buffer the tree's text segments point into.
            doc: Root of the tree, normally a DOCUMENT node.

        Returns:
            The rendered text, ending in exactly one newline, or ``""`` when
            nothing was rendered.

        Raises:
            RenderError: On the first node that cannot be rendered.  Any other
                exception raised by a handler propagates unchanged.
        """
        if isinstance(source, str):
            source = source.encode("utf-8")

        text = self._render(source, doc).text
        if text:
            text = text.rstrip("\n") + "\n"
        logger.debug("Rendered %s node into %d characters", doc.type.value, len(text))
        return text

    def render_to_file(self, source: Union[bytes, str], doc: ASTNode, path: Union[str, Path]) -> None:
        """Render and write to *path* as UTF-8."""
        Path(path).write_text(self.render(source, doc), encoding="utf-8")

    # ======================================================================
    # Node dispatch
    # ======================================================================

    def _render(self, source: bytes, node: ASTNode) -> Fragment:
        """Render *node*; the result is always ``OK`` or ``SKIP``."""
        result = self._dispatch(source, node)
        if result.outcome is Outcome.UNHANDLED:
            return Fragment.ok(self._render_children(source, node))
        if result.outcome is Outcome.SKIP:
            logger.debug("Skipping %s node", node.type.value)
        return result

    def _dispatch(self, source: bytes, node: ASTNode) -> Fragment:
        handler = getattr(self, f"_render_{node.type.value}", None)
        if handler is not None:
            return handler(source, node)
        if node.type in _FALLBACK_TYPES:
            return UNHANDLED
        raise UnsupportedNodeError(
            f"No rendering rule for node type {node.type.value!r}",
            node_type=str(node.type.value),
        )

    def _render_children(
        self,
        source: bytes,
        node: ASTNode,
        hook: Optional[ChildHook] = None,
        render_child: Optional[ChildRenderer] = None,
    ) -> str:
        """Render the children of *node* in order and join them.

        Inline children are concatenated as-is.  A block child gets a leading
        newline unless it is the first child, plus one more when it followed
        a blank line in the source.  Skipped children contribute nothing.
        """
        render_child = render_child or (lambda child: self._render(source, child))

        first = node.first_child
        rendered: list[str] = []
        for child in node.children:
            result = render_child(child)
            if result.outcome is Outcome.SKIP:
                continue

            text = result.text
            if hook is not None:
                text = hook(child, text)

            if not child.is_inline:
                if child is not first:
                    text = "\n" + text
                if child.blank_previous_lines:
                    text = "\n" + text

            rendered.append(text)

        return "".join(rendered)

    def _render_content(self, source: bytes, node: ASTNode) -> str:
        return self._render(source, node).text

    # ======================================================================
    # Block handlers
    # ======================================================================

    def _render_heading(self, source: bytes, node: ASTNode) -> Fragment:
        level = min(node.level, _MAX_HEADING_LEVEL)
        return Fragment.ok("*" * level + " " + self._render_children(source, node))

    def _render_code_block(self, source: bytes, node: ASTNode) -> Fragment:
        return Fragment.ok("".join(" " + line for line in node.line_values(source)))

    def _render_fenced_code_block(self, source: bytes, node: ASTNode) -> Fragment:
        return self._render_code_block(source, node)

    def _render_blockquote(self, source: bytes, node: ASTNode) -> Fragment:
        return Fragment.ok(process_lines(self._render_children(source, node), quote_line))

    def _render_list_item(self, source: bytes, node: ASTNode) -> Fragment:
        parent = node.parent
        if parent is None or parent.type != NodeType.LIST:
            raise MalformedTreeError(
                "List item is not inside a list",
                node_type=node.type.value,
            )
        marker = "+ " if parent.ordered else "- "

        def mark(child: ASTNode, generated: str) -> str:
            if child.type == NodeType.LIST:
                return process_lines(generated, deepen_line)
            return marker + generated

        return Fragment.ok(self._render_children(source, node, hook=mark))

    def _render_table(self, source: bytes, node: ASTNode) -> Fragment:
        tables = TableHandler(lambda cell: self._render_content(source, cell))
        return Fragment.ok(self._render_children(
            source,
            node,
            render_child=lambda row: Fragment.ok(tables.render_row(node, row)),
        ))

    def _render_thematic_break(self, _source: bytes, _node: ASTNode) -> Fragment:
        return SKIP

    # ======================================================================
    # Inline handlers
    # ======================================================================

    def _render_text(self, source: bytes, node: ASTNode) -> Fragment:
        text = node.literal(source)
        if node.hard_line_break or node.soft_line_break:
            text += "\n"
        return Fragment.ok(text)

    def _render_emphasis(self, source: bytes, node: ASTNode) -> Fragment:
        inner = self._render_children(source, node)
        if node.level >= 2:
            return Fragment.ok(f"'''{inner}'''")
        return Fragment.ok(f"''{inner}''")

    def _render_code_span(self, source: bytes, node: ASTNode) -> Fragment:
        return Fragment.ok(f"''{self._render_children(source, node)}''")

    def _render_image(self, _source: bytes, node: ASTNode) -> Fragment:
        return Fragment.ok(f"&ref({escape_url(node.destination)});")

    def _render_link(self, source: bytes, node: ASTNode) -> Fragment:
        return Fragment.ok(f"[[{node.plain_text(source)}:{escape_url(node.destination)}]]")
