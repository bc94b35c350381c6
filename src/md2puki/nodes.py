"""Document tree consumed by the PukiWiki renderer.

The tree is produced by :mod:`md2puki.parser` (or built by hand) and is
read-only for the renderer.  Literal text is not copied into nodes where it
can be avoided: a :class:`Segment` references a byte range of the original
source buffer and is resolved at render time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union


# ---------------------------------------------------------------------------
# Node kinds
# ---------------------------------------------------------------------------

class NodeType(Enum):
    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    TEXT_BLOCK = "text_block"
    HEADING = "heading"
    THEMATIC_BREAK = "thematic_break"
    CODE_BLOCK = "code_block"
    FENCED_CODE_BLOCK = "fenced_code_block"
    BLOCKQUOTE = "blockquote"
    LIST = "list"
    LIST_ITEM = "list_item"
    HTML_BLOCK = "html_block"
    TEXT = "text"
    STRING = "string"
    CODE_SPAN = "code_span"
    EMPHASIS = "emphasis"
    LINK = "link"
    IMAGE = "image"
    AUTO_LINK = "auto_link"
    RAW_HTML = "raw_html"
    TABLE = "table"
    TABLE_HEADER = "table_header"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    STRIKETHROUGH = "strikethrough"
    TASK_CHECK_BOX = "task_check_box"
    DEFINITION_LIST = "definition_list"
    DEFINITION_TERM = "definition_term"
    DEFINITION_DESCRIPTION = "definition_description"
    FOOTNOTE = "footnote"
    FOOTNOTE_LINK = "footnote_link"
    FOOTNOTE_BACKLINK = "footnote_backlink"
    FOOTNOTE_LIST = "footnote_list"

    @property
    def is_inline(self) -> bool:
        """True for node kinds that flow inside a block's text."""
        return self in _INLINE_TYPES


_INLINE_TYPES = frozenset({
    NodeType.TEXT,
    NodeType.STRING,
    NodeType.CODE_SPAN,
    NodeType.EMPHASIS,
    NodeType.LINK,
    NodeType.IMAGE,
    NodeType.AUTO_LINK,
    NodeType.RAW_HTML,
    NodeType.STRIKETHROUGH,
    NodeType.TASK_CHECK_BOX,
    NodeType.FOOTNOTE_LINK,
    NodeType.FOOTNOTE_BACKLINK,
})


class Alignment(Enum):
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    @classmethod
    def from_token(cls, value: Optional[str]) -> Alignment:
        """Map a parser alignment string (``None``, ``"left"``, ...) to an enum member."""
        if not value:
            return cls.NONE
        return cls(value.lower())


# ---------------------------------------------------------------------------
# Text spans
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Segment:
    """Half-open byte range ``[start, stop)`` of the source buffer."""

    start: int
    stop: int

    def value(self, source: bytes) -> str:
        return source[self.start:self.stop].decode("utf-8")

    def __len__(self) -> int:
        return self.stop - self.start


Line = Union[Segment, str]


# ---------------------------------------------------------------------------
# Tree nodes
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ASTNode:
    type: NodeType
    children: list[ASTNode] = field(default_factory=list)
    parent: Optional[ASTNode] = field(default=None, repr=False)
    # Literal text: the segment wins over ``text`` when both are set
    segment: Optional[Segment] = None
    text: str = ""
    # Code / HTML blocks
    lines: list[Line] = field(default_factory=list)
    language: str = ""
    # Heading level, or emphasis level (1 normal, 2 strong)
    level: int = 0
    # List
    ordered: bool = False
    start: int = 1
    # Link / Image
    destination: str = ""
    title: str = ""
    # Table column defaults and per-cell alignment
    alignments: list[Alignment] = field(default_factory=list)
    align: Alignment = Alignment.NONE
    # Task list
    checked: bool = False
    # Footnote
    label: str = ""
    # Text line-break markers
    soft_line_break: bool = False
    hard_line_break: bool = False
    blank_previous_lines: bool = False

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    # -- tree helpers -------------------------------------------------------

    def append_child(self, child: ASTNode) -> ASTNode:
        child.parent = self
        self.children.append(child)
        return child

    @property
    def first_child(self) -> Optional[ASTNode]:
        return self.children[0] if self.children else None

    @property
    def is_inline(self) -> bool:
        return self.type.is_inline

    def walk(self) -> Iterator[ASTNode]:
        """Yield this node and its descendants depth-first, in document order."""
        yield self
        for child in self.children:
            yield from child.walk()

    # -- text helpers -------------------------------------------------------

    def literal(self, source: bytes) -> str:
        """Resolve the node's own text span against *source*."""
        if self.segment is not None:
            return self.segment.value(source)
        return self.text

    def line_values(self, source: bytes) -> list[str]:
        return [
            line.value(source) if isinstance(line, Segment) else line
            for line in self.lines
        ]

    def plain_text(self, source: bytes) -> str:
        """Concatenate the literal text of every descendant text node."""
        if self.type in (NodeType.TEXT, NodeType.STRING):
            return self.literal(source)
        return "".join(child.plain_text(source) for child in self.children)
