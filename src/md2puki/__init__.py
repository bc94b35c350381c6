"""md2puki - convert Markdown documents to PukiWiki markup."""

__version__ = "0.1.0"

from md2puki.converter import Converter  # noqa: E402
from md2puki.exceptions import Md2PukiError, ParsingError, RenderError  # noqa: E402
from md2puki.nodes import Alignment, ASTNode, NodeType, Segment  # noqa: E402
from md2puki.parser import MarkdownParser  # noqa: E402
from md2puki.renderer import PukiWikiRenderer  # noqa: E402
from md2puki.urlutil import escape_url  # noqa: E402

__all__ = [
    "ASTNode",
    "Alignment",
    "Converter",
    "MarkdownParser",
    "Md2PukiError",
    "NodeType",
    "ParsingError",
    "PukiWikiRenderer",
    "RenderError",
    "Segment",
    "__version__",
    "escape_url",
]
