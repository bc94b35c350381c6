"""Exceptions raised by md2puki.

Hierarchy::

    Md2PukiError
      ParsingError            Markdown front end failures
      RenderError             fatal render failures (abort the whole render)
        UnsupportedNodeError  node type with no dispatch rule
        MalformedTreeError    tree shape the renderer cannot interpret

Unhandled and skipped nodes are not errors; the renderer models them as
result values (see :mod:`md2puki.renderer`).
"""

from __future__ import annotations

from typing import Optional


class Md2PukiError(Exception):
    """Base class for all md2puki errors.

    Args:
        message: Human-readable description of the error.
        original_error: The exception that caused this one, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ParsingError(Md2PukiError):
    """The Markdown source could not be turned into a document tree."""


class RenderError(Md2PukiError):
    """A node could not be rendered; the render is aborted."""

    def __init__(
        self,
        message: str,
        node_type: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, original_error)
        self.node_type = node_type


class UnsupportedNodeError(RenderError):
    """Raised for a node type that has no entry in the dispatch table."""


class MalformedTreeError(RenderError):
    """Raised when the tree violates an invariant the renderer relies on."""
