"""High-level Markdown-to-PukiWiki conversion orchestrator.

Ties together the parser and the renderer into a single public API for
converting Markdown text or files to PukiWiki markup.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from md2puki.parser import MarkdownParser
from md2puki.renderer import PukiWikiRenderer

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".pukiwiki"


class Converter:
    """Convert Markdown content to PukiWiki markup.

    Usage::

        converter = Converter(preset="gfm")
        converter.convert_file("input.md", "output.pukiwiki")

        # or from string
        wiki_text = converter.convert_text("# Hello")
    """

    PRESETS = MarkdownParser.PRESETS

    def __init__(self, preset: str = "default") -> None:
        self.parser = MarkdownParser(preset)
        self.renderer = PukiWikiRenderer()

    @property
    def preset(self) -> str:
        return self.parser.preset

    def convert_text(self, markdown_text: str) -> str:
        """Convert Markdown text to PukiWiki text.

        Args:
            markdown_text: Markdown source string.

        Returns:
            PukiWiki markup, ending in a newline unless empty.

        Raises:
            ParsingError: If the Markdown cannot be parsed.
            RenderError: If the document tree cannot be rendered.
        """
        source, doc = self.parser.parse(markdown_text)
        return self.renderer.render(source, doc)

    def convert_file(
        self,
        input_path: str | Path,
        output_path: Optional[str | Path] = None,
        *,
        encoding: str = "utf-8",
    ) -> str:
        """Read a Markdown file and write the PukiWiki output.

        Args:
            input_path: Path to the input ``.md`` file.
            output_path: Path for the output file.  When omitted nothing is
                written.
            encoding: Text encoding of the source file.

        Returns:
            The rendered PukiWiki text.
        """
        input_path = Path(input_path)
        md_text = input_path.read_text(encoding=encoding)
        logger.info("Converting %s (preset=%s)", input_path, self.preset)
        wiki_text = self.convert_text(md_text)

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(wiki_text, encoding="utf-8")
            logger.info("Wrote %d characters to %s", len(wiki_text), output_path)

        return wiki_text
