"""FastAPI web service for Markdown to PukiWiki conversion.

Endpoints::

    POST /convert       Upload a .md file and receive .pukiwiki text back.
    POST /convert/text  Send raw Markdown text, receive PukiWiki text.
    GET  /health        Health check.
    GET  /presets       List available extension presets.

Run::

    uvicorn md2puki.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse

from md2puki import __version__
from md2puki.converter import OUTPUT_SUFFIX, Converter
from md2puki.exceptions import ParsingError, RenderError
from md2puki.parser import PLUGIN_PRESETS

logger = logging.getLogger(__name__)

app = FastAPI(
    title="md2puki",
    description="Markdown to PukiWiki conversion service",
    version=__version__,
)

PUKIWIKI_MEDIA_TYPE = "text/plain; charset=utf-8"


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _convert(markdown_text: str, preset: str) -> str:
    try:
        converter = Converter(preset=preset)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        return converter.convert_text(markdown_text)
    except (ParsingError, RenderError) as exc:
        logger.warning("Conversion failed: %s", exc)
        raise HTTPException(status_code=422, detail=exc.message) from exc


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/presets")
async def list_presets() -> dict[str, dict[str, list[str]]]:
    """List available extension presets and the plugins they enable."""
    return {"presets": PLUGIN_PRESETS}


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    preset: str = Form("default"),
    encoding: str = Form("utf-8"),
) -> PlainTextResponse:
    """Upload a Markdown file and receive PukiWiki text back.

    - **file**: Markdown file (.md)
    - **preset**: Extension preset name (default, gfm, extra)
    - **encoding**: Source file encoding
    """
    raw = await file.read()
    try:
        md_text = raw.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=400, detail=f"Cannot decode upload: {exc}") from exc

    wiki_text = _convert(md_text, preset)
    filename = (file.filename or "document.md").rsplit(".", 1)[0] + OUTPUT_SUFFIX

    return PlainTextResponse(
        content=wiki_text,
        media_type=PUKIWIKI_MEDIA_TYPE,
        headers={"Content-Disposition": _content_disposition(filename)},
    )


@app.post("/convert/text")
async def convert_text(
    markdown: str = Form(...),
    preset: str = Form("default"),
) -> PlainTextResponse:
    """Send raw Markdown text and receive PukiWiki text.

    - **markdown**: Markdown source text
    - **preset**: Extension preset name
    """
    return PlainTextResponse(
        content=_convert(markdown, preset),
        media_type=PUKIWIKI_MEDIA_TYPE,
    )
