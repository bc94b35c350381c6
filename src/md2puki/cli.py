"""Command-line interface for md2puki.

Usage::

    md2puki input.md                      # writes input.pukiwiki
    md2puki input.md -o output.pukiwiki   # explicit output path
    md2puki input.md --stdout             # print to standard output
    md2puki input.md --preset gfm         # enable GFM extensions
    md2puki --list-presets                # list available presets
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from md2puki import __version__
from md2puki.converter import OUTPUT_SUFFIX, Converter
from md2puki.exceptions import Md2PukiError
from md2puki.logging_utils import configure_logging
from md2puki.parser import PLUGIN_PRESETS

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2puki",
        description="Convert Markdown files to PukiWiki markup.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Path to the Markdown file to convert.",
    )
    parser.add_argument(
        "-o", "--output",
        help=f"Output file path, or '-' for stdout. Defaults to <input>{OUTPUT_SUFFIX}.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Write the result to standard output.",
    )
    parser.add_argument(
        "-p", "--preset",
        default="default",
        choices=list(PLUGIN_PRESETS),
        help="Markdown extension preset (default: %(default)s).",
    )
    parser.add_argument(
        "-e", "--encoding",
        default="utf-8",
        help="Input file encoding (default: %(default)s).",
    )
    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List available extension presets and exit.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print progress information.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: %(default)s).",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write log messages to PATH in addition to stderr.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        args.log_level,
        log_file=args.log_file,
        trace_mode=args.log_level == "DEBUG",
    )

    if args.list_presets:
        print("Available extension presets:")
        for name, plugins in PLUGIN_PRESETS.items():
            print(f"  - {name}: {', '.join(plugins)}")
        return 0

    if not args.input:
        parser.error("the following argument is required: input")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: file not found: {input_path}", file=sys.stderr)
        return 1

    to_stdout = args.stdout or args.output == "-"
    if to_stdout:
        output_path = None
    elif args.output:
        output_path = Path(args.output)
    else:
        output_path = input_path.with_suffix(OUTPUT_SUFFIX)

    if args.verbose:
        print(f"Input:  {input_path}", file=sys.stderr)
        print(f"Output: {output_path or '<stdout>'}", file=sys.stderr)
        print(f"Preset: {args.preset}", file=sys.stderr)

    try:
        converter = Converter(preset=args.preset)
        wiki_text = converter.convert_file(input_path, output_path, encoding=args.encoding)
    except (Md2PukiError, OSError, UnicodeDecodeError) as exc:
        logger.debug("Conversion failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if to_stdout:
        sys.stdout.write(wiki_text)
    elif args.verbose:
        print(f"Done. {len(wiki_text)} characters written.", file=sys.stderr)
    else:
        print(f"Converted: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
