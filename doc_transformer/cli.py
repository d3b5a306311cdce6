#!/usr/bin/env python3
"""
Doc Transformer - convert documents between formats.

This is the main CLI entry point. It pairs the reader for the input format with
the writer for the requested output format.

To add new input formats:
    See doc_transformer/readers/base.py for the InputReader interface.

To add new output formats:
    See doc_transformer/writers/base.py for the OutputWriter interface.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from doc_transformer.core.errors import ConversionError
from doc_transformer.core.images import disk_image_loader
from doc_transformer.core.transformer import Transformer
from doc_transformer.readers import ReaderRegistry
from doc_transformer.utils import get_logger, get_output_path, get_reader_for_file
from doc_transformer.writers import WriterRegistry

logger = logging.getLogger(__name__)


def list_formats() -> None:
    print("Supported input formats:")
    for info in ReaderRegistry.list_readers():
        print(f"  {info['format']}: {', '.join(info['extensions'])}")
    print("\nSupported output formats:")
    for info in WriterRegistry.list_writers():
        print(f"  {info['format']}: {info['extension']}")


def convert_file(
    input_path: Path,
    output_format: str,
    input_format: Optional[str] = None,
    out: Optional[Path] = None,
    images_dir: Optional[Path] = None,
) -> Path:
    """
    Convert one file and return the path written.

    Raises:
        ValueError: If a format is unknown
        ConversionError: If the input cannot be parsed or the output rendered
    """
    if input_format:
        reader = Transformer.for_format(input_format).reader
    else:
        reader = get_reader_for_file(input_path)
    if reader is None:
        raise ValueError(f"No reader for {input_path}")

    target = Transformer.for_format(output_format)
    loader = disk_image_loader(images_dir or input_path.parent)

    doc = reader.read_file(input_path, loader)
    logger.info("Read %d elements from %s", len(doc), input_path.name)

    output_path = get_output_path(input_path, target.format_name, out)
    data = target.generate(doc)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    return output_path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert documents between formats.",
        epilog="""
Supported formats: docx, md, html, txt, json

To add new formats, see the doc_transformer.readers and doc_transformer.writers packages.
        """,
    )
    parser.add_argument("input", nargs="?", help="File to convert")
    parser.add_argument("--to", dest="output_format", help="Output format (e.g., docx, md)")
    parser.add_argument(
        "--from",
        dest="input_format",
        help="Input format. Detected from the file extension if not specified.",
    )
    parser.add_argument(
        "--out",
        help="Output file or folder. Defaults to the input file's folder.",
    )
    parser.add_argument(
        "--images",
        help="Folder that relative image references are resolved against. "
        "Defaults to the input file's folder.",
    )
    parser.add_argument(
        "--list-formats",
        action="store_true",
        help="List all supported input and output formats.",
    )

    args = parser.parse_args(argv)
    get_logger(__name__)

    if args.list_formats:
        list_formats()
        return 0

    if not args.input or not args.output_format:
        parser.error("INPUT and --to are required")

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: {input_path} does not exist")
        return 1

    try:
        output_path = convert_file(
            input_path,
            args.output_format,
            input_format=args.input_format,
            out=Path(args.out) if args.out else None,
            images_dir=Path(args.images) if args.images else None,
        )
    except (ConversionError, ValueError, OSError) as e:
        print(f"Error converting {input_path.name}: {e}")
        return 1

    print(f"Wrote {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
