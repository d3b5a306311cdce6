"""
Utility functions for file handling and logging setup.
"""

import logging
from pathlib import Path
from typing import Optional

from doc_transformer.readers.base import ReaderRegistry
from doc_transformer.writers.base import WriterRegistry

_DEFAULT_LEVEL = logging.INFO


def get_logger(name: Optional[str] = None, level: int = _DEFAULT_LEVEL) -> logging.Logger:
    """Return a logger, applying a basic configuration when none exists."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    return logger


def get_reader_for_file(file_path: Path):
    """
    Get the appropriate reader for a file.
    Returns a reader instance or None if no reader supports the file.
    """
    return ReaderRegistry.get_reader_for_file(file_path)


def can_process_file(file_path: Path) -> bool:
    """Check if we have a reader that can process this file."""
    return get_reader_for_file(file_path) is not None


def get_file_stem(file_path: Path) -> str:
    """
    Get the stem of a filename.
    For files with extension: returns stem
    For files without extension: returns full name
    """
    file_path = Path(file_path)
    if file_path.suffix:
        return file_path.stem
    return file_path.name


def get_output_path(input_path: Path, format_name: str, out: Optional[Path] = None) -> Path:
    """
    Work out where a converted file goes.

    An explicit path with a suffix is used as-is; a directory (or no path at
    all, meaning the input's directory) receives <stem><extension>.
    """
    input_path = Path(input_path)
    writer = WriterRegistry.get_writer(format_name)
    extension = writer.get_extension() if writer else f".{format_name}"

    if out is not None:
        out = Path(out)
        if out.suffix and not out.is_dir():
            return out
        directory = out
    else:
        directory = input_path.parent

    candidate = directory / f"{get_file_stem(input_path)}{extension}"
    if candidate.resolve() == input_path.resolve():
        candidate = directory / f"{get_file_stem(input_path)}.converted{extension}"
    return candidate
