"""
Image sizing and loading helpers shared by readers and writers.

All lengths are EMU (English Metric Units, 914400 per inch), the native unit of
the word-processor format.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

EMU_PER_PIXEL = 9525  # at 96 dpi

# Printable area of an A4 page
MAX_IMAGE_WIDTH = 5900000  # 16.5 cm
MAX_IMAGE_HEIGHT = 10629420  # 29.7 cm


def constrain_image_size(
    width: int,
    height: int,
    max_width: int = MAX_IMAGE_WIDTH,
    max_height: int = MAX_IMAGE_HEIGHT,
) -> Tuple[int, int]:
    """
    Scale an image down to fit the page, preserving its aspect ratio.

    Width is clamped first; the height check then runs on the already scaled
    size, so the second pass may shrink the width further.
    """
    if width > max_width:
        height = height * max_width // width
        width = max_width
    if height > max_height:
        width = width * max_height // height
        height = max_height
    return width, height


def pixels_to_emu(pixels: int) -> int:
    return pixels * EMU_PER_PIXEL


def emu_to_pixels(emu: int) -> int:
    return emu // EMU_PER_PIXEL


@dataclass
class LoadedImage:
    """Result of resolving an image reference."""
    data: bytes
    width: Optional[str] = None  # EMU
    height: Optional[str] = None


ImageLoader = Callable[[str], LoadedImage]


def disk_image_loader(base_dir) -> ImageLoader:
    """
    Return a loader resolving image references relative to a directory.

    The loader raises FileNotFoundError when the reference does not exist.
    Declared dimensions are left empty so writers infer the natural size.
    """
    base = Path(base_dir)

    def load(reference: str) -> LoadedImage:
        path = Path(reference)
        if not path.is_absolute():
            path = base / path
        if not path.is_file():
            raise FileNotFoundError(f"Image not found: {path}")
        return LoadedImage(data=path.read_bytes())

    return load
