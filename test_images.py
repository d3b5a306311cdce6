"""
Tests for image sizing and loading.
"""

import pytest

from doc_transformer.core.images import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    constrain_image_size,
    disk_image_loader,
    emu_to_pixels,
    pixels_to_emu,
)
from image_fixtures import make_png


def test_wide_image_scaled_to_page_width():
    assert constrain_image_size(10_000_000, 2_000_000) == (5_900_000, 1_180_000)


def test_tall_image_scaled_to_page_height():
    width, height = constrain_image_size(1_000_000, 21_258_840)
    assert height == MAX_IMAGE_HEIGHT
    assert width == 500_000


def test_both_passes_apply():
    """Clamping the width can still leave the height too large."""
    width, height = constrain_image_size(11_800_000, 42_517_680)
    assert width <= MAX_IMAGE_WIDTH
    assert height == MAX_IMAGE_HEIGHT


def test_small_image_untouched():
    assert constrain_image_size(952_500, 476_250) == (952_500, 476_250)


@pytest.mark.parametrize("size", [
    (10_000_000, 2_000_000),
    (1_000_000, 30_000_000),
    (123_456_789, 98_765_432),
    (5_900_000, 10_629_420),
    (1, 1),
])
def test_constraint_is_idempotent(size):
    once = constrain_image_size(*size)
    assert constrain_image_size(*once) == once
    assert once[0] <= MAX_IMAGE_WIDTH
    assert once[1] <= MAX_IMAGE_HEIGHT


def test_custom_limits():
    assert constrain_image_size(2000, 1000, max_width=1000, max_height=1000) == (1000, 500)


def test_pixel_conversion():
    assert pixels_to_emu(100) == 952_500
    assert emu_to_pixels(952_500) == 100


def test_disk_loader_resolves_relative_paths(tmp_path):
    data = make_png(2, 2)
    (tmp_path / "pics").mkdir()
    (tmp_path / "pics" / "dot.png").write_bytes(data)

    loaded = disk_image_loader(tmp_path)("pics/dot.png")
    assert loaded.data == data
    assert loaded.width is None and loaded.height is None


def test_disk_loader_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        disk_image_loader(tmp_path)("missing.png")
