"""
Test Suite: Tile library

- Every tile is forced to block size
- Index order follows input order
- Decode failures abort the whole load
"""

import numpy as np
import pytest
from PIL import Image

from conftest import BLUE, GREEN, RED, WHITE, solid
from mosaicify.colour_convert import ColorSpace
from mosaicify.errors import ConfigError, DecodeError, InvariantViolation
from mosaicify.core_types import Tile
from mosaicify.library import (
    TileLibrary,
    build_tile,
    build_tile_library,
    load_source_images,
)


class TestBuildTileLibrary:
    def setup_method(self):
        self.images = [
            solid(10, 6, RED),
            solid(3, 17, GREEN),
            solid(40, 40, BLUE),
            solid(1, 1, WHITE),
        ]

    @pytest.mark.parametrize("workers", [1, 3])
    def test_tiles_have_block_size(self, workers):
        lib = build_tile_library(self.images, (5, 4), ColorSpace.LAB, workers=workers)
        assert len(lib) == 4
        for tile in lib:
            assert tile.image.shape == (4, 5, 3)
            assert tile.features.shape == (4, 5, 3)
            assert tile.size == (5, 4)
        assert lib.features.shape == (4, 4, 5, 3)

    def test_order_and_indices_preserved(self):
        lib = build_tile_library(self.images, (4, 4), ColorSpace.RGB, workers=4)
        expected = [RED, GREEN, BLUE, WHITE]
        for i, tile in enumerate(lib):
            assert tile.index == i
            np.testing.assert_allclose(
                tile.image.reshape(-1, 3).mean(axis=0), expected[i], atol=1.0
            )

    def test_grey_features_have_one_channel(self):
        lib = build_tile_library(self.images, (2, 3), ColorSpace.GRAY)
        assert lib.features.shape == (4, 3, 2, 1)
        assert lib.space is ColorSpace.GRAY

    def test_tiles_are_read_only(self):
        tile = build_tile(0, solid(4, 4, RED), (4, 4), ColorSpace.RGB)
        with pytest.raises(ValueError):
            tile.image[0, 0, 0] = 1

    def test_input_not_frozen_when_already_block_size(self):
        src = solid(4, 4, RED)
        build_tile(0, src, (4, 4), ColorSpace.RGB)
        src[0, 0, 0] = 7
        assert src[0, 0, 0] == 7

    def test_empty_is_config_error(self):
        with pytest.raises(ConfigError):
            build_tile_library([], (4, 4), ColorSpace.LAB)

    def test_wrong_tile_size_is_invariant_violation(self):
        good = build_tile(0, solid(4, 4, RED), (4, 4), ColorSpace.RGB)
        bad = build_tile(1, solid(4, 4, RED), (2, 2), ColorSpace.RGB)
        with pytest.raises(InvariantViolation):
            TileLibrary([good, bad], ColorSpace.RGB, (4, 4))

    def test_wrong_index_is_invariant_violation(self):
        tile = build_tile(0, solid(4, 4, RED), (4, 4), ColorSpace.RGB)
        shifted = Tile(index=5, image=tile.image, features=tile.features)
        with pytest.raises(InvariantViolation):
            TileLibrary([shifted], ColorSpace.RGB, (4, 4))


class TestLoadSourceImages:
    def _write(self, path, rgb, size=(6, 4)):
        Image.fromarray(solid(size[0], size[1], rgb)).save(path)

    @pytest.mark.parametrize("workers", [1, 2])
    def test_sorted_listing_and_filtering(self, tmp_path, workers):
        self._write(tmp_path / "b.png", GREEN)
        self._write(tmp_path / "A.png", RED)
        self._write(tmp_path / "c.bmp", BLUE)
        (tmp_path / "notes.txt").write_text("not an image")
        (tmp_path / "sub").mkdir()
        self._write(tmp_path / ".hidden.png", WHITE)

        images = load_source_images(tmp_path, workers=workers)
        assert len(images) == 3
        for img, rgb in zip(images, [RED, GREEN, BLUE]):
            assert img.dtype == np.uint8
            assert img.shape == (4, 6, 3)
            assert tuple(img[0, 0]) == rgb

    def test_grey_and_alpha_inputs_become_rgb(self, tmp_path):
        Image.new("L", (3, 3), 200).save(tmp_path / "grey.png")
        Image.new("RGBA", (3, 3), (10, 20, 30, 128)).save(tmp_path / "rgba.png")
        images = load_source_images(tmp_path)
        assert [img.shape for img in images] == [(3, 3, 3), (3, 3, 3)]
        assert tuple(images[0][0, 0]) == (200, 200, 200)

    def test_corrupt_file_aborts(self, tmp_path):
        self._write(tmp_path / "a.png", RED)
        bad = tmp_path / "b.jpg"
        bad.write_bytes(b"definitely not a jpeg")
        with pytest.raises(DecodeError) as info:
            load_source_images(tmp_path, workers=2)
        assert info.value.path == bad

    def test_empty_directory(self, tmp_path):
        with pytest.raises(ConfigError):
            load_source_images(tmp_path)

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigError):
            load_source_images(tmp_path / "nope")
