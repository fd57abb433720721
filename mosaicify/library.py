# mosaicify/library.py
from __future__ import annotations

"""
Tile library: source images resized to block size with precomputed feature maps.

Index order is the order the images were given in and never changes;
duplicate avoidance keys on it.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Sequence

import numpy as np

from .colour_convert import ColorSpace, feature_map
from .core_types import FeatureMap, Size, Tile, U8Image, assert_u8_image_rgb
from .errors import ConfigError, InvariantViolation
from .image_io import list_image_files, load_image_rgb, resize_rgb


class TileLibrary:
    """Ordered tiles plus a stacked (N, h, w, C) feature array for scanning."""

    def __init__(self, tiles: Sequence[Tile], space: ColorSpace, block_size: Size):
        if not tiles:
            raise ConfigError("tile library is empty")
        self.tiles: List[Tile] = list(tiles)
        self.space = space
        self.block_size = block_size
        for i, tile in enumerate(self.tiles):
            if tile.index != i:
                raise InvariantViolation(f"tile at position {i} has index {tile.index}")
            if tile.size != block_size:
                raise InvariantViolation(
                    f"tile {i} is {tile.size[0]}x{tile.size[1]}, "
                    f"expected {block_size[0]}x{block_size[1]}"
                )
            if tile.features.shape[-1] != space.channels:
                raise InvariantViolation(
                    f"tile {i} has {tile.features.shape[-1]} feature channels, "
                    f"{space} needs {space.channels}"
                )
        self.features: FeatureMap = np.stack([t.features for t in self.tiles])

    def __len__(self) -> int:
        return len(self.tiles)

    def __getitem__(self, index: int) -> Tile:
        return self.tiles[index]

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles)


def build_tile(index: int, image: U8Image, block_size: Size, space: ColorSpace) -> Tile:
    """Resize one source image to block size and compute its feature map."""
    assert_u8_image_rgb(image)
    resized = resize_rgb(image, block_size)
    if resized is image:
        resized = image.copy()
    resized.setflags(write=False)
    features = feature_map(resized, space)
    features.setflags(write=False)
    return Tile(index=index, image=resized, features=features)


def build_tile_library(
    images: Sequence[U8Image],
    block_size: Size,
    space: ColorSpace,
    workers: int = 1,
) -> TileLibrary:
    """
    Build tiles for every image, one task per image.

    Args:
      images: decoded uint8 [H,W,3] arrays, any sizes
      block_size: (width, height) every tile is forced to
      space: colour space for the feature maps
      workers: thread count; <=1 runs inline
    Returns:
      TileLibrary in input order
    """
    if len(images) == 0:
        raise ConfigError("no source images")

    if workers <= 1 or len(images) == 1:
        tiles = [build_tile(i, img, block_size, space) for i, img in enumerate(images)]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(build_tile, i, img, block_size, space)
                for i, img in enumerate(images)
            ]
            tiles = [f.result() for f in futures]
    return TileLibrary(tiles, space, block_size)


def load_source_images(directory: Path, workers: int = 1) -> List[U8Image]:
    """
    Decode every image in a folder, in listing order.
    The first undecodable file aborts the whole load.
    """
    files = list_image_files(directory)
    if not files:
        raise ConfigError("no images found in source directory", path=directory)
    if workers <= 1:
        return [load_image_rgb(p) for p in files]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(load_image_rgb, files))


__all__ = ["TileLibrary", "build_tile", "build_tile_library", "load_source_images"]
