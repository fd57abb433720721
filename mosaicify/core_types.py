# mosaicify/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight validators.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from .errors import InvariantViolation

# Basic aliases

Cell = Tuple[int, int]  # (row, col)
Box = Tuple[int, int, int, int]  # (x0, y0, x1, y1), x1/y1 exclusive
Size = Tuple[int, int]  # (width, height)

U8Image = NDArray[np.uint8]  # (H, W, 3)
FeatureMap = NDArray[np.float32]  # (H, W, C), C=3 for rgb/lab, 1 for gray
Lab = NDArray[np.float32]  # (..., 3) CIE Lab with doubled L

# Value objects


@dataclass(frozen=True)
class Tile:
    """Source image resized to block size with its precomputed feature map."""

    index: int
    image: U8Image  # (block_h, block_w, 3)
    features: FeatureMap  # (block_h, block_w, C)

    @property
    def size(self) -> Size:
        return int(self.image.shape[1]), int(self.image.shape[0])


@dataclass(frozen=True)
class Match:
    """Outcome of one nearest-neighbour search."""

    tile_index: int
    score: float
    reset: bool = False  # UsedSet was cleared before this search


@dataclass(frozen=True)
class Placement:
    """One traversal step: which tile went into which cell."""

    cell: Cell
    tile_index: int
    score: float
    reset: bool


# Validators


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 3:
        raise InvariantViolation(
            f"expected uint8 (H,W,3) image, got {image.dtype} {image.shape}"
        )
    return image  # type: ignore[return-value]


def assert_same_shape(a: np.ndarray, b: np.ndarray, what: str) -> None:
    """Raise InvariantViolation when two arrays differ in shape."""
    if a.shape != b.shape:
        raise InvariantViolation(f"{what} shape mismatch: {a.shape} vs {b.shape}")


__all__ = [
    # aliases / types
    "Cell",
    "Box",
    "Size",
    "U8Image",
    "FeatureMap",
    "Lab",
    # value objects
    "Tile",
    "Match",
    "Placement",
    # validators
    "assert_u8_image_rgb",
    "assert_same_shape",
]
