# mosaicify/grid.py
from __future__ import annotations

"""
Grid geometry and traversal order.

row_size is the number of cells along x, col_size the number along y.
Cells are addressed as (row, col) with row in [0, col_size), col in [0, row_size).
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .core_types import Box, Cell, Size
from .errors import ConfigError


@dataclass(frozen=True)
class GridGeometry:
    block_width: int
    block_height: int
    row_size: int  # cells along x
    col_size: int  # cells along y

    @property
    def block_size(self) -> Size:
        return self.block_width, self.block_height

    @property
    def canvas_size(self) -> Size:
        """Working canvas (width, height); remainder pixels of the target are not part of it."""
        return self.block_width * self.row_size, self.block_height * self.col_size

    @property
    def n_cells(self) -> int:
        return self.row_size * self.col_size

    def cells(self) -> List[Cell]:
        """All cells in raster order."""
        return [(r, c) for r in range(self.col_size) for c in range(self.row_size)]

    def cell_box(self, row: int, col: int) -> Box:
        """Pixel rectangle (x0, y0, x1, y1) of a cell; x1/y1 exclusive."""
        if not (0 <= row < self.col_size and 0 <= col < self.row_size):
            raise IndexError(f"cell {(row, col)} outside {self.row_size}x{self.col_size} grid")
        x0 = col * self.block_width
        y0 = row * self.block_height
        return x0, y0, x0 + self.block_width, y0 + self.block_height


def compute_geometry(
    target_width: int, target_height: int, row_size: int, col_size: int
) -> GridGeometry:
    """Block size from target size and cell counts (integer division)."""
    if row_size <= 0 or col_size <= 0:
        raise ConfigError(
            f"grid size must be positive, got row_size={row_size} col_size={col_size}"
        )
    block_width = int(target_width) // int(row_size)
    block_height = int(target_height) // int(col_size)
    if block_width == 0 or block_height == 0:
        raise ConfigError(
            f"target {target_width}x{target_height} is too small for a "
            f"{row_size}x{col_size} grid (block {block_width}x{block_height})"
        )
    return GridGeometry(block_width, block_height, int(row_size), int(col_size))


def traversal_order(
    geometry: GridGeometry, rng: Optional[np.random.Generator] = None
) -> List[Cell]:
    """Every cell exactly once, in uniformly random order."""
    rng = rng if rng is not None else np.random.default_rng()
    cells = geometry.cells()
    order = rng.permutation(len(cells))
    return [cells[i] for i in order.tolist()]


__all__ = ["GridGeometry", "compute_geometry", "traversal_order"]
