"""
Test Suite: Grid geometry and traversal order
"""

import numpy as np
import pytest

from mosaicify.errors import ConfigError
from mosaicify.grid import GridGeometry, compute_geometry, traversal_order


def test_block_size_uses_integer_division():
    geom = compute_geometry(103, 50, 10, 4)
    assert geom.block_size == (10, 12)
    assert geom.canvas_size == (100, 48)
    assert geom.n_cells == 40


@pytest.mark.parametrize(
    "width,height,rows,cols",
    [(100, 100, 0, 5), (100, 100, 5, 0), (4, 100, 5, 1), (100, 3, 1, 4), (10, 10, -1, 2)],
)
def test_degenerate_geometry_is_config_error(width, height, rows, cols):
    with pytest.raises(ConfigError):
        compute_geometry(width, height, rows, cols)


def test_cell_box_axes():
    geom = GridGeometry(block_width=4, block_height=3, row_size=5, col_size=2)
    # row indexes y (col_size cells), col indexes x (row_size cells)
    assert geom.cell_box(0, 0) == (0, 0, 4, 3)
    assert geom.cell_box(1, 4) == (16, 3, 20, 6)
    with pytest.raises(IndexError):
        geom.cell_box(2, 0)
    with pytest.raises(IndexError):
        geom.cell_box(0, 5)


def test_cells_partition_canvas():
    geom = GridGeometry(block_width=3, block_height=2, row_size=4, col_size=5)
    width, height = geom.canvas_size
    coverage = np.zeros((height, width), dtype=np.int32)
    for row, col in geom.cells():
        x0, y0, x1, y1 = geom.cell_box(row, col)
        coverage[y0:y1, x0:x1] += 1
    assert np.all(coverage == 1)


class TestTraversalOrder:
    def setup_method(self):
        self.geom = GridGeometry(block_width=2, block_height=2, row_size=6, col_size=4)

    def test_visits_every_cell_once(self, rng):
        order = traversal_order(self.geom, rng)
        assert len(order) == 24
        assert sorted(order) == sorted(self.geom.cells())
        assert len(set(order)) == 24

    def test_seed_is_reproducible(self):
        a = traversal_order(self.geom, np.random.default_rng(7))
        b = traversal_order(self.geom, np.random.default_rng(7))
        assert a == b

    def test_order_is_shuffled(self):
        raster = self.geom.cells()
        orders = [traversal_order(self.geom, np.random.default_rng(s)) for s in range(5)]
        assert any(o != raster for o in orders)

    def test_default_rng(self):
        order = traversal_order(self.geom)
        assert sorted(order) == sorted(self.geom.cells())
