# mosaicify/compose.py
from __future__ import annotations

"""
Compositing and the traversal driver.

Cells are visited one at a time in random order. Each block is read from the
canvas, matched, and overwritten with the winning tile before the next cell
starts. Cells never overlap, so unvisited cells still hold target pixels.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from .colour_convert import feature_map
from .core_types import Placement, U8Image, assert_u8_image_rgb
from .errors import InvariantViolation
from .grid import GridGeometry, traversal_order
from .library import TileLibrary
from .match import Matcher
from .utils import Progress


def paste(canvas: U8Image, tile_image: U8Image, offset_x: int, offset_y: int) -> None:
    """Overwrite canvas[offset_y:offset_y+h, offset_x:offset_x+w] with the tile in place."""
    h, w = tile_image.shape[:2]
    canvas_h, canvas_w = canvas.shape[:2]
    if offset_x < 0 or offset_y < 0 or offset_x + w > canvas_w or offset_y + h > canvas_h:
        raise InvariantViolation(
            f"tile {w}x{h} at ({offset_x}, {offset_y}) exceeds canvas {canvas_w}x{canvas_h}"
        )
    if tile_image.shape[2:] != canvas.shape[2:]:
        raise InvariantViolation(
            f"tile channels {tile_image.shape[2:]} do not match canvas {canvas.shape[2:]}"
        )
    canvas[offset_y : offset_y + h, offset_x : offset_x + w] = tile_image


def generate_mosaic(
    canvas: U8Image,
    library: TileLibrary,
    geometry: GridGeometry,
    *,
    avoid_duplicates: bool = False,
    rng: Optional[np.random.Generator] = None,
    workers: int = 1,
    progress: bool = False,
) -> Tuple[U8Image, List[Placement]]:
    """
    Replace every cell of the canvas with its nearest tile.

    Args:
      canvas: uint8 [H,W,3] target already resized to geometry.canvas_size; modified in place
      library: tiles built for geometry.block_size
      geometry: grid layout
      avoid_duplicates: do not reuse a tile until all tiles have been used
      rng: source of the traversal order
      workers: threads for the per-cell library scan
      progress: print a percent/ETA line
    Returns:
      (canvas, placements in visiting order)
    """
    assert_u8_image_rgb(canvas)
    width, height = geometry.canvas_size
    if canvas.shape[:2] != (height, width):
        raise InvariantViolation(
            f"canvas is {canvas.shape[1]}x{canvas.shape[0]}, expected {width}x{height}"
        )
    if library.block_size != geometry.block_size:
        raise InvariantViolation(
            f"library built for {library.block_size}, grid uses {geometry.block_size}"
        )

    order = traversal_order(geometry, rng)
    placements: List[Placement] = []
    bar = Progress("mosaic", len(order), enabled=progress)

    pool = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
    try:
        matcher = Matcher(library, avoid_duplicates, workers=workers, pool=pool)
        for row, col in order:
            x0, y0, x1, y1 = geometry.cell_box(row, col)
            block = canvas[y0:y1, x0:x1]
            found = matcher.match(feature_map(block, library.space))
            paste(canvas, library[found.tile_index].image, x0, y0)
            placements.append(
                Placement((row, col), found.tile_index, found.score, found.reset)
            )
            bar.step()
    finally:
        if pool is not None:
            pool.shutdown(wait=True)
    bar.finish()
    return canvas, placements


__all__ = ["paste", "generate_mosaic"]
