# mosaicify/pipeline.py
from __future__ import annotations

"""
End-to-end run: target -> tile library -> mosaic -> file.

Each stage tags escaping MosaicErrors with its name so the CLI can report
where a run died.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .colour_convert import ColorSpace
from .core_types import Placement, U8Image
from .errors import ConfigError, MosaicError
from .grid import GridGeometry, compute_geometry
from .image_io import load_image_rgb, resize_rgb, save_image_rgb
from .library import TileLibrary, build_tile_library, load_source_images
from .compose import generate_mosaic
from .utils import (
    debug_log,
    default_workers,
    format_seconds_compact,
    key_value_pairs_to_string,
    log,
    print_config_line,
)

STAGE_TARGET = "preprocessing target"
STAGE_SOURCES = "preprocessing sources"
STAGE_MOSAIC = "generating mosaic"


@dataclass(frozen=True)
class MosaicConfig:
    target: Path
    row_size: int
    col_size: int
    images: Path
    output: Path = Path("mosaic.jpg")
    color_space: ColorSpace = ColorSpace.LAB
    avoid_duplicates: bool = False
    seed: Optional[int] = None
    workers: int = 1
    progress: bool = True
    debug: bool = False


@dataclass
class MosaicResult:
    image: U8Image
    geometry: GridGeometry
    placements: List[Placement]
    output: Optional[Path] = None

    @property
    def tiles_used(self) -> int:
        return len({p.tile_index for p in self.placements})


@contextmanager
def stage(name: str) -> Iterator[None]:
    try:
        yield
    except MosaicError as exc:
        exc.with_stage(name)
        raise


def prepare_target(
    target: U8Image, row_size: int, col_size: int
) -> Tuple[U8Image, GridGeometry]:
    """Grid geometry for the target and the target resized to the working canvas."""
    height, width = target.shape[:2]
    geometry = compute_geometry(width, height, row_size, col_size)
    canvas = np.array(resize_rgb(target, geometry.canvas_size), dtype=np.uint8, copy=True)
    return canvas, geometry


def compose_mosaic(
    target: U8Image,
    sources: List[U8Image],
    row_size: int,
    col_size: int,
    color_space: ColorSpace | str = ColorSpace.LAB,
    avoid_duplicates: bool = False,
    *,
    rng: Optional[np.random.Generator] = None,
    workers: int = 1,
    progress: bool = False,
) -> MosaicResult:
    """In-memory core: decoded target and sources in, mosaic array out."""
    space = ColorSpace.parse(color_space)
    with stage(STAGE_TARGET):
        canvas, geometry = prepare_target(target, row_size, col_size)
    with stage(STAGE_SOURCES):
        library = build_tile_library(sources, geometry.block_size, space, workers)
    with stage(STAGE_MOSAIC):
        image, placements = generate_mosaic(
            canvas,
            library,
            geometry,
            avoid_duplicates=avoid_duplicates,
            rng=rng,
            workers=workers,
            progress=progress,
        )
    return MosaicResult(image, geometry, placements)


def run_mosaic(config: MosaicConfig) -> MosaicResult:
    """Load inputs from disk, build the mosaic, and write it to config.output."""
    t_start = time.perf_counter()
    workers = config.workers if config.workers > 0 else default_workers()
    rng = np.random.default_rng(config.seed)
    space = ColorSpace.parse(config.color_space)

    log("[1/3] Preprocessing the target image.")
    with stage(STAGE_TARGET):
        if not config.target.is_file():
            raise ConfigError("target image not found", path=config.target)
        target = load_image_rgb(config.target)
        canvas, geometry = prepare_target(target, config.row_size, config.col_size)
    print_config_line(
        "grid",
        [
            ("Target", f"{target.shape[1]}x{target.shape[0]}"),
            ("Grid", f"{geometry.row_size}x{geometry.col_size}"),
            ("Block", f"{geometry.block_width}x{geometry.block_height}"),
            ("Canvas", f"{geometry.canvas_size[0]}x{geometry.canvas_size[1]}"),
        ],
        debug=config.debug,
    )
    log("[1/3] Finished preprocessing the target image.")

    log("[2/3] Preprocessing the source images.")
    t_sources = time.perf_counter()
    with stage(STAGE_SOURCES):
        sources = load_source_images(config.images, workers)
        library: TileLibrary = build_tile_library(
            sources, geometry.block_size, space, workers
        )
    del sources
    if config.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Tiles", len(library)),
                    ("Colour space", str(space)),
                    ("Time", format_seconds_compact(time.perf_counter() - t_sources)),
                ]
            )
        )
    log("[2/3] Finished preprocessing the source images.")

    log("[3/3] Generating the mosaic image.")
    t_mosaic = time.perf_counter()
    with stage(STAGE_MOSAIC):
        image, placements = generate_mosaic(
            canvas,
            library,
            geometry,
            avoid_duplicates=config.avoid_duplicates,
            rng=rng,
            workers=workers,
            progress=config.progress,
        )
        output = save_image_rgb(config.output, image)
    result = MosaicResult(image, geometry, placements, output)
    if config.debug:
        resets = sum(1 for p in placements if p.reset)
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Cells", len(placements)),
                    ("Tiles used", result.tiles_used),
                    ("Resets", resets),
                    ("Time", format_seconds_compact(time.perf_counter() - t_mosaic)),
                ]
            )
        )
    log("[3/3] Finished generating the mosaic image.")
    log(
        f"Wrote {output.name} | size={image.shape[1]}x{image.shape[0]} "
        f"| total={format_seconds_compact(time.perf_counter() - t_start)}"
    )
    return result


__all__ = [
    "STAGE_TARGET",
    "STAGE_SOURCES",
    "STAGE_MOSAIC",
    "MosaicConfig",
    "MosaicResult",
    "prepare_target",
    "compose_mosaic",
    "run_mosaic",
]
