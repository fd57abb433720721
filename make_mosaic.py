#!/usr/bin/env python3
"""
make_mosaic.py
Build a photo mosaic: each cell of the target image is replaced by the most
similar image from a source folder.

Usage:
  python make_mosaic.py TARGET ROW_SIZE COL_SIZE IMAGES [-c rgb|lab|gray] [-o OUTPUT] [-d]

  ROW_SIZE : number of cells across (x)
  COL_SIZE : number of cells down (y)
  IMAGES   : folder of source images (png, jpg, webp, bmp, gif, tiff)

Options:
  -c/--color-space   matching space, default lab (L doubled for lightness weight)
  -o/--output        output path, default mosaic.jpg; format follows the suffix
  -d/--avoid-duplicates
                     do not reuse a source image until every one has been used
  --seed             fix the cell visiting order
  --workers          threads for decoding, tile building and matching
  --no-progress      hide the progress line
  --debug            extra timing and allocation details

Exit status:
  0 success, 2 configuration error, 1 any other failure.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from mosaicify import __version__
from mosaicify.colour_convert import ColorSpace
from mosaicify.errors import ConfigError, MosaicError
from mosaicify.pipeline import MosaicConfig, run_mosaic
from mosaicify.utils import (
    default_workers,
    enable_line_buffered_stdout,
    error,
    print_config_line,
)


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mosaicify",
        description="Generates a mosaic image from a target image and a set of source images.",
    )
    parser.add_argument("target", type=Path, help="Path to the target image")
    parser.add_argument(
        "row_size", type=_positive_int, help="Number of cells across the mosaic"
    )
    parser.add_argument(
        "col_size", type=_positive_int, help="Number of cells down the mosaic"
    )
    parser.add_argument(
        "images", type=Path, help="Path to the directory containing source images"
    )
    parser.add_argument(
        "-c",
        "--color-space",
        "--color_space",
        dest="color_space",
        choices=[s.value for s in ColorSpace],
        default=ColorSpace.LAB.value,
        help="Colour space for matching tiles: rgb, lab (perceptual), or gray (intensity).",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=Path("mosaic.jpg"), help="Output image path"
    )
    parser.add_argument(
        "-d",
        "--avoid-duplicates",
        action="store_true",
        help="Avoid using duplicate images in the mosaic",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for the cell visiting order"
    )
    parser.add_argument(
        "--workers", type=int, default=default_workers(), help="Internal workers"
    )
    parser.add_argument(
        "--no-progress",
        dest="progress",
        action="store_false",
        help="Do not print the progress line",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose run details")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> MosaicConfig:
    return MosaicConfig(
        target=args.target,
        row_size=args.row_size,
        col_size=args.col_size,
        images=args.images,
        output=args.output,
        color_space=ColorSpace.parse(args.color_space),
        avoid_duplicates=args.avoid_duplicates,
        seed=args.seed,
        workers=args.workers,
        progress=args.progress,
        debug=args.debug,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    enable_line_buffered_stdout()
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    print_config_line(
        "run",
        [
            ("Colour space", config.color_space.value),
            ("Avoid duplicates", config.avoid_duplicates),
            ("Workers", config.workers),
        ],
        debug=False,
    )

    try:
        run_mosaic(config)
    except ConfigError as exc:
        error(str(exc))
        return 2
    except MosaicError as exc:
        error(str(exc))
        return 1
    except OSError as exc:
        error(f"{exc}")
        return 1
    print("All done.", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
