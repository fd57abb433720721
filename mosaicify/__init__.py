# mosaicify/__init__.py
"""
mosaicify package.

Purpose:
  Rebuild a target image as a grid of tiles picked from a folder of source
  images. See make_mosaic.py for the CLI.

Public API:
  compose_mosaic  : in-memory entry point (decoded arrays in, mosaic out).
  run_mosaic      : file-based entry point driven by a MosaicConfig.
  ColorSpace      : matching feature space (rgb, lab, gray).
  colour_convert  : per-pixel feature transforms.
  grid            : block geometry and traversal order.
  library         : tile library builder.
  match           : distance score and nearest-tile search.
  compose         : paste and the traversal driver.
  errors          : ConfigError, DecodeError, InvariantViolation.

Quick start:
  from mosaicify import compose_mosaic, ColorSpace
  result = compose_mosaic(target, sources, 40, 30, ColorSpace.LAB, avoid_duplicates=True)
"""

__version__ = "0.3.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import errors
from . import grid
from . import image_io
from . import library
from . import match
from . import compose
from . import utils

from .colour_convert import ColorSpace
from .errors import ConfigError, DecodeError, InvariantViolation, MosaicError
from .pipeline import MosaicConfig, MosaicResult, compose_mosaic, run_mosaic

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "errors",
    "grid",
    "image_io",
    "library",
    "match",
    "compose",
    "utils",
    "ColorSpace",
    "MosaicError",
    "ConfigError",
    "DecodeError",
    "InvariantViolation",
    "MosaicConfig",
    "MosaicResult",
    "compose_mosaic",
    "run_mosaic",
]
