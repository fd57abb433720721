# mosaicify/colour_convert.py
from __future__ import annotations

"""
Per-pixel feature transforms used for tile matching (D65).

Exports:
  rgb_to_linear(srgb)
  rgb_identity(rgb)
  rgb_to_grey(rgb)
  rgb_to_lab(rgb)
  ColorSpace
  feature_map(image, space)

All transforms take 0..255 RGB arrays of shape (..., 3) and return float32.
"""

from enum import Enum
from typing import Callable

import numpy as np

from .core_types import FeatureMap, Lab, U8Image
from .errors import ConfigError


# sRGB to linear


def rgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    Args:
      srgb: array in 0..1 (float), any shape
    Returns:
      float32 array, same shape
    """
    srgb_f = srgb.astype(np.float32, copy=False)
    with np.errstate(invalid="ignore"):
        linear = np.where(
            srgb_f > 0.04045, ((srgb_f + 0.055) / 1.055) ** 2.4, srgb_f / 12.92
        )
    return linear.astype(np.float32, copy=False)


# Identity and luma


def rgb_identity(rgb: np.ndarray) -> FeatureMap:
    """Raw channel values as float32. Shape (..., 3) preserved."""
    return np.asarray(rgb).astype(np.float32, copy=True)


def rgb_to_grey(rgb: np.ndarray) -> FeatureMap:
    """Perceptual luma 0.3R + 0.59G + 0.11B. Returns shape (..., 1)."""
    rgb_f = np.asarray(rgb).astype(np.float32, copy=False)
    luma = 0.3 * rgb_f[..., 0] + 0.59 * rgb_f[..., 1] + 0.11 * rgb_f[..., 2]
    return luma[..., None].astype(np.float32, copy=False)


# sRGB to Lab (D65), lightness doubled


def rgb_to_lab(rgb: np.ndarray) -> Lab:
    """
    sRGB 0..255 to CIE Lab (D65) with L scaled by 2.

    Doubling L makes lightness differences weigh more than hue and chroma in
    the matching distance. White maps to L=200, black to L=0.
    Preserves shape (..., 3). Returns float32.
    """
    rgb_f = np.asarray(rgb).astype(np.float32, copy=False) / 255.0

    r_lin = rgb_to_linear(rgb_f[..., 0])
    g_lin = rgb_to_linear(rgb_f[..., 1])
    b_lin = rgb_to_linear(rgb_f[..., 2])

    # Linear RGB -> XYZ (D65), normalised by the reference white
    x = (0.4124 * r_lin + 0.3576 * g_lin + 0.1805 * b_lin) / 0.95047
    y = (0.2126 * r_lin + 0.7152 * g_lin + 0.0722 * b_lin) / 1.00000
    z = (0.0193 * r_lin + 0.1192 * g_lin + 0.9505 * b_lin) / 1.08883

    def f(t: np.ndarray) -> np.ndarray:
        with np.errstate(invalid="ignore"):
            return np.where(
                t > 0.008856, np.cbrt(t), 7.787 * t + 16.0 / 116.0
            ).astype(np.float32, copy=False)

    fx, fy, fz = f(x), f(y), f(z)
    L = 116.0 * fy - 16.0

    out = np.empty(rgb_f.shape, dtype=np.float32)
    out[..., 0] = 2.0 * L
    out[..., 1] = 500.0 * (fx - fy)
    out[..., 2] = 200.0 * (fy - fz)
    return out


# Colour space selection


class ColorSpace(Enum):
    """Feature space used to compare blocks with tiles."""

    RGB = "rgb"
    LAB = "lab"
    GRAY = "gray"

    @property
    def transform(self) -> Callable[[np.ndarray], FeatureMap]:
        return _TRANSFORMS[self]

    @property
    def channels(self) -> int:
        return 1 if self is ColorSpace.GRAY else 3

    @classmethod
    def parse(cls, name: "str | ColorSpace") -> "ColorSpace":
        if isinstance(name, ColorSpace):
            return name
        key = str(name).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        choices = ", ".join(m.value for m in cls)
        raise ConfigError(f"unknown colour space {name!r} (choose from {choices})")

    def __str__(self) -> str:
        return self.value


_TRANSFORMS = {
    ColorSpace.RGB: rgb_identity,
    ColorSpace.LAB: rgb_to_lab,
    ColorSpace.GRAY: rgb_to_grey,
}


def feature_map(image: U8Image, space: ColorSpace) -> FeatureMap:
    """Feature map (H, W, C) of an RGB image under the given colour space."""
    return space.transform(image)


__all__ = [
    "rgb_to_linear",
    "rgb_identity",
    "rgb_to_grey",
    "rgb_to_lab",
    "ColorSpace",
    "feature_map",
]
