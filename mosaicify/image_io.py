# mosaicify/image_io.py
from __future__ import annotations

import io
from pathlib import Path
from typing import List

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import Size, U8Image, assert_u8_image_rgb
from .errors import ConfigError, DecodeError
from .utils import warn

"""
Image I/O helpers (RGB in sRGB), Lanczos resize, and source folder listing.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]

IMAGE_EXTS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".webp",
    ".bmp",
    ".gif",
    ".tif",
    ".tiff",
}


def _convert_to_srgb_rgb(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None and im.mode in ("RGB", "RGBA", "CMYK"):
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGB",
            )
            if im2 is not None:
                return im2
        except (OSError, ImageCms.PyCMSError) as exc:
            warn(f"ignoring ICC profile: {exc}")

    return im.convert("RGB")


def load_image_rgb(path: Path) -> U8Image:
    """Decode any Pillow-readable image to a uint8 (H,W,3) sRGB array."""
    try:
        with Image.open(path) as im0:
            im0.load()
            im = _convert_to_srgb_rgb(im0)
    except FileNotFoundError as exc:
        raise DecodeError("file not found", path=path) from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeError(f"cannot decode image: {exc}", path=path) from exc
    return np.array(im, dtype=np.uint8)


def save_image_rgb(path: Path, rgb: U8Image) -> Path:
    """Encode an RGB array; the format follows the file suffix."""
    assert_u8_image_rgb(rgb)
    path.parent.mkdir(parents=True, exist_ok=True)
    im = Image.fromarray(np.ascontiguousarray(rgb))
    try:
        if path.suffix.lower() in (".jpg", ".jpeg"):
            im.save(path, quality=95)
        else:
            im.save(path)
    except (KeyError, ValueError) as exc:
        raise ConfigError(f"unsupported output format: {exc}", path=path) from exc
    return path


def resize_rgb(rgb: U8Image, size: Size) -> U8Image:
    """
    Resize to exactly (width, height) with a 3-lobe Lanczos filter.
    Aspect ratio is not preserved.
    """
    width, height = size
    if rgb.shape[1] == width and rgb.shape[0] == height:
        return rgb
    im = Image.fromarray(np.ascontiguousarray(rgb))
    im2 = im.resize((width, height), resample=Image.Resampling.LANCZOS)
    return np.array(im2, dtype=np.uint8)


def list_image_files(directory: Path) -> List[Path]:
    """
    Image files directly inside directory, ordered by lower-cased name.
    Hidden files and non-image suffixes are skipped.
    """
    if not directory.is_dir():
        raise ConfigError("source directory not found", path=directory)
    files = [
        p
        for p in directory.iterdir()
        if p.is_file()
        and not p.name.startswith(".")
        and p.suffix.lower() in IMAGE_EXTS
    ]
    files.sort(key=lambda p: (p.name.lower(), p.name))
    return files


__all__ = [
    "IMAGE_EXTS",
    "load_image_rgb",
    "save_image_rgb",
    "resize_rgb",
    "list_image_files",
]
