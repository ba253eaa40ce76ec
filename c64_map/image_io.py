# c64_map/image_io.py
from __future__ import annotations

import struct
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import U8Image
from .errors import DecodeError, ImageIOError, UnsupportedPixelFormatError
from .constants import OUTPUT_SUFFIX

"""
Image I/O helpers: decode to uint8 RGB, encode RGB to PNG.
"""

# Pillow modes whose samples are 8 bits wide and convert to RGB without loss of meaning.
RGB_REDUCIBLE_MODES = frozenset(
    {"1", "L", "LA", "La", "P", "PA", "RGB", "RGBA", "RGBa", "RGBX", "CMYK", "YCbCr"}
)


def load_image_rgb(path: Path) -> U8Image:
    """
    Decode path with Pillow and return a writable uint8 (H,W,3) array.

    Raises DecodeError, UnsupportedPixelFormatError or ImageIOError.
    """
    try:
        with Image.open(path) as im:
            im.load()
            im = ImageOps.exif_transpose(im)
            if im.mode not in RGB_REDUCIBLE_MODES:
                raise UnsupportedPixelFormatError(
                    f"pixel format {im.mode!r} is not reducible to 8-bit RGB"
                )
            rgb = im.convert("RGB")
    except UnidentifiedImageError as exc:
        raise DecodeError(f"not a recognised image: {path}") from exc
    except (Image.DecompressionBombError, EOFError, struct.error) as exc:
        raise DecodeError(f"cannot decode {path}: {exc}") from exc
    except (OSError, SyntaxError, ValueError) as exc:
        # Pillow raises OSError for truncated data as well as for missing files.
        if isinstance(exc, (FileNotFoundError, PermissionError, IsADirectoryError)):
            raise ImageIOError(f"cannot read {path}: {exc}") from exc
        raise DecodeError(f"cannot decode {path}: {exc}") from exc
    return np.array(rgb, dtype=np.uint8)


def save_image_rgb(path: Path, rgb: U8Image) -> Path:
    """Write rgb as PNG (suffix forced to .png), creating parent folders. Returns the path."""
    path = Path(path)
    if path.suffix.lower() != OUTPUT_SUFFIX:
        path = path.with_suffix(OUTPUT_SUFFIX)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(np.ascontiguousarray(rgb, dtype=np.uint8)).save(path)
    except OSError as exc:
        raise ImageIOError(f"cannot write {path}: {exc}") from exc
    return path


__all__ = [
    "RGB_REDUCIBLE_MODES",
    "load_image_rgb",
    "save_image_rgb",
]
