# c64_map/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .errors import UnsupportedPixelFormatError

# Basic aliases

RGBTuple = Tuple[int, int, int]
HexStr = str
Coord = Tuple[int, int]  # (y, x)

U8Image = NDArray[np.uint8]  # (H, W, 3)
Lab = NDArray[np.float32]  # (..., 3) CIE Lab
ErrorVector = NDArray[np.float32]  # (3,) Lab residual carried along a row

NameOf = Mapping[HexStr, str]  # "#rrggbb" -> human-readable name

# Value objects


@dataclass(frozen=True)
class PaletteItem:
    """Palette entry with its precomputed Lab row."""

    rgb: RGBTuple
    name: str
    lab: Lab  # shape (3,)


@dataclass(frozen=True)
class PaletteViews:
    """
    The palette in every shape the mappers need, built once and shared read-only.

    rgb and lab rows follow the declaration order of items.
    """

    items: Tuple[PaletteItem, ...]
    rgb: U8Image  # uint8 [P,3]
    lab: Lab  # float32 [P,3]
    name_of: NameOf

    def __len__(self) -> int:
        return len(self.items)

    def contains(self, rgb: Sequence[int]) -> bool:
        return coerce_to_rgb_tuple(rgb) in {p.rgb for p in self.items}


@dataclass
class ColourGroup:
    """Pixels of one tile that share a colour."""

    count: int
    rgb: RGBTuple
    coords: List[Coord] = field(default_factory=list)


# Small helpers


def rgb_to_hex(rgb: RGBTuple) -> HexStr:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def hex_to_rgb(hex_str: str) -> RGBTuple:
    """Parse '#rgb' or '#rrggbb' (case-insensitive) into an RGB tuple."""
    s = hex_str.strip().lower()
    if not s.startswith("#"):
        raise ValueError("hex must start with '#'")
    if len(s) == 4:
        r, g, b = s[1], s[2], s[3]
        s = f"#{r}{r}{g}{g}{b}{b}"
    if len(s) != 7:
        raise ValueError("hex must be '#rrggbb' or '#rgb'")
    return (int(s[1:3], 16), int(s[3:5], 16), int(s[5:7], 16))


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """
    Coerce a 3-length sequence or array to an (int, int, int) RGB tuple.
    Helpful when extracting values from NumPy rows.
    """
    if isinstance(value, np.ndarray):
        if value.size < 3:
            raise ValueError("array too small for RGB")
        return (int(value[..., 0]), int(value[..., 1]), int(value[..., 2]))
    if len(value) < 3:  # type: ignore[arg-type]
        raise ValueError("sequence too small for RGB")
    v = value  # type: ignore[assignment]
    return (int(v[0]), int(v[1]), int(v[2]))


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3) image and return it typed as U8Image."""
    if not isinstance(image, np.ndarray):
        raise UnsupportedPixelFormatError(
            f"expected a NumPy array, got {type(image).__name__}"
        )
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 3:
        raise UnsupportedPixelFormatError(
            f"expected uint8 (H,W,3) image, got {image.dtype} {image.shape}"
        )
    return image  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBTuple",
    "HexStr",
    "Coord",
    "U8Image",
    "Lab",
    "ErrorVector",
    "NameOf",
    # value objects
    "PaletteItem",
    "PaletteViews",
    "ColourGroup",
    # helpers
    "rgb_to_hex",
    "hex_to_rgb",
    "coerce_to_rgb_tuple",
    "assert_u8_image_rgb",
]
