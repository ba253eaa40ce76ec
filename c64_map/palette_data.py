# c64_map/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  PALETTE: list[tuple[str, str]]         # [(hex, name), ...] default C64 colours
  PEPTO_PALETTE: list[tuple[str, str]]   # older Pepto measurements, same order
  PALETTES: dict[str, list[tuple[str, str]]]
  build_palette(hex_name_pairs=PALETTE) -> PaletteViews
  palette_by_name(name) -> PaletteViews
"""

from typing import Dict, List, Tuple

import numpy as np

from .colour_convert import rgb_to_lab
from .core_types import PaletteItem, PaletteViews, hex_to_rgb, rgb_to_hex

PALETTE_SIZE = 16

# Declaration order is the VIC-II colour index order and breaks matching ties.
PALETTE: List[Tuple[str, str]] = [
    ("#000000", "Black"),
    ("#ffffff", "White"),
    ("#9f4e44", "Red"),
    ("#6abfc6", "Cyan"),
    ("#a057a3", "Purple"),
    ("#5cab5e", "Green"),
    ("#50459b", "Blue"),
    ("#c9d487", "Yellow"),
    ("#a1683c", "Orange"),
    ("#6d5412", "Brown"),
    ("#cb7e75", "Light Red"),
    ("#626262", "Dark Grey"),
    ("#898989", "Grey"),
    ("#9ad284", "Light Green"),
    ("#887ecb", "Light Blue"),
    ("#adadad", "Light Grey"),
]

PEPTO_PALETTE: List[Tuple[str, str]] = [
    ("#000000", "Black"),
    ("#ffffff", "White"),
    ("#68372b", "Red"),
    ("#70a4b2", "Cyan"),
    ("#6f3d86", "Purple"),
    ("#588d43", "Green"),
    ("#352879", "Blue"),
    ("#b8c76f", "Yellow"),
    ("#6f4f25", "Orange"),
    ("#433900", "Brown"),
    ("#9a6759", "Light Red"),
    ("#444444", "Dark Grey"),
    ("#6c6c6c", "Grey"),
    ("#9ad284", "Light Green"),
    ("#6c5eb5", "Light Blue"),
    ("#959595", "Light Grey"),
]

PALETTES: Dict[str, List[Tuple[str, str]]] = {
    "default": PALETTE,
    "pepto": PEPTO_PALETTE,
}


def build_palette(
    hex_name_pairs: List[Tuple[str, str]] = PALETTE,
) -> PaletteViews:
    """
    Convert a list of (hex, name) into PaletteViews:
      items: tuple[PaletteItem] with rgb, name, lab
      rgb: uint8 array [16,3]
      lab: float32 array [16,3]
      name_of: dict mapping "#rrggbb" -> name
    """
    if len(hex_name_pairs) != PALETTE_SIZE:
        raise ValueError(
            f"palette must have {PALETTE_SIZE} entries, got {len(hex_name_pairs)}"
        )
    rgbs_u8 = np.array([hex_to_rgb(hx) for hx, _ in hex_name_pairs], dtype=np.uint8)
    pal_lab = rgb_to_lab(rgbs_u8).reshape(-1, 3)

    items: List[PaletteItem] = []
    name_of: Dict[str, str] = {}
    for i, (_hx, name) in enumerate(hex_name_pairs):
        rgb_tuple = (int(rgbs_u8[i, 0]), int(rgbs_u8[i, 1]), int(rgbs_u8[i, 2]))
        items.append(PaletteItem(rgb=rgb_tuple, name=name, lab=pal_lab[i].copy()))
        name_of[rgb_to_hex(rgb_tuple)] = name

    rgbs_u8.setflags(write=False)
    pal_lab.setflags(write=False)
    return PaletteViews(items=tuple(items), rgb=rgbs_u8, lab=pal_lab, name_of=name_of)


def palette_by_name(name: str) -> PaletteViews:
    """Build one of the built-in palettes by key in PALETTES."""
    try:
        pairs = PALETTES[name]
    except KeyError:
        raise ValueError(
            f"unknown palette {name!r}; choose from {', '.join(sorted(PALETTES))}"
        ) from None
    return build_palette(pairs)


__all__ = [
    "PALETTE_SIZE",
    "PALETTE",
    "PEPTO_PALETTE",
    "PALETTES",
    "build_palette",
    "palette_by_name",
]
