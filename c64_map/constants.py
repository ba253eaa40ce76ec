# c64_map/constants.py
"""
Tunables used across the project.

- Matching / dithering constants (ERROR_*, LAB_*, DISTANCE_SCALE)
- Multicolour layout constants (PIXEL_PAIR, TILE_SIZE, MAX_TILE_COLOURS)
- File discovery (IMAGE_EXTS, OUTPUT_SUFFIX)
"""
from __future__ import annotations

from typing import FrozenSet, Tuple

# =========================
# Matching / error diffusion
# =========================

# Share of the carried error added to the source colour before matching.
ERROR_GAIN = 0.7

# Carry update: error <- ERROR_DECAY * (error + residual).
ERROR_DECAY = 0.5

# Legal Lab ranges for the trial point. Keeps runaway error inside the gamut.
LAB_L_RANGE: Tuple[float, float] = (0.0, 100.0)
LAB_AB_RANGE: Tuple[float, float] = (-128.0, 127.0)

# Distances are compared as int(d * DISTANCE_SCALE) so near ties resolve by palette order.
DISTANCE_SCALE = 255.0

# =========================
# Multicolour layout
# =========================

# Horizontal pixels sharing one colour.
PIXEL_PAIR = 2

# Attribute cell edge and its colour budget.
TILE_SIZE = 8
MAX_TILE_COLOURS = 4

# Tile merge strategies. "majority" is the compatible default.
MERGE_STRATEGIES: Tuple[str, ...] = ("majority", "nearest")

# =========================
# Files
# =========================

IMAGE_EXTS: FrozenSet[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".webp", ".bmp", ".gif", ".tif", ".tiff"}
)
OUTPUT_SUFFIX = ".png"
