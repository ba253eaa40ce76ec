# c64_map/pairing.py
from __future__ import annotations

"""
Multicolour pixel pairing: every odd column takes the colour of the even column
to its left. On odd widths the last column has no partner and is left as is.
"""

import numpy as np

from .core_types import U8Image


def fix_pixel_pairs(rgb: U8Image) -> U8Image:
    """Copy column x-1 into every odd column x, in place. Returns rgb."""
    n_pairs = rgb.shape[1] // 2
    if n_pairs:
        rgb[:, 1 : 2 * n_pairs : 2] = rgb[:, 0 : 2 * n_pairs : 2]
    return rgb


def pairs_are_uniform(rgb: U8Image) -> bool:
    """True when every (even, odd) column pair holds identical colours."""
    n_pairs = rgb.shape[1] // 2
    return bool(
        np.array_equal(rgb[:, 1 : 2 * n_pairs : 2], rgb[:, 0 : 2 * n_pairs : 2])
    )


__all__ = ["fix_pixel_pairs", "pairs_are_uniform"]
