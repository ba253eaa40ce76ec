# c64_map/dither.py
from __future__ import annotations

"""
Row-wise error diffusion for multicolour mode.

Only even columns are matched: odd columns are overwritten by pixel pairing
afterwards, so carrying error through them would count it twice. Along a row
the Lab error is folded left to right:

    error <- ERROR_DECAY * (error + residual)

and reset to zero at the start of every row. Rows share no state, so row spans
can go to a thread pool.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List

import numpy as np

from .colour_convert import rgb_to_lab_threaded
from .constants import ERROR_DECAY, PIXEL_PAIR
from .core_types import ErrorVector, Lab, PaletteViews, U8Image
from .matcher import match_lab
from .utils import split_rows_into_parts


def dither_row_indices(row_lab: Lab, pal_lab: Lab) -> np.ndarray:
    """
    Palette indices for the even columns of one row.

    row_lab: float32 [W,3] source Lab for the whole row.
    Returns int32 [ceil(W/2)].
    """
    error: ErrorVector = np.zeros(3, dtype=np.float32)
    picks: List[int] = []
    for src_lab in row_lab[::PIXEL_PAIR]:
        best, residual = match_lab(src_lab, error, pal_lab)
        picks.append(best)
        error = (np.float32(ERROR_DECAY) * (error + residual)).astype(
            np.float32, copy=False
        )
    return np.asarray(picks, dtype=np.int32)


def _dither_span(
    rgb: U8Image, src_lab: Lab, palette: PaletteViews, start: int, end: int
) -> None:
    for y in range(start, end):
        idx = dither_row_indices(src_lab[y], palette.lab)
        rgb[y, ::PIXEL_PAIR] = palette.rgb[idx]


def dither_image(rgb: U8Image, palette: PaletteViews, *, workers: int = 1) -> U8Image:
    """
    Dither rgb in place onto the palette and return it.

    Each even-column pixel is read once before it is written, so the source Lab
    is converted for the whole image up front.
    """
    height, width = rgb.shape[0], rgb.shape[1]
    if height == 0 or width == 0:
        return rgb
    src_lab = rgb_to_lab_threaded(rgb, workers)

    spans = split_rows_into_parts(height, workers)
    if workers <= 1 or len(spans) <= 1:
        _dither_span(rgb, src_lab, palette, 0, height)
        return rgb

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(_dither_span, rgb, src_lab, palette, s, e) for s, e in spans
        ]
        for fu in futures:
            fu.result()
    return rgb


__all__ = ["dither_row_indices", "dither_image"]
