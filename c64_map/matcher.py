# c64_map/matcher.py
from __future__ import annotations

"""
Nearest-palette matching in Lab with a carried error term.

The search point is the source Lab plus ERROR_GAIN times the incoming error,
clamped to the legal Lab ranges. Palette entries are ranked by
int(|trial - entry| * DISTANCE_SCALE); equal keys keep palette order.

Exports:
  trial_point(src_lab, error_in)
  match_lab(src_lab, error_in, pal_lab) -> (index, residual)
  error_table(source_rgb, error_in, palette) -> [(key, residual, rgb), ...]
  match_colour(source_rgb, error_in, palette) -> (rgb, residual)
"""

from typing import List, Optional, Tuple

import numpy as np

from .colour_convert import clamp_lab, rgb_to_lab
from .constants import DISTANCE_SCALE, ERROR_GAIN
from .core_types import ErrorVector, Lab, PaletteViews, RGBTuple


def _as_error(error_in: Optional[np.ndarray]) -> ErrorVector:
    if error_in is None:
        return np.zeros(3, dtype=np.float32)
    return np.asarray(error_in, dtype=np.float32).reshape(3)


def trial_point(src_lab: np.ndarray, error_in: Optional[np.ndarray]) -> Lab:
    """Source Lab shifted by ERROR_GAIN * error and clamped to the Lab gamut."""
    shifted = np.asarray(src_lab, dtype=np.float32).reshape(3) + np.float32(
        ERROR_GAIN
    ) * _as_error(error_in)
    return clamp_lab(shifted)


def _distance_keys(trial: Lab, pal_lab: Lab) -> Tuple[np.ndarray, np.ndarray]:
    """Residual rows (trial - entry) and their integer distance keys."""
    residuals = (trial[None, :] - pal_lab).astype(np.float32, copy=False)
    dist = np.sqrt(np.sum(residuals * residuals, axis=1))
    keys = np.abs(dist * np.float32(DISTANCE_SCALE)).astype(np.int64)
    return residuals, keys


def match_lab(
    src_lab: np.ndarray, error_in: Optional[np.ndarray], pal_lab: Lab
) -> Tuple[int, ErrorVector]:
    """
    Best palette index for a Lab source and its residual.

    np.argmin returns the first minimum, which is the palette-order tie-break.
    """
    trial = trial_point(src_lab, error_in)
    residuals, keys = _distance_keys(trial, pal_lab)
    best = int(np.argmin(keys))
    return best, residuals[best].copy()


def error_table(
    source_rgb: np.ndarray,
    error_in: Optional[np.ndarray],
    palette: PaletteViews,
) -> List[Tuple[int, ErrorVector, RGBTuple]]:
    """
    Full ranking of palette entries for one source colour.

    source_rgb: normalised RGB floats in 0..1, or uint8 0..255.
    Returns [(key, residual, rgb), ...] sorted ascending by key, palette order on ties.
    """
    src_lab = rgb_to_lab(np.asarray(source_rgb).reshape(1, 3))[0]
    trial = trial_point(src_lab, error_in)
    residuals, keys = _distance_keys(trial, palette.lab)
    order = np.argsort(keys, kind="stable")
    return [
        (int(keys[i]), residuals[i].copy(), palette.items[int(i)].rgb)
        for i in order.tolist()
    ]


def match_colour(
    source_rgb: np.ndarray,
    error_in: Optional[np.ndarray],
    palette: PaletteViews,
) -> Tuple[RGBTuple, ErrorVector]:
    """Best palette colour for source_rgb given the carried error, plus its residual."""
    src_lab = rgb_to_lab(np.asarray(source_rgb).reshape(1, 3))[0]
    best, residual = match_lab(src_lab, error_in, palette.lab)
    return palette.items[best].rgb, residual


__all__ = ["trial_point", "match_lab", "error_table", "match_colour"]
