# c64_map/colour_convert.py
from __future__ import annotations

"""
Colour conversions (D65).

Exports:
  rgb_to_linear(srgb)
  rgb_to_lab(rgb)
  rgb_to_lab_threaded(rgb, workers)
  clamp_lab(lab)
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .constants import LAB_AB_RANGE, LAB_L_RANGE
from .core_types import Lab
from .utils import split_rows_into_parts


# sRGB to linear


def rgb_to_linear(srgb: np.ndarray) -> np.ndarray:
    """
    Convert sRGB (non-linear 0..1) to linear RGB (0..1). Vectorised.
    Args:
      srgb: array[...] in 0..1 (float)
    Returns:
      float32 array, same shape
    """
    srgb_f = srgb.astype(np.float32, copy=False)
    with np.errstate(invalid="ignore"):
        linear = np.where(
            srgb_f <= 0.04045, srgb_f / 12.92, ((srgb_f + 0.055) / 1.055) ** 2.4
        )
    return linear.astype(np.float32, copy=False)


# sRGB to Lab (D65)


def rgb_to_lab(rgb: np.ndarray) -> Lab:
    """
    sRGB to CIE Lab (D65).
    uint8 input is read as 0..255, float input as normalised 0..1.
    Preserves shape (...,3). Returns float32.
    """
    rgb_arr = np.asarray(rgb)
    if rgb_arr.dtype == np.uint8:
        rgb_f = rgb_arr.astype(np.float32) / np.float32(255.0)
    else:
        rgb_f = rgb_arr.astype(np.float32, copy=False)

    r_lin = rgb_to_linear(rgb_f[..., 0])
    g_lin = rgb_to_linear(rgb_f[..., 1])
    b_lin = rgb_to_linear(rgb_f[..., 2])

    # Linear RGB -> XYZ (D65)
    X = 0.4124564 * r_lin + 0.3575761 * g_lin + 0.1804375 * b_lin
    Y = 0.2126729 * r_lin + 0.7151522 * g_lin + 0.0721750 * b_lin
    Z = 0.0193339 * r_lin + 0.1191920 * g_lin + 0.9503041 * b_lin

    # Reference white (D65)
    Xn, Yn, Zn = 0.95047, 1.00000, 1.08883
    x, y, z = X / Xn, Y / Yn, Z / Zn
    e, k = 216.0 / 24389.0, 24389.0 / 27.0

    def f(t: np.ndarray) -> np.ndarray:
        with np.errstate(invalid="ignore"):
            return np.where(t > e, np.cbrt(t), (k * t + 16.0) / 116.0).astype(
                np.float32, copy=False
            )

    fx, fy, fz = f(x), f(y), f(z)
    L = 116.0 * fy - 16.0
    a = 500.0 * (fx - fy)
    b = 200.0 * (fy - fz)

    out = np.empty(rgb_f.shape, dtype=np.float32)
    out[..., 0] = L
    out[..., 1] = a
    out[..., 2] = b
    return out


def clamp_lab(lab: np.ndarray) -> Lab:
    """Clamp L to LAB_L_RANGE and a/b to LAB_AB_RANGE. Returns a new float32 array."""
    out = np.array(lab, dtype=np.float32, copy=True)
    out[..., 0] = np.clip(out[..., 0], LAB_L_RANGE[0], LAB_L_RANGE[1])
    out[..., 1:] = np.clip(out[..., 1:], LAB_AB_RANGE[0], LAB_AB_RANGE[1])
    return out


# Threaded helpers


def rgb_to_lab_threaded(rgb: np.ndarray, workers: int) -> Lab:
    """
    Threaded RGB->Lab conversion by splitting rows.

    Args:
      rgb: uint8 or float array [H,W,3]
      workers: number of threads; if <=1 or H<256, runs single-threaded
    Returns:
      Lab float32 array [H,W,3]
    """
    height = int(rgb.shape[0])
    if workers <= 1 or height < 256:
        return rgb_to_lab(rgb)

    chunks = split_rows_into_parts(height, workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(rgb_to_lab, rgb[s:e]) for s, e in chunks]
        parts = [f.result() for f in futures]
    return np.vstack(parts).astype(np.float32, copy=False)


__all__ = [
    "rgb_to_linear",
    "rgb_to_lab",
    "clamp_lab",
    "rgb_to_lab_threaded",
]
