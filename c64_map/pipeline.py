# c64_map/pipeline.py
from __future__ import annotations

"""
The conversion pipeline: dither -> pixel pairing -> tile colour budget.

process_image() is the single entry point used by the batch and CLI layers.
It mutates the buffer in place and returns it.
"""

import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .constants import MAX_TILE_COLOURS, MERGE_STRATEGIES, TILE_SIZE
from .core_types import PaletteViews, U8Image, assert_u8_image_rgb
from .dither import dither_image
from .pairing import fix_pixel_pairs
from .tiles import reduce_tile_colours
from .utils import debug_log, format_seconds_compact, key_value_pairs_to_string


@dataclass
class ConvertOptions:
    """Options for one pipeline run."""

    workers: int = 1
    merge: str = "majority"  # majority, nearest
    max_colours: int = MAX_TILE_COLOURS
    tile_size: int = TILE_SIZE
    debug: bool = False

    def __post_init__(self) -> None:
        if self.merge not in MERGE_STRATEGIES:
            raise ValueError(
                f"merge must be one of {', '.join(MERGE_STRATEGIES)}, got {self.merge!r}"
            )
        self.workers = max(1, int(self.workers))


@dataclass
class PipelineStats:
    """Timings and counters from the last process_image() call."""

    tiles_reduced: int = 0
    dither_secs: float = 0.0
    pairing_secs: float = 0.0
    tiles_secs: float = 0.0


def process_image(
    rgb: np.ndarray,
    palette: PaletteViews,
    options: Optional[ConvertOptions] = None,
    stats: Optional[PipelineStats] = None,
) -> U8Image:
    """
    Run dither -> pair-fix -> tile-reduce on rgb in place.

    Raises UnsupportedPixelFormatError unless rgb is a uint8 (H,W,3) array.
    The stages themselves do not fail on a well-formed buffer.
    """
    opts = options or ConvertOptions()
    image = assert_u8_image_rgb(rgb)

    t0 = time.perf_counter()
    dither_image(image, palette, workers=opts.workers)
    t1 = time.perf_counter()
    fix_pixel_pairs(image)
    t2 = time.perf_counter()
    reduced = reduce_tile_colours(
        image,
        max_colours=opts.max_colours,
        tile_size=opts.tile_size,
        merge=opts.merge,
        workers=opts.workers,
    )
    t3 = time.perf_counter()

    if stats is not None:
        stats.tiles_reduced = reduced
        stats.dither_secs = t1 - t0
        stats.pairing_secs = t2 - t1
        stats.tiles_secs = t3 - t2

    if opts.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Dither", format_seconds_compact(t1 - t0)),
                    ("Pairs", format_seconds_compact(t2 - t1)),
                    ("Tiles", format_seconds_compact(t3 - t2)),
                    ("Tiles reduced", reduced),
                ]
            )
        )
    return image


__all__ = ["ConvertOptions", "PipelineStats", "process_image"]
