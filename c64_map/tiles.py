# c64_map/tiles.py
from __future__ import annotations

"""
Per-tile colour budget.

Every full tile_size x tile_size tile may hold at most max_colours distinct
colours. Tiles over budget are reduced greedily: groups are ranked by pixel
count (stable, so equal counts keep first-appearance order), the smallest group
is removed and its pixels are repainted with the colour of the largest group,
whose count absorbs them. This repeats until max_colours groups remain.

merge="nearest" repaints with the remaining colour nearest in Lab instead of the
largest one. Tiles that run past the right or bottom edge are not touched.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List

import numpy as np

from .colour_convert import rgb_to_lab
from .constants import DISTANCE_SCALE, MAX_TILE_COLOURS, MERGE_STRATEGIES, TILE_SIZE
from .core_types import ColourGroup, Coord, RGBTuple, U8Image
from .utils import pack_rgb_keys, split_rows_into_parts


def colour_groups(rgb: U8Image, top: int, left: int, tile_size: int) -> List[ColourGroup]:
    """Colour groups of one tile, ordered by first appearance (row-major)."""
    groups: Dict[RGBTuple, ColourGroup] = {}
    block = rgb[top : top + tile_size, left : left + tile_size]
    for dy, row in enumerate(block.tolist()):
        for dx, px in enumerate(row):
            key = (px[0], px[1], px[2])
            group = groups.get(key)
            if group is None:
                group = groups[key] = ColourGroup(count=0, rgb=key)
            group.count += 1
            group.coords.append((top + dy, left + dx))
    return list(groups.values())


def _nearest_group(removed: ColourGroup, remaining: List[ColourGroup]) -> int:
    """Index into remaining of the colour nearest to removed in Lab (rank order on ties)."""
    cols = np.array([removed.rgb] + [g.rgb for g in remaining], dtype=np.uint8)
    lab = rgb_to_lab(cols)
    diff = lab[1:] - lab[0]
    dist = np.sqrt(np.sum(diff * diff, axis=1))
    keys = np.abs(dist * np.float32(DISTANCE_SCALE)).astype(np.int64)
    return int(np.argmin(keys))


def reduce_groups(
    groups: List[ColourGroup],
    max_colours: int = MAX_TILE_COLOURS,
    merge: str = "majority",
) -> Dict[Coord, RGBTuple]:
    """
    Shrink groups in place to max_colours and return the repaints {coord: rgb}.

    A coordinate repainted more than once keeps its last colour.
    """
    repaint: Dict[Coord, RGBTuple] = {}
    while len(groups) > max_colours:
        groups.sort(key=lambda g: g.count, reverse=True)
        last = groups.pop()
        target = groups[0] if merge == "majority" else groups[_nearest_group(last, groups)]
        for coord in last.coords:
            repaint[coord] = target.rgb
        target.count += last.count
        target.coords.extend(last.coords)
    return repaint


def _reduce_span(
    rgb: U8Image,
    keys: np.ndarray,
    tile_rows: range,
    n_tile_cols: int,
    tile_size: int,
    max_colours: int,
    merge: str,
) -> int:
    rewritten = 0
    for ty in tile_rows:
        top = ty * tile_size
        for tx in range(n_tile_cols):
            left = tx * tile_size
            block = keys[top : top + tile_size, left : left + tile_size]
            if np.unique(block).size <= max_colours:
                continue
            groups = colour_groups(rgb, top, left, tile_size)
            for (y, x), colour in reduce_groups(groups, max_colours, merge).items():
                rgb[y, x] = colour
            rewritten += 1
    return rewritten


def reduce_tile_colours(
    rgb: U8Image,
    *,
    max_colours: int = MAX_TILE_COLOURS,
    tile_size: int = TILE_SIZE,
    merge: str = "majority",
    workers: int = 1,
) -> int:
    """
    Enforce the per-tile colour budget on rgb in place.

    Returns the number of tiles that were rewritten.
    """
    if merge not in MERGE_STRATEGIES:
        raise ValueError(f"unknown merge strategy {merge!r}")
    if max_colours < 1 or tile_size < 1:
        raise ValueError("max_colours and tile_size must be positive")

    n_tile_rows = rgb.shape[0] // tile_size
    n_tile_cols = rgb.shape[1] // tile_size
    if n_tile_rows == 0 or n_tile_cols == 0:
        return 0
    keys = pack_rgb_keys(rgb)

    spans = split_rows_into_parts(n_tile_rows, workers)
    if workers <= 1 or len(spans) <= 1:
        return _reduce_span(
            rgb, keys, range(n_tile_rows), n_tile_cols, tile_size, max_colours, merge
        )

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(
                _reduce_span,
                rgb,
                keys,
                range(s, e),
                n_tile_cols,
                tile_size,
                max_colours,
                merge,
            )
            for s, e in spans
        ]
        return sum(fu.result() for fu in futures)


__all__ = ["colour_groups", "reduce_groups", "reduce_tile_colours"]
