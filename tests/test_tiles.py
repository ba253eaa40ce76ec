import numpy as np
import pytest

from c64_map.tiles import colour_groups, reduce_groups, reduce_tile_colours
from c64_map.utils import max_colours_per_tile

A = (0, 0, 0)
B = (255, 255, 255)
C = (0x9F, 0x4E, 0x44)
D = (0x50, 0x45, 0x9B)
E = (0xCB, 0x7E, 0x75)


def _tile(fill, placements):
    img = np.empty((8, 8, 3), dtype=np.uint8)
    img[:] = fill
    for colour, coords in placements:
        for y, x in coords:
            img[y, x] = colour
    return img


def _five_colour_tile():
    # A=56, B=3, C=2, D=2, E=1
    return _tile(
        A,
        [
            (B, [(1, 0), (1, 1), (1, 2)]),
            (C, [(2, 0), (2, 1)]),
            (D, [(3, 0), (3, 1)]),
            (E, [(7, 7)]),
        ],
    )


def test_colour_groups_in_first_appearance_order():
    img = _five_colour_tile()
    groups = colour_groups(img, 0, 0, 8)
    assert [g.rgb for g in groups] == [A, B, C, D, E]
    assert [g.count for g in groups] == [56, 3, 2, 2, 1]
    assert groups[4].coords == [(7, 7)]


def test_single_pixel_colour_joins_majority():
    img = _five_colour_tile()
    before = img.copy()
    assert reduce_tile_colours(img) == 1
    assert tuple(img[7, 7]) == A
    changed = np.any(img != before, axis=2)
    assert changed.sum() == 1
    assert max_colours_per_tile(img, 8) == 4


def test_equal_counts_drop_the_last_seen_colour():
    img = _tile(A, [(B, [(0, 1)]), (C, [(0, 2)]), (D, [(0, 3)]), (E, [(0, 4)])])
    reduce_tile_colours(img)
    assert tuple(img[0, 4]) == A
    assert [tuple(img[0, x]) for x in range(1, 4)] == [B, C, D]


def test_many_colours_collapse_to_four(rng):
    img = np.zeros((8, 8, 3), dtype=np.uint8)
    img[..., 0] = np.arange(64, dtype=np.uint8).reshape(8, 8)
    reduce_tile_colours(img)
    assert max_colours_per_tile(img, 8) == 4


def test_budget_of_four_is_left_alone():
    img = _tile(A, [(B, [(0, 1)]), (C, [(0, 2)]), (D, [(0, 3)])])
    before = img.copy()
    assert reduce_tile_colours(img) == 0
    assert np.array_equal(img, before)


def test_every_tile_within_budget_and_idempotent(rng):
    colours = np.array([A, B, C, D, E, (1, 2, 3), (200, 100, 50)], dtype=np.uint8)
    img = colours[rng.integers(0, len(colours), size=(24, 32))]
    reduce_tile_colours(img)
    assert max_colours_per_tile(img, 8) <= 4
    once = img.copy()
    assert reduce_tile_colours(img) == 0
    assert np.array_equal(img, once)


def test_partial_edge_tiles_are_skipped(rng):
    img = rng.integers(0, 256, size=(12, 13, 3), dtype=np.uint8)
    before = img.copy()
    reduce_tile_colours(img)
    assert np.array_equal(img[8:], before[8:])
    assert np.array_equal(img[:, 8:], before[:, 8:])
    assert max_colours_per_tile(img, 8) <= 4


def test_image_smaller_than_a_tile(rng):
    img = rng.integers(0, 256, size=(7, 7, 3), dtype=np.uint8)
    before = img.copy()
    assert reduce_tile_colours(img) == 0
    assert np.array_equal(img, before)


def test_threaded_tiles_match_single_thread(rng):
    img = rng.integers(0, 8, size=(32, 16, 3), dtype=np.uint8)
    a = img.copy()
    b = img.copy()
    assert reduce_tile_colours(a) == reduce_tile_colours(b, workers=3)
    assert np.array_equal(a, b)


def test_nearest_merge_picks_closest_colour():
    img = _five_colour_tile()
    reduce_tile_colours(img, merge="nearest")
    # light red sits closest to red
    assert tuple(img[7, 7]) == C
    assert max_colours_per_tile(img, 8) == 4


def test_reduce_groups_merges_counts():
    img = _five_colour_tile()
    groups = colour_groups(img, 0, 0, 8)
    repaint = reduce_groups(groups, 4)
    assert repaint == {(7, 7): A}
    assert len(groups) == 4
    assert groups[0].rgb == A and groups[0].count == 57


def test_unknown_merge_strategy():
    with pytest.raises(ValueError):
        reduce_tile_colours(np.zeros((8, 8, 3), dtype=np.uint8), merge="random")
