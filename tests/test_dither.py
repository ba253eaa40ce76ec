import numpy as np

from c64_map.colour_convert import rgb_to_lab
from c64_map.constants import ERROR_DECAY
from c64_map.dither import dither_image, dither_row_indices
from c64_map.matcher import match_lab


def _in_palette(rgb, palette):
    allowed = {p.rgb for p in palette.items}
    return all(tuple(px) in allowed for px in rgb.reshape(-1, 3).tolist())


def test_uniform_palette_colour_is_stable(palette):
    colour = palette.items[5].rgb
    img = np.empty((16, 16, 3), dtype=np.uint8)
    img[:] = colour
    dither_image(img, palette)
    assert np.all(img == np.array(colour, dtype=np.uint8))


def test_only_even_columns_are_written(palette, rng):
    img = rng.integers(0, 256, size=(6, 11, 3), dtype=np.uint8)
    before = img.copy()
    dither_image(img, palette)
    assert np.array_equal(img[:, 1::2], before[:, 1::2])
    assert _in_palette(img[:, 0::2], palette)


def test_row_matches_explicit_fold(palette, rng):
    row = rng.integers(0, 256, size=(1, 10, 3), dtype=np.uint8)
    row_lab = rgb_to_lab(row)[0]

    expected = []
    error = np.zeros(3, dtype=np.float32)
    for x in range(0, 10, 2):
        best, residual = match_lab(row_lab[x], error, palette.lab)
        expected.append(best)
        error = np.float32(ERROR_DECAY) * (error + residual)

    assert dither_row_indices(row_lab, palette.lab).tolist() == expected


def test_error_resets_every_row(palette, rng):
    img = rng.integers(0, 256, size=(5, 12, 3), dtype=np.uint8)
    whole = img.copy()
    dither_image(whole, palette)
    for y in range(img.shape[0]):
        single = img[y : y + 1].copy()
        dither_image(single, palette)
        assert np.array_equal(single[0], whole[y])


def test_threaded_rows_match_single_thread(palette, rng):
    img = rng.integers(0, 256, size=(24, 10, 3), dtype=np.uint8)
    a = img.copy()
    b = img.copy()
    dither_image(a, palette, workers=1)
    dither_image(b, palette, workers=4)
    assert np.array_equal(a, b)


def test_empty_image_is_a_no_op(palette):
    img = np.zeros((0, 5, 3), dtype=np.uint8)
    assert dither_image(img, palette).shape == (0, 5, 3)
