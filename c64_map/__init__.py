# c64_map/__init__.py
"""
c64_map package.

Purpose:
  Convert images to the 16-colour C64 palette under multicolour-mode rules:
  pixels come in horizontal pairs and every 8x8 tile holds at most 4 colours.
  See c64_convert.py for the CLI.

Public API:
  process_image   : dither -> pixel pairing -> tile colour budget, in place.
  ConvertOptions  : options for process_image.
  build_palette   : build PaletteViews from (hex, name) pairs.
  palette_by_name : build one of the built-in palettes ("default", "pepto").
  match_colour    : nearest palette colour for one source colour plus carried error.
  dither_image, fix_pixel_pairs, reduce_tile_colours : the individual stages.
  load_image_rgb, save_image_rgb : Pillow I/O.
  run_batch, plan_jobs           : file-level driver.

Quick start:
  from c64_map import palette_by_name, process_image, load_image_rgb, save_image_rgb
  pal = palette_by_name("default")
  rgb = load_image_rgb(path)
  save_image_rgb(out, process_image(rgb, pal))
"""

__version__ = "0.1.0"

from .errors import (  # noqa: F401
    ConversionError,
    DecodeError,
    ImageIOError,
    UnsupportedPixelFormatError,
)
from .palette_data import PALETTE, PALETTES, build_palette, palette_by_name  # noqa: F401
from .matcher import error_table, match_colour  # noqa: F401
from .dither import dither_image  # noqa: F401
from .pairing import fix_pixel_pairs  # noqa: F401
from .tiles import reduce_tile_colours  # noqa: F401
from .pipeline import ConvertOptions, PipelineStats, process_image  # noqa: F401
from .image_io import load_image_rgb, save_image_rgb  # noqa: F401
from .batch import BatchReport, ConvertJob, plan_jobs, run_batch  # noqa: F401

__all__ = [
    "__version__",
    "ConversionError",
    "DecodeError",
    "ImageIOError",
    "UnsupportedPixelFormatError",
    "PALETTE",
    "PALETTES",
    "build_palette",
    "palette_by_name",
    "error_table",
    "match_colour",
    "dither_image",
    "fix_pixel_pairs",
    "reduce_tile_colours",
    "ConvertOptions",
    "PipelineStats",
    "process_image",
    "load_image_rgb",
    "save_image_rgb",
    "BatchReport",
    "ConvertJob",
    "plan_jobs",
    "run_batch",
]
