#!/usr/bin/env python3
"""
c64_convert.py
Convert images to the C64 palette in multicolour mode.

Usage:
  python c64_convert.py SRC OUT [--palette default|pepto] [--merge majority|nearest]
                        [--jobs N] [--workers N] [--debug]

Pipeline:
  dither : Lab nearest-colour match on even columns with a decaying error carry per row.
  pairs  : every odd column copies its left neighbour (two pixels share one colour).
  tiles  : every full 8x8 tile is reduced to at most 4 colours.

Input:
  SRC is an image file or a folder (searched recursively). Any Pillow-readable
  8-bit image is accepted.

Output:
  PNG. For a file, OUT is a folder to write into or the output file itself.
  For a folder, the relative layout is mirrored under OUT.

Notes:
  A file that cannot be read or decoded is reported and skipped; the rest still run.
  Exit status: 0 all converted, 1 some failed, 2 SRC not found.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from c64_map.batch import plan_jobs, run_batch
from c64_map.constants import MERGE_STRATEGIES
from c64_map.errors import ConversionError
from c64_map.palette_data import PALETTES, palette_by_name
from c64_map.pipeline import ConvertOptions
from c64_map.utils import (
    debug_log,
    enable_line_buffered_stdout,
    error,
    key_value_pairs_to_string,
    log,
    print_config_line,
)


def _default_workers() -> int:
    """Leave a few cores free for the system; returns a sensible worker count."""
    n = os.cpu_count() or 4
    reserve = 1 if n <= 6 else 2 if n <= 12 else 3 if n <= 18 else 4
    return max(1, n - reserve)


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments.

    Returns:
      argparse.Namespace with:
        src: Path to image or folder
        out: Path to output file or folder
        palette: key in PALETTES
        merge: tile merge strategy
        jobs: files processed in parallel
        workers: internal threads for the dither and tile stages
        debug: bool for verbose output
    """
    parser = argparse.ArgumentParser(
        prog="c64_convert",
        description="Convert image(s) to the C64 multicolour palette and layout.",
    )
    parser.add_argument("src", type=Path, help="Input image or folder")
    parser.add_argument("out", type=Path, help="Output file or folder")
    parser.add_argument(
        "--palette",
        choices=sorted(PALETTES),
        default="default",
        help="Palette measurements to map onto.",
    )
    parser.add_argument(
        "--merge",
        choices=list(MERGE_STRATEGIES),
        default="majority",
        help='Tile reduction target. "majority" repaints with the most used colour.',
    )
    parser.add_argument(
        "--jobs", type=int, default=2, help="Files processed in parallel"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=_default_workers(),
        help="Internal threads per file",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Handles a single file or a folder tree. Returns the process exit status.
    """
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)

    print_config_line(
        "run",
        [
            ("CPU cores", os.cpu_count() or 1),
            ("Workers", args.workers),
            ("Jobs", args.jobs),
            ("Palette", args.palette),
        ],
        debug=False,
    )
    if args.debug:
        debug_log(key_value_pairs_to_string([("Merge", args.merge)]))

    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    palette = palette_by_name(args.palette)
    options = ConvertOptions(workers=args.workers, merge=args.merge, debug=args.debug)

    try:
        jobs = plan_jobs(src, args.out)
    except ConversionError as exc:
        error(str(exc))
        return 2
    if args.debug:
        debug_log(key_value_pairs_to_string([("Images", len(jobs))]))

    report = run_batch(jobs, palette, options, n_jobs=max(1, args.jobs))
    log(f"Converted {len(report.succeeded)}/{report.total}, failed {len(report.failed)}")
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
