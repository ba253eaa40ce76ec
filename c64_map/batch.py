# c64_map/batch.py
from __future__ import annotations

"""
File-level driver: discover inputs, map them to outputs, run the pipeline per
file and keep going when one file fails.

Exports:
  discover_images(root) -> list[Path]
  plan_jobs(src, out) -> list[ConvertJob]
  convert_one(job, palette, options) -> ItemResult
  run_batch(jobs, palette, options, n_jobs=1) -> BatchReport
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from .constants import IMAGE_EXTS, OUTPUT_SUFFIX
from .core_types import PaletteViews
from .errors import ConversionError, ImageIOError
from .image_io import load_image_rgb, save_image_rgb
from .pipeline import ConvertOptions, PipelineStats, process_image
from .utils import (
    colour_usage_report,
    debug_log,
    error,
    format_total_duration_compact,
    log,
    warn,
)


@dataclass(frozen=True)
class ConvertJob:
    src: Path
    dst: Path
    conflict: Optional[str] = None  # set when no free destination was left


@dataclass
class ItemResult:
    """Outcome of one file."""

    job: ConvertJob
    ok: bool
    written: Optional[Path] = None
    cause: Optional[str] = None
    size: Tuple[int, int] = (0, 0)  # (width, height)
    tiles_reduced: int = 0
    colours: List[Tuple[str, str, int]] = field(default_factory=list)
    seconds: float = 0.0


@dataclass
class BatchReport:
    succeeded: List[ItemResult] = field(default_factory=list)
    failed: List[ItemResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


# Discovery


def discover_images(root: Path) -> List[Path]:
    """
    All image files under root, walked with an explicit stack.

    Symlinked directories are not followed. Result is sorted by relative path.
    """
    found: List[Path] = []
    stack: List[Path] = [root]
    while stack:
        folder = stack.pop()
        try:
            entries = list(folder.iterdir())
        except OSError as exc:
            error(f"cannot list '{folder}': {exc}")
            continue
        for entry in entries:
            if entry.is_dir() and not entry.is_symlink():
                stack.append(entry)
            elif entry.is_file() and entry.suffix.lower() in IMAGE_EXTS:
                found.append(entry)
    found.sort(key=lambda p: p.relative_to(root).as_posix().lower())
    return found


def output_path_for(src: Path, out: Path) -> Path:
    """Destination for a single-file conversion: inside out if it is a folder, else out itself."""
    dst = out / src.name if out.is_dir() else out
    return dst.with_suffix(OUTPUT_SUFFIX)


def _claim_destinations(jobs: List[ConvertJob]) -> List[ConvertJob]:
    """
    Give every job its own output file.

    Sources that differ only by extension (pic.png, pic.jpg) map to the same
    PNG. The first one in discovery order keeps it, later ones keep their
    source suffix (pic.jpg.png). A job with no free name left is marked as a
    conflict and fails when run.
    """
    taken: Set[str] = set()
    claimed: List[ConvertJob] = []
    for job in jobs:
        dst = job.dst
        if dst.as_posix().lower() in taken:
            alt = dst.with_name(job.src.name + OUTPUT_SUFFIX)
            if alt.as_posix().lower() in taken:
                claimed.append(
                    ConvertJob(job.src, dst, conflict=f"output {dst} is already claimed")
                )
                continue
            warn(f"'{job.src}' shares its output name, writing '{alt}' instead")
            dst = alt
        taken.add(dst.as_posix().lower())
        claimed.append(ConvertJob(job.src, dst))
    return claimed


def plan_jobs(src: Path, out: Path) -> List[ConvertJob]:
    """
    Pair every input with its output path.

    A folder source mirrors its relative layout under out.
    """
    if src.is_file():
        return [ConvertJob(src, output_path_for(src, out))]
    if src.is_dir():
        return _claim_destinations(
            [
                ConvertJob(p, (out / p.relative_to(src)).with_suffix(OUTPUT_SUFFIX))
                for p in discover_images(src)
            ]
        )
    raise ImageIOError(f"source is neither a file nor a folder: {src}")


# Per-file processing


def convert_one(
    job: ConvertJob, palette: PaletteViews, options: ConvertOptions
) -> ItemResult:
    """
    load -> process -> save for one job.

    ConversionError is captured in the result; anything else propagates.
    """
    t_start = time.perf_counter()
    if job.conflict is not None:
        return ItemResult(job=job, ok=False, cause=job.conflict)
    try:
        rgb = load_image_rgb(job.src)
        stats = PipelineStats()
        process_image(rgb, palette, options, stats)
        written = save_image_rgb(job.dst, rgb)
    except ConversionError as exc:
        return ItemResult(
            job=job,
            ok=False,
            cause=str(exc),
            seconds=time.perf_counter() - t_start,
        )
    return ItemResult(
        job=job,
        ok=True,
        written=written,
        size=(int(rgb.shape[1]), int(rgb.shape[0])),
        tiles_reduced=stats.tiles_reduced,
        colours=colour_usage_report(rgb, palette.name_of),
        seconds=time.perf_counter() - t_start,
    )


def report_item(result: ItemResult, debug: bool = False) -> None:
    """Log one finished item."""
    src = result.job.src
    if not result.ok:
        error(f"failed to convert '{src}' to '{result.job.dst}': {result.cause}")
        return
    width, height = result.size
    log(
        f"Did convert '{src}' to '{result.written}' | size={width}x{height}"
        f" | tiles reduced={result.tiles_reduced}"
        f" | {format_total_duration_compact(result.seconds)}"
    )
    if debug:
        debug_log("Colours used:")
        for hex_code, name, count in result.colours:
            debug_log(f"  {hex_code}  {name}: {count:,}")


def run_batch(
    jobs: Iterable[ConvertJob],
    palette: PaletteViews,
    options: ConvertOptions,
    n_jobs: int = 1,
) -> BatchReport:
    """
    Convert every job, logging each outcome in input order.

    With n_jobs > 1 files run on a thread pool; a failed file never stops the others.
    """
    job_list = list(jobs)
    report = BatchReport()

    def _collect(result: ItemResult) -> None:
        report_item(result, debug=options.debug)
        (report.succeeded if result.ok else report.failed).append(result)

    if n_jobs <= 1 or len(job_list) <= 1:
        for job in job_list:
            _collect(convert_one(job, palette, options))
        return report

    with ThreadPoolExecutor(max_workers=n_jobs) as ex:
        futures = [ex.submit(convert_one, job, palette, options) for job in job_list]
        for fu in futures:
            _collect(fu.result())
    return report


__all__ = [
    "ConvertJob",
    "ItemResult",
    "BatchReport",
    "discover_images",
    "output_path_for",
    "plan_jobs",
    "convert_one",
    "report_item",
    "run_batch",
]
