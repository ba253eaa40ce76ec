import numpy as np

import c64_convert
from c64_map.batch import (
    ConvertJob,
    _claim_destinations,
    discover_images,
    output_path_for,
    plan_jobs,
    run_batch,
)
from c64_map.pipeline import ConvertOptions


def _three_items(tmp_path, write_png, rng):
    src = tmp_path / "in"
    write_png(src / "a.png", rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8))
    (src / "b.png").write_bytes(b"\x89PNG broken")
    write_png(src / "c.png", rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8))
    return src


def test_one_corrupt_item_does_not_stop_the_batch(tmp_path, write_png, rng, palette, capsys):
    src = _three_items(tmp_path, write_png, rng)
    out = tmp_path / "out"
    jobs = plan_jobs(src, out)
    assert [j.src.name for j in jobs] == ["a.png", "b.png", "c.png"]

    report = run_batch(jobs, palette, ConvertOptions())
    assert report.total == 3
    assert [r.job.src.name for r in report.failed] == ["b.png"]
    assert [r.job.src.name for r in report.succeeded] == ["a.png", "c.png"]
    assert (out / "a.png").exists()
    assert (out / "c.png").exists()
    assert not (out / "b.png").exists()

    err = capsys.readouterr().err
    assert "failed to convert" in err
    assert "b.png" in err


def test_parallel_batch_reports_in_input_order(tmp_path, write_png, rng, palette):
    src = _three_items(tmp_path, write_png, rng)
    report = run_batch(plan_jobs(src, tmp_path / "out"), palette, ConvertOptions(), n_jobs=3)
    assert [r.job.src.name for r in report.succeeded] == ["a.png", "c.png"]
    assert len(report.failed) == 1


def test_successful_item_details(tmp_path, write_png, rng, palette):
    src = write_png(tmp_path / "x.png", rng.integers(0, 256, size=(8, 10, 3), dtype=np.uint8))
    report = run_batch([ConvertJob(src, tmp_path / "y.png")], palette, ConvertOptions())
    item = report.succeeded[0]
    assert item.size == (10, 8)
    assert sum(count for _hex, _name, count in item.colours) == 80
    assert all(name != "?" for _hex, name, _count in item.colours)


def test_discovery_is_recursive_and_filtered(tmp_path, write_png):
    px = np.zeros((2, 2, 3), dtype=np.uint8)
    write_png(tmp_path / "b.png", px)
    write_png(tmp_path / "deep" / "deeper" / "c.jpg", px)
    write_png(tmp_path / "a" / "a.png", px)
    (tmp_path / "notes.txt").write_text("skip me")
    found = [p.relative_to(tmp_path).as_posix() for p in discover_images(tmp_path)]
    assert found == ["a/a.png", "b.png", "deep/deeper/c.jpg"]


def test_folder_jobs_mirror_layout(tmp_path, write_png):
    write_png(tmp_path / "in" / "sub" / "pic.jpg", np.zeros((2, 2, 3), dtype=np.uint8))
    jobs = plan_jobs(tmp_path / "in", tmp_path / "out")
    assert jobs == [ConvertJob(tmp_path / "in" / "sub" / "pic.jpg", tmp_path / "out" / "sub" / "pic.png")]


def test_single_file_output_path(tmp_path):
    src = tmp_path / "shot.jpg"
    outdir = tmp_path / "outdir"
    outdir.mkdir()
    assert output_path_for(src, outdir) == outdir / "shot.png"
    assert output_path_for(src, tmp_path / "named.jpg") == tmp_path / "named.png"


def test_cli_exit_codes(tmp_path, write_png, rng, capsys):
    src = _three_items(tmp_path, write_png, rng)
    out = tmp_path / "out"
    assert c64_convert.main([str(src), str(out), "--jobs", "1"]) == 1
    assert (out / "a.png").exists()

    good = write_png(tmp_path / "good.png", rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8))
    assert c64_convert.main([str(good), str(tmp_path / "good_out.png"), "--palette", "pepto"]) == 0
    assert (tmp_path / "good_out.png").exists()

    assert c64_convert.main([str(tmp_path / "nope"), str(out)]) == 2
    assert "not found" in capsys.readouterr().err


def test_oversized_item_does_not_stop_the_batch(
    tmp_path, write_png, write_oversized_png, rng, palette
):
    src = tmp_path / "in"
    write_png(src / "a.png", rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8))
    write_oversized_png(src / "b.png")
    write_png(src / "c.png", rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8))

    report = run_batch(plan_jobs(src, tmp_path / "out"), palette, ConvertOptions())
    assert [r.job.src.name for r in report.failed] == ["b.png"]
    assert [r.job.src.name for r in report.succeeded] == ["a.png", "c.png"]


def test_same_stem_sources_get_their_own_outputs(tmp_path, write_png, rng, palette, capsys):
    src = tmp_path / "in"
    out = tmp_path / "out"
    write_png(src / "pic.png", rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8))
    write_png(src / "pic.jpg", rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8))

    jobs = plan_jobs(src, out)
    assert [(j.src.name, j.dst) for j in jobs] == [
        ("pic.jpg", out / "pic.png"),
        ("pic.png", out / "pic.png.png"),
    ]
    assert "[warn]" in capsys.readouterr().out

    report = run_batch(jobs, palette, ConvertOptions(), n_jobs=2)
    assert len(report.succeeded) == 2
    assert sorted(p.name for p in out.iterdir()) == ["pic.png", "pic.png.png"]


def test_output_with_no_free_name_is_reported_as_failed(tmp_path, write_png, rng, palette):
    px = rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8)
    out = tmp_path / "out"
    jobs = _claim_destinations(
        [
            ConvertJob(write_png(tmp_path / "a" / "pic.jpg.png", px), out / "pic.jpg.png"),
            ConvertJob(write_png(tmp_path / "b" / "pic.png", px), out / "pic.png"),
            ConvertJob(write_png(tmp_path / "c" / "pic.jpg", px), out / "pic.png"),
        ]
    )
    assert jobs[2].conflict is not None

    report = run_batch(jobs, palette, ConvertOptions())
    assert [r.job.src.parent.name for r in report.failed] == ["c"]
    assert "already claimed" in report.failed[0].cause
    assert len(report.succeeded) == 2


def test_workers_default_leaves_cores_free():
    args = c64_convert.parse_cli_args(["in", "out"])
    assert args.workers == c64_convert._default_workers()
    assert args.workers >= 1
