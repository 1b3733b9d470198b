from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from corsetloft.__main__ import main as cli_main
from corsetloft.app import build_cli
from corsetloft.pipelines.build_loft import (
    LoftJob,
    build_loft,
    format_ring_table,
    load_job,
    main as build_loft_main,
    panels_from_payload,
    run_loft,
)
from loft.config import BuildConfig
from loft.errors import LoftBuildError
from schemas.validators import SchemaValidationError
from tests.helpers import rectangle_panel


def _seam_pair(x: float, up: float = 100.0) -> tuple[list[list[float]], list[list[float]]]:
    return [[x, -up], [x, 0.0]], [[x, 0.0], [x, 100.0]]


def _curve_map_job() -> dict:
    curves: dict[str, list[list[float]]] = {}
    for letter, x0, left, right in (("A", 0.0, "AA", "AB"), ("B", 80.0, "BA", "BB")):
        curves[f"{letter}_WAIST"] = [[x0, 0.0], [x0 + 50.0, 0.0]]
        curves[f"{letter}_TOP"] = [[x0, -90.0], [x0 + 25.0, -95.0], [x0 + 50.0, -90.0]]
        curves[f"{left}_UP"], curves[f"{left}_DOWN"] = _seam_pair(x0)
        curves[f"{right}_UP"], curves[f"{right}_DOWN"] = _seam_pair(x0 + 50.0)
    return {
        "config": {"offsets_mm": [-80, 0, 80], "theta_start_rad": 0.0, "panel_subdiv": 4},
        "order": ["A", "B"],
        "curves": curves,
        "outline_samples": 20,
        "texture_size": 128,
    }


@pytest.fixture()
def job_path(tmp_path: Path) -> Path:
    path = tmp_path / "corset.yaml"
    path.write_text(yaml.safe_dump(_curve_map_job()), encoding="utf-8")
    return path


def test_load_job_reads_curve_map(job_path: Path) -> None:
    job = load_job(job_path)

    assert [panel.panel_id for panel in job.panels] == ["A", "B"]
    assert job.config.offsets_mm == (-80.0, 0.0, 80.0)
    assert job.outline_samples == 20
    assert job.texture_size == 128


def test_load_job_validates_schema(tmp_path: Path) -> None:
    payload = _curve_map_job()
    payload["config"]["panel_subdiv"] = 0
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(SchemaValidationError):
        load_job(path)


def test_panels_from_payload_accepts_explicit_panels() -> None:
    payload = {
        "panels": [
            {"panel_id": "Front", "waist": [[0, 0], [40, 0]], "top": [[0, -50], [40, -50]]},
        ]
    }

    (panel,) = panels_from_payload(payload)

    assert panel.panel_id == "Front"
    assert panel.waist.name == "Front_WAIST"
    assert panel.top.as_pairs() == [(0.0, -50.0), (40.0, -50.0)]
    assert panel.seam_to_prev_up is None


def test_run_loft_collects_every_artefact(job_path: Path) -> None:
    result = run_loft(load_job(job_path))

    assert len(result.meshes) == 2
    assert all(mesh.texture is not None for mesh in result.meshes)
    assert len(result.ring_polylines) == 3
    assert len(result.outlines["top"]["A"]) == 1
    assert result.outlines["bottom"] == {"A": [], "B": []}


def test_run_loft_warns_about_degenerate_panels(config) -> None:
    job = LoftJob(
        panels=(
            rectangle_panel("A", 0.0, 50.0, up_height=10.0, down_height=10.0, top=[(0.0, -90.0), (50.0, -90.0)]),
            rectangle_panel("B", 80.0, 50.0),
        ),
        config=config,
    )

    with pytest.warns(RuntimeWarning) as record:
        result = run_loft(job, textured=False)

    messages = [str(entry.message) for entry in record]
    assert any("mesh is empty" in message for message in messages)
    assert any("top edge could not be projected" in message for message in messages)
    assert len(result.meshes[0].faces) == 0


def test_run_loft_requires_panels(config) -> None:
    with pytest.raises(ValueError):
        run_loft(LoftJob(panels=(), config=config))


def test_run_loft_fails_without_waist_circumference() -> None:
    job = LoftJob(panels=(rectangle_panel("A", 0.0, 50.0),), config=BuildConfig(offsets_mm=(150.0, 200.0)))

    with pytest.raises(LoftBuildError):
        run_loft(job, textured=False)


def test_build_loft_exports_requested_formats(job_path: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"

    result = build_loft(job_path, output_dir=out_dir, formats=["ply"], textured=False, outline_samples=10)

    assert (out_dir / "panel-a" / "panel-a.ply").exists()
    payload = json.loads((out_dir / "metadata.json").read_text(encoding="utf-8"))
    assert payload["outline_samples"] == 10
    assert payload["textured"] is False
    assert payload["config"]["panel_subdiv"] == 4
    assert len(payload["outlines"]["top"]["B"][0]) == 10
    assert result["metadata_path"] == out_dir / "metadata.json"


def test_format_ring_table_marks_reference_ring(job_path: Path) -> None:
    job = load_job(job_path)
    result = run_loft(job, textured=False)

    table = format_ring_table(result.metrics)

    lines = table.splitlines()
    assert len(lines) == 4
    assert lines[2].startswith("   1*")
    assert "100.00" in lines[1]
    assert lines[1].endswith("2/2")


def test_build_loft_main(job_path: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out_dir = tmp_path / "cli"

    exit_code = build_loft_main([str(job_path), "--output", str(out_dir), "--formats", "stl", "--no-texture"])

    assert exit_code == 0
    assert (out_dir / "panel-b" / "panel-b.stl").exists()
    assert "Loft metadata written to" in capsys.readouterr().out


def test_cli_metrics_prints_ring_table(job_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = build_cli(["metrics", str(job_path)])

    assert exit_code == 0
    output = capsys.readouterr().out
    assert "c_half_mm" in output
    assert "31.83" in output


def test_module_entry_point_builds(job_path: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "module"

    exit_code = cli_main(["build", str(job_path), "--output", str(out_dir), "--texture-size", "128"])

    assert exit_code == 0
    assert (out_dir / "panel-a" / "panel-a_texture.png").exists()
    assert (out_dir / "panel-a" / "panel-a.obj").exists()


def test_pipelines_package_resolves_entry_points() -> None:
    from corsetloft import pipelines

    assert pipelines.build_loft_main is build_loft_main
    assert pipelines.run_loft is run_loft


def test_panels_from_payload_rejects_duplicate_ids() -> None:
    panel = {"panel_id": "A", "waist": [[0, 0], [40, 0]]}

    with pytest.raises(ValueError, match="Duplicate panel id"):
        panels_from_payload({"panels": [panel, dict(panel)]})


def test_launcher_and_pipeline_share_build_options(
    monkeypatch: pytest.MonkeyPatch, job_path: Path, tmp_path: Path
) -> None:
    import corsetloft.pipelines.build_loft as pipeline

    calls: list[dict] = []

    def fake_build_loft(job, **kwargs):
        calls.append({"job": job, **kwargs})
        return {"metadata_path": tmp_path / "metadata.json"}

    monkeypatch.setattr(pipeline, "build_loft", fake_build_loft)
    options = [
        str(job_path),
        "--output",
        str(tmp_path / "out"),
        "--formats",
        "ply",
        "glb",
        "--no-texture",
        "--outline-samples",
        "12",
        "--texture-size",
        "256",
    ]

    assert build_loft_main(options) == 0
    assert build_cli(["build", *options]) == 0

    assert calls[0] == calls[1]
    assert calls[0] == {
        "job": job_path,
        "output_dir": tmp_path / "out",
        "formats": ["ply", "glb"],
        "textured": False,
        "outline_samples": 12,
        "texture_size": 256,
    }
