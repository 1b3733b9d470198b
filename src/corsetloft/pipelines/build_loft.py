"""Loft a half-corset from a job file and export the results."""

from __future__ import annotations

import argparse
import warnings
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from exporters import LoftExporter
from loft.config import BuildConfig
from loft.mesh import PanelMesh, build_panel_meshes, build_ring_polylines, build_textured_panel_meshes
from loft.outlines import DEFAULT_OUTLINE_SAMPLES, build_edge_outlines
from loft.rings import RingMetrics, compute_ring_metrics
from loft.texture import panel_texture_supplier
from panels.model import Curve, CurveSlot, Panel, Point3D, require_unique_panel_ids
from panels.topology import panels_from_curve_map
from schemas.validators import load_payload, validate_job_payload

OUTPUT_ROOT = Path("outputs/loft")
DEFAULT_TEXTURE_SIZE = 512

__all__ = [
    "LoftJob",
    "LoftResult",
    "add_build_arguments",
    "build_loft",
    "format_ring_table",
    "load_job",
    "main",
    "panels_from_payload",
    "run_from_args",
    "run_loft",
]


@dataclass(frozen=True, slots=True)
class LoftJob:
    """Validated loft inputs."""

    panels: tuple[Panel, ...]
    config: BuildConfig
    outline_samples: int = DEFAULT_OUTLINE_SAMPLES
    texture_size: int = DEFAULT_TEXTURE_SIZE


@dataclass(frozen=True, slots=True)
class LoftResult:
    """Everything produced by a single loft run."""

    metrics: RingMetrics
    meshes: tuple[PanelMesh, ...]
    ring_polylines: tuple[tuple[Point3D, ...], ...]
    outlines: Mapping[str, Mapping[str, list[list[Point3D]]]] = field(default_factory=dict)


def panels_from_payload(payload: Mapping[str, Any]) -> list[Panel]:
    """Build panels from either an explicit ``panels`` list or a ``curves`` map."""

    if "panels" in payload:
        panels: list[Panel] = []
        for entry in payload["panels"]:
            slots = {
                slot.value: Curve.from_points(f"{entry['panel_id']}_{slot.name}", entry[slot.value])
                for slot in CurveSlot
                if entry.get(slot.value) is not None
            }
            panels.append(Panel(panel_id=str(entry["panel_id"]), **slots))
        require_unique_panel_ids(panels)
        return panels
    return panels_from_curve_map(payload["curves"], payload["order"])


def load_job(path: Path) -> LoftJob:
    """Load and validate a JSON or YAML loft job."""

    payload = load_payload(path)
    validate_job_payload(payload)
    return LoftJob(
        panels=tuple(panels_from_payload(payload)),
        config=BuildConfig.from_mapping(payload.get("config")),
        outline_samples=int(payload.get("outline_samples", DEFAULT_OUTLINE_SAMPLES)),
        texture_size=int(payload.get("texture_size", DEFAULT_TEXTURE_SIZE)),
    )


def run_loft(job: LoftJob, *, textured: bool = True) -> LoftResult:
    """Compute ring metrics once and feed them to every builder."""

    panels = list(job.panels)
    if not panels:
        raise ValueError("Loft job does not contain any panels.")
    metrics = compute_ring_metrics(panels, job.config)

    if textured:
        meshes = build_textured_panel_meshes(
            panels,
            job.config,
            panel_texture_supplier(job.config, job.texture_size),
            metrics=metrics,
        )
    else:
        meshes = build_panel_meshes(panels, job.config, metrics=metrics)

    for mesh in meshes:
        if len(mesh.faces) == 0:
            warnings.warn(
                f"Panel {mesh.panel_id} has no pair of consecutive valid rings; its mesh is empty.",
                RuntimeWarning,
                stacklevel=2,
            )

    outlines: dict[str, Mapping[str, list[list[Point3D]]]] = {}
    for edge, top_edge in (("top", True), ("bottom", False)):
        per_panel = build_edge_outlines(
            panels,
            job.config,
            top_edge=top_edge,
            samples_per_panel=job.outline_samples,
        )
        for panel in panels:
            if panel.edge(top_edge) is not None and not per_panel.get(panel.panel_id):
                warnings.warn(
                    f"Panel {panel.panel_id}: {edge} edge could not be projected onto the loft.",
                    RuntimeWarning,
                    stacklevel=2,
                )
        outlines[edge] = per_panel

    rings = build_ring_polylines(panels, job.config, metrics=metrics)
    return LoftResult(
        metrics=metrics,
        meshes=tuple(meshes),
        ring_polylines=tuple(tuple(ring) for ring in rings),
        outlines=outlines,
    )


def _ensure_output_dir(base_dir: Path | None, job_path: Path) -> Path:
    if base_dir is None:
        target = OUTPUT_ROOT / job_path.stem
    else:
        target = base_dir
    target.mkdir(parents=True, exist_ok=True)
    return target


def build_loft(
    job_path: Path,
    *,
    output_dir: Path | None = None,
    formats: Sequence[str] = ("obj",),
    textured: bool = True,
    outline_samples: int | None = None,
    texture_size: int | None = None,
) -> Mapping[str, Any]:
    """Run the loft pipeline for *job_path* and export the results."""

    job = load_job(job_path)
    if outline_samples is not None or texture_size is not None:
        job = LoftJob(
            panels=job.panels,
            config=job.config,
            outline_samples=job.outline_samples if outline_samples is None else int(outline_samples),
            texture_size=job.texture_size if texture_size is None else int(texture_size),
        )

    result = run_loft(job, textured=textured)
    target_dir = _ensure_output_dir(output_dir, job_path)

    exporter = LoftExporter(formats)
    return exporter.export(
        result.meshes,
        target_dir,
        metrics=result.metrics,
        ring_polylines=result.ring_polylines,
        outlines=result.outlines,
        metadata={
            "job": str(job_path),
            "config": job.config.to_dict(),
            "outline_samples": job.outline_samples,
            "textured": textured,
        },
    )


def format_ring_table(metrics: RingMetrics) -> str:
    """Render the per-ring half-circumference table."""

    lines = [f"{'ring':>4} {'offset_mm':>10} {'c_half_mm':>10} {'radius_mm':>10} {'valid':>6}"]
    for k, offset in enumerate(metrics.offsets_mm):
        marker = "*" if k == metrics.reference_ring else " "
        lines.append(
            f"{k:>4}{marker}{offset:>10.2f} {float(metrics.c_half[k]):>10.2f} "
            f"{float(metrics.radius[k]):>10.2f} {int(metrics.valid[k].sum()):>3}/{metrics.panel_count}"
        )
    return "\n".join(lines)


def add_build_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Register the loft build options on *parser*."""

    parser.add_argument("job", type=Path, help="Path to the loft job (JSON or YAML).")
    parser.add_argument(
        "--output",
        type=Path,
        help="Directory for loft artefacts (default: outputs/loft/<job>).",
    )
    parser.add_argument(
        "--formats",
        nargs="+",
        default=["obj"],
        help="One or more mesh formats to export: obj, ply, glb, stl (default: obj).",
    )
    parser.add_argument(
        "--no-texture",
        action="store_true",
        help="Export flat palette colours instead of rendered panel textures.",
    )
    parser.add_argument(
        "--outline-samples",
        type=int,
        help="Arc-length samples per panel edge outline.",
    )
    parser.add_argument("--texture-size", type=int, help="Texture edge length in pixels.")
    return parser


def run_from_args(args: argparse.Namespace) -> int:
    """Execute a build from options registered by :func:`add_build_arguments`."""

    result = build_loft(
        args.job,
        output_dir=args.output,
        formats=args.formats,
        textured=not args.no_texture,
        outline_samples=args.outline_samples,
        texture_size=args.texture_size,
    )
    print(f"Loft metadata written to {result['metadata_path']}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = add_build_arguments(argparse.ArgumentParser(description="Loft a half-corset from flat pattern panels."))
    args = parser.parse_args(argv)
    return run_from_args(args)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
