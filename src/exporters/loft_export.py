"""Write lofted panel meshes, textures and wireframes to disk."""
from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

import numpy as np
import trimesh

from loft.mesh import PanelMesh
from loft.rings import RingMetrics
from panels.model import Point3D

__all__ = [
    "LoftExportError",
    "LoftExporter",
    "MeshFormat",
    "panel_mesh_to_trimesh",
]


class LoftExportError(RuntimeError):
    """Raised when loft export steps fail."""


class MeshFormat(str, Enum):
    """Mesh formats written through :mod:`trimesh`."""

    OBJ = "obj"
    PLY = "ply"
    GLB = "glb"
    STL = "stl"


def panel_mesh_to_trimesh(mesh: PanelMesh) -> trimesh.Trimesh:
    """Convert a :class:`PanelMesh` into a :class:`trimesh.Trimesh` without merging vertices."""

    if mesh.uvs is not None and mesh.texture is not None:
        # Ring 0 sits on the first image row; trimesh UVs are bottom-up.
        uv = np.column_stack((mesh.uvs[:, 0], 1.0 - mesh.uvs[:, 1]))
        visual: Any = trimesh.visual.TextureVisuals(uv=uv, image=mesh.texture)
    else:
        rgba = np.array([*mesh.color, 255], dtype=np.uint8)
        visual = trimesh.visual.ColorVisuals(vertex_colors=np.tile(rgba, (len(mesh.vertices), 1)))

    return trimesh.Trimesh(
        vertices=mesh.vertices,
        faces=mesh.faces,
        visual=visual,
        process=False,
    )


def _polyline_payload(polyline: Sequence[Point3D]) -> list[list[float]]:
    return [list(point.as_tuple()) for point in polyline]


class LoftExporter:
    """Coordinate exports of lofted panels into mesh files and a metadata bundle."""

    def __init__(self, formats: Sequence[str | MeshFormat] = (MeshFormat.OBJ,)) -> None:
        resolved: list[MeshFormat] = []
        for fmt in formats:
            try:
                resolved.append(MeshFormat(str(getattr(fmt, "value", fmt)).lower()))
            except ValueError as exc:
                raise LoftExportError(f"Unsupported mesh format: {fmt!r}") from exc
        if not resolved:
            raise LoftExportError("At least one mesh format must be requested.")
        self.formats = tuple(dict.fromkeys(resolved))

    def export(
        self,
        meshes: Sequence[PanelMesh],
        output_dir: Path | str,
        *,
        metrics: RingMetrics | None = None,
        ring_polylines: Sequence[Sequence[Point3D]] | None = None,
        outlines: Mapping[str, Mapping[str, Sequence[Sequence[Point3D]]]] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> Mapping[str, Any]:
        """Export every panel mesh (and texture) and write ``metadata.json``."""

        if not meshes:
            raise LoftExportError("At least one panel mesh must be provided for export.")

        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        bundle: MutableMapping[str, Any] = {"panels": []}
        if metadata:
            for key, value in metadata.items():
                if key == "panels":
                    raise LoftExportError("Custom metadata must not define the 'panels' key.")
                bundle[key] = value

        seen_slugs: set[str] = set()
        created: list[Path] = []
        for mesh in meshes:
            slug = _slugify(mesh.panel_id)
            if slug in seen_slugs:
                raise LoftExportError(f"Duplicate panel id detected after slug conversion: {mesh.panel_id!r}")
            seen_slugs.add(slug)

            entry: MutableMapping[str, Any] = {
                "panel_id": mesh.panel_id,
                "vertex_count": int(len(mesh.vertices)),
                "face_count": int(len(mesh.faces)),
                "ring_ok": list(mesh.ring_ok),
                "color": list(mesh.color),
                "files": {},
            }
            if len(mesh.faces) == 0:
                bundle["panels"].append(entry)
                continue

            # One directory per panel keeps OBJ material/texture side files apart.
            panel_dir = out_dir / slug
            try:
                panel_dir.mkdir(parents=True, exist_ok=True)
                tri = panel_mesh_to_trimesh(mesh)
                for fmt in self.formats:
                    path = panel_dir / f"{slug}.{fmt.value}"
                    tri.export(str(path), file_type=fmt.value)
                    created.append(path)
                    entry["files"][fmt.value] = str(path.relative_to(out_dir))
                if mesh.texture is not None:
                    texture_path = panel_dir / f"{slug}_texture.png"
                    mesh.texture.save(texture_path)
                    created.append(texture_path)
                    entry["texture"] = str(texture_path.relative_to(out_dir))
            except Exception as exc:  # pragma: no cover - re-raise with context
                for path in created:
                    if path.exists():
                        path.unlink()
                raise LoftExportError(f"Failed to export panel '{mesh.panel_id}'") from exc

            bundle["panels"].append(entry)

        if metrics is not None:
            bundle["rings"] = metrics.to_dict()
        if ring_polylines is not None:
            bundle["ring_polylines"] = [_polyline_payload(ring) for ring in ring_polylines]
        if outlines is not None:
            bundle["outlines"] = {
                edge: {
                    panel_id: [_polyline_payload(run) for run in runs]
                    for panel_id, runs in per_panel.items()
                }
                for edge, per_panel in outlines.items()
            }

        metadata_path = out_dir / "metadata.json"
        with metadata_path.open("w", encoding="utf-8") as stream:
            json.dump(bundle, stream, indent=2, sort_keys=True)

        return {
            "output_dir": out_dir,
            "panels": bundle["panels"],
            "metadata_path": metadata_path,
            "metadata": bundle,
        }


def _slugify(value: str) -> str:
    """Convert a panel id into a filesystem-friendly slug."""

    value = str(value).strip().lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    value = value.strip("-")
    return f"panel-{value}" if value else "panel"
