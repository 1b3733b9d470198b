"""Exporter utilities for lofted panels."""

from .loft_export import LoftExportError, LoftExporter, MeshFormat, panel_mesh_to_trimesh

__all__ = [
    "LoftExportError",
    "LoftExporter",
    "MeshFormat",
    "panel_mesh_to_trimesh",
]
