"""
Mesh operation utilities.

Common mesh operations: statistics, validity checks, placement, merging.
All meshes are built with process=False so the position/index buffers
stay exactly as the generators wrote them.
"""

import numpy as np
from typing import Dict, Any, List, Optional, Sequence
import logging

import trimesh

logger = logging.getLogger(__name__)


def empty_mesh() -> trimesh.Trimesh:
    """Return a mesh with empty position and index buffers."""
    return trimesh.Trimesh(
        vertices=np.zeros((0, 3), dtype=np.float64),
        faces=np.zeros((0, 3), dtype=np.int64),
        process=False
    )


def is_renderable(mesh: Optional[trimesh.Trimesh]) -> bool:
    """
    True when a mesh has a surface a renderer/exporter can consume.

    None, meshes without positions and meshes without triangles are not.
    """
    if mesh is None:
        return False
    vertices = getattr(mesh, "vertices", None)
    faces = getattr(mesh, "faces", None)
    if vertices is None or faces is None:
        return False
    return len(vertices) > 0 and len(faces) > 0


def indices_in_range(mesh: trimesh.Trimesh) -> bool:
    """Check every triangle index addresses an existing vertex."""
    faces = np.asarray(mesh.faces)
    if faces.size == 0:
        return True
    return bool(faces.min() >= 0 and faces.max() < len(mesh.vertices))


def translated(mesh: trimesh.Trimesh, offset: Sequence[float]) -> trimesh.Trimesh:
    """Return a translated copy of a mesh."""
    moved = mesh.copy()
    if len(moved.vertices) > 0:
        moved.apply_translation(np.asarray(offset, dtype=np.float64))
    return moved


def mesh_bounds(mesh: trimesh.Trimesh) -> Optional[Dict[str, List[float]]]:
    """Axis-aligned bounds as JSON-friendly lists, None for empty meshes."""
    if len(mesh.vertices) == 0:
        return None
    vertices = np.asarray(mesh.vertices)
    return {
        "min": vertices.min(axis=0).tolist(),
        "max": vertices.max(axis=0).tolist()
    }


def compute_mesh_stats(mesh: trimesh.Trimesh) -> Dict[str, Any]:
    """
    Compute mesh statistics.

    Args:
        mesh: Trimesh mesh object (may be empty)

    Returns:
        Dictionary of mesh statistics
    """
    if not is_renderable(mesh):
        return {
            "n_vertices": len(mesh.vertices),
            "n_faces": len(mesh.faces),
            "bounds": None,
            "extents": [0.0, 0.0, 0.0],
            "max_extent": 0.0,
            "volume": None,
            "surface_area": 0.0,
            "is_watertight": False,
            "is_winding_consistent": False,
        }

    extents = mesh.extents

    return {
        "n_vertices": len(mesh.vertices),
        "n_faces": len(mesh.faces),
        "bounds": mesh_bounds(mesh),
        "extents": extents.tolist(),
        "max_extent": float(max(extents)),
        "volume": float(mesh.volume) if mesh.is_watertight else None,
        "surface_area": float(mesh.area),
        "is_watertight": mesh.is_watertight,
        "is_winding_consistent": mesh.is_winding_consistent,
    }


def merge_meshes(meshes: List[trimesh.Trimesh]) -> trimesh.Trimesh:
    """
    Concatenate meshes into one buffer pair (no boolean, no welding).

    Args:
        meshes: List of trimesh meshes

    Returns:
        Combined mesh
    """
    meshes = [m for m in meshes if is_renderable(m)]
    if not meshes:
        return empty_mesh()

    if len(meshes) == 1:
        return meshes[0].copy()

    vertices = []
    faces = []
    offset = 0
    for m in meshes:
        vertices.append(np.asarray(m.vertices))
        faces.append(np.asarray(m.faces) + offset)
        offset += len(m.vertices)

    combined = trimesh.Trimesh(
        vertices=np.vstack(vertices),
        faces=np.vstack(faces),
        process=False
    )
    logger.info(f"Merged {len(meshes)} meshes: {len(combined.vertices)} verts, {len(combined.faces)} faces")

    return combined
