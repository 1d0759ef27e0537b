"""
Mesh I/O utilities.

Writes generated solids to disk with a JSON metadata sidecar. STL is the
printing/download format for the light and dark sculpture halves; GLB and
OBJ are written through the same entry point.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

import trimesh

from .config import MeshMetadata
from .mesh_ops import is_renderable, mesh_bounds

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".stl", ".glb", ".obj", ".ply")


def build_metadata(
    mesh: trimesh.Trimesh,
    pipeline: str,
    part: str,
    seed: Optional[int] = None,
    generation_params: Optional[Dict[str, Any]] = None
) -> MeshMetadata:
    """Describe a generated mesh for its sidecar file."""
    return MeshMetadata(
        pipeline=pipeline,
        part=part,
        n_triangles=len(mesh.faces),
        n_vertices=len(mesh.vertices),
        seed=seed,
        bounds=mesh_bounds(mesh),
        generation_params=dict(generation_params or {})
    )


def save_mesh(
    mesh: trimesh.Trimesh,
    path: Path,
    metadata: MeshMetadata
) -> Path:
    """
    Save mesh with a metadata sidecar.

    The file type follows the suffix of ``path`` (.stl is binary STL).

    Args:
        mesh: Trimesh mesh object
        path: Output path
        metadata: MeshMetadata object (saved as .json next to the mesh)

    Returns:
        Path of the written mesh file
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported mesh format '{path.suffix}' (expected one of {SUPPORTED_SUFFIXES})")
    if not is_renderable(mesh):
        raise ValueError(f"Refusing to export empty mesh to {path}")

    path.parent.mkdir(parents=True, exist_ok=True)

    mesh.export(str(path), file_type=suffix[1:])
    logger.info(f"Saved mesh: {path} ({metadata.n_vertices} verts, {metadata.n_triangles} tris)")

    meta_path = path.with_suffix('.json')
    metadata.save(meta_path)
    logger.info(f"Saved metadata: {meta_path}")

    return path


def load_mesh(path: Path) -> Tuple[trimesh.Trimesh, Optional[MeshMetadata]]:
    """
    Load mesh and its metadata sidecar.

    Args:
        path: Path to mesh file

    Returns:
        Tuple of (mesh, metadata) - metadata may be None if not found
    """
    path = Path(path)
    mesh = trimesh.load(str(path), force="mesh", process=False)

    meta_path = path.with_suffix('.json')
    metadata = None
    if meta_path.exists():
        with open(meta_path) as f:
            metadata = MeshMetadata.from_dict(json.load(f))

    return mesh, metadata
