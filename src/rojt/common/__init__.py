"""
Common modules for both generation pipelines.

Geometry flow:
- generators write raw position/index buffers (no welding)
- boolean composition works on placed (world-space) meshes
- export writes STL/GLB with a JSON metadata sidecar
"""

from .config import Config, MeshMetadata, MIN_DIMENSION, DEFAULT_BOOLEAN_ENGINE
from .io import save_mesh, load_mesh, build_metadata
from .mesh_ops import (
    compute_mesh_stats, empty_mesh, is_renderable, indices_in_range, merge_meshes, translated,
)
from .gltf_exporter import GLTFExporter, ScenePart

__all__ = [
    'Config', 'MeshMetadata', 'MIN_DIMENSION', 'DEFAULT_BOOLEAN_ENGINE',
    'save_mesh', 'load_mesh', 'build_metadata',
    'compute_mesh_stats', 'empty_mesh', 'is_renderable', 'indices_in_range',
    'merge_meshes', 'translated',
    'GLTFExporter', 'ScenePart',
]
