"""
Box primitives ("brushes") combined by the boolean composition.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import trimesh
from trimesh.creation import box

from ..common.config import MIN_DIMENSION
from ..common.mesh_ops import translated


class Shade(Enum):
    """Material class of a primitive or merged solid."""
    LIGHT = "light"
    DARK = "dark"


@dataclass
class Brush:
    """
    Mesh + material class + translation.

    Primitives keep their box centred on the local origin; merged solids are
    already in world space and sit at the origin.
    """
    mesh: trimesh.Trimesh
    shade: Shade
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64).reshape(3)

    def world_mesh(self) -> trimesh.Trimesh:
        """Mesh with the translation applied."""
        if not self.position.any():
            return self.mesh
        return translated(self.mesh, self.position)


def make_box(
    size_x: float,
    size_y: float,
    size_z: float,
    position=(0.0, 0.0, 0.0),
    shade: Shade = Shade.LIGHT
) -> Brush:
    """Axis-aligned box brush; every edge is floored at MIN_DIMENSION."""
    extents = [max(float(size_x), MIN_DIMENSION),
               max(float(size_y), MIN_DIMENSION),
               max(float(size_z), MIN_DIMENSION)]
    mesh = box(extents=extents)
    return Brush(mesh=mesh, shade=shade, position=np.asarray(position, dtype=np.float64))
