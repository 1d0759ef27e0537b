"""
Cube-lattice diamond synthesis.

A diamond is an asymmetric bipyramid about the vertical (y) axis: a tall
lower cone from the bottom apex at y = -height to the girdle at y = 0, and a
short crown up to y = 0.4 * height. The solid is approximated by stamping
small cubes on concentric rings in horizontal slices, one cube edge apart.

Each cube is triangulated on its own (8 vertices, 12 outward-facing
triangles) and shrunk to 95 % of the lattice pitch so the cube texture stays
visible. Vertices are never welded across cubes.
"""

import logging
import math
from typing import Tuple

import numpy as np
import trimesh

from ..common.config import MIN_DIMENSION
from ..common.mesh_ops import empty_mesh

logger = logging.getLogger(__name__)

CROWN_RATIO = 0.4
CUBE_FILL = 0.95

# Unit cube corners, (x, y, z) signs
CUBE_CORNERS = np.array([
    [-1, -1, -1], [1, -1, -1], [1, 1, -1], [-1, 1, -1],
    [-1, -1, 1], [1, -1, 1], [1, 1, 1], [-1, 1, 1],
], dtype=np.float64)

# Two triangles per face, counter-clockwise seen from outside
CUBE_FACES = np.array([
    [0, 2, 1], [0, 3, 2],   # -z
    [5, 7, 4], [5, 6, 7],   # +z
    [4, 3, 0], [4, 7, 3],   # -x
    [1, 6, 5], [1, 2, 6],   # +x
    [3, 6, 2], [3, 7, 6],   # +y
    [4, 1, 5], [4, 0, 1],   # -y
], dtype=np.int64)

_EPS = 1e-9


def stamp_cubes(centers: np.ndarray, size: float) -> trimesh.Trimesh:
    """
    Build one unwelded mesh holding an axis-aligned cube at every centre.

    Args:
        centers: Kx3 cube centres
        size: Cube edge length

    Returns:
        Mesh with 8K vertices and 12K triangles
    """
    centers = np.asarray(centers, dtype=np.float64).reshape(-1, 3)
    if len(centers) == 0:
        return empty_mesh()

    half = size / 2.0
    vertices = (centers[:, None, :] + CUBE_CORNERS[None, :, :] * half).reshape(-1, 3)
    offsets = np.arange(len(centers), dtype=np.int64) * len(CUBE_CORNERS)
    faces = (CUBE_FACES[None, :, :] + offsets[:, None, None]).reshape(-1, 3)

    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)


class ParametricDiamond:
    """
    Diamond described by girdle radius, height and lattice layer count.

    Degenerate inputs are clamped to MIN_DIMENSION, layers to at least 1.
    """

    def __init__(self, radius: float, height: float, layers: int = 3):
        self.radius = max(float(radius), MIN_DIMENSION)
        self.height = max(float(height), MIN_DIMENSION)
        self.layers = max(int(layers), 1)
        self.cube_size = min(self.radius, self.height) / (self.layers * 2)

    @property
    def vertical_range(self) -> Tuple[float, float]:
        """(bottom apex, top apex) of the solid."""
        return -self.height, self.height * CROWN_RATIO

    def envelope(self, y: float) -> float:
        """Slice radius at height y: two linear cones meeting at the girdle."""
        bottom, top = self.vertical_range
        if y > 0:
            return self.radius * (1.0 - y / top)
        return self.radius * (1.0 + y / (-bottom))

    def cube_centers(self) -> np.ndarray:
        """Centres of every accepted lattice cube, slice by slice, ring by ring."""
        bottom, top = self.vertical_range
        cube = self.cube_size
        half = cube * CUBE_FILL / 2.0
        tol = cube * _EPS

        n_slices = int(math.floor((top - bottom) / cube + _EPS)) + 1
        centers = []

        for k in range(n_slices):
            y = bottom + k * cube
            # Keep the stamped cube inside the apex range
            if y - half < bottom - tol or y + half > top + tol:
                continue

            max_radius = self.envelope(y)
            if max_radius <= 0:
                continue

            num_rings = math.ceil(max_radius / cube)
            for ring in range(num_rings):
                ring_radius = ring * cube
                num_cubes = max(1, math.floor(2 * math.pi * ring_radius / cube))

                angles = np.arange(num_cubes) / num_cubes * 2 * np.pi
                x = np.cos(angles) * ring_radius
                z = np.sin(angles) * ring_radius
                inside = np.hypot(x, z) <= max_radius + tol
                if not inside.any():
                    continue

                ring_centers = np.column_stack([x[inside], np.full(inside.sum(), y), z[inside]])
                centers.append(ring_centers)

        if not centers:
            return np.zeros((0, 3))
        return np.vstack(centers)

    def create_geometry(self) -> trimesh.Trimesh:
        """Stamp the lattice into a mesh (may be empty for pathological inputs)."""
        centers = self.cube_centers()
        mesh = stamp_cubes(centers, self.cube_size * CUBE_FILL)

        logger.debug(
            f"Diamond r={self.radius:.2f} h={self.height:.2f} layers={self.layers}: "
            f"{len(centers)} cubes, {len(mesh.faces)} triangles"
        )
        return mesh


def synthesize(radius: float, height: float, layer_count: int = 3) -> trimesh.Trimesh:
    """Build the cube-lattice diamond mesh for the given parameters."""
    return ParametricDiamond(radius, height, layer_count).create_geometry()
