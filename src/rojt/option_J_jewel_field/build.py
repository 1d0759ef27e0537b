"""
Option J: Jewel Field

Scatter faceted cube-lattice diamonds over a plane.

Algorithm:
1. Pack non-overlapping circles into the bounding rectangle
2. Derive discrete height levels from the base height
3. Per circle: pick a height level and a layer count, synthesize a diamond
4. Per diamond: draw a light/dark appearance and spin rates for the renderer
5. Place each diamond at (circle.x, 0, circle.y)

Every diamond is an independent mesh; nothing is merged by booleans.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

import numpy as np
import trimesh

from ..common.config import Config, MeshMetadata
from ..common.gltf_exporter import ScenePart
from ..common.io import build_metadata
from ..common.mesh_ops import merge_meshes, translated, compute_mesh_stats
from .packer import Circle, CirclePacker, DEFAULT_ATTEMPTS
from .diamond import synthesize

logger = logging.getLogger(__name__)

LIGHT = "light"
DARK = "dark"


@dataclass
class JewelParams:
    """Parameters for Option J generation."""
    # Packing
    count: int = 20
    min_radius: float = 0.5
    max_radius: float = 3.0
    bounds: Tuple[float, float] = (50.0, 50.0)
    attempts: int = DEFAULT_ATTEMPTS

    # Diamond shape
    height: float = 2.0
    height_levels: int = 10
    level_min: float = 0.8
    level_span: float = 0.6
    min_layers: int = 3
    max_layers: int = 4

    # Appearance / motion
    light_fraction: float = 0.65
    rotation: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "min_radius": self.min_radius,
            "max_radius": self.max_radius,
            "bounds": list(self.bounds),
            "attempts": self.attempts,
            "height": self.height,
            "height_levels": self.height_levels,
            "level_min": self.level_min,
            "level_span": self.level_span,
            "min_layers": self.min_layers,
            "max_layers": self.max_layers,
            "light_fraction": self.light_fraction,
            "rotation": self.rotation,
        }


@dataclass
class Appearance:
    """Material hints handed to the renderer."""
    shade: str
    grey: float
    opacity: float
    metalness: float
    roughness: float

    @property
    def color(self) -> Tuple[float, float, float, float]:
        return (self.grey, self.grey, self.grey, self.opacity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shade": self.shade,
            "grey": self.grey,
            "opacity": self.opacity,
            "metalness": self.metalness,
            "roughness": self.roughness,
        }


@dataclass
class Diamond:
    """One placed diamond of the field."""
    circle: Circle
    height: float
    layers: int
    mesh: trimesh.Trimesh
    appearance: Appearance
    spin: np.ndarray  # radians per frame about x, y, z at rotation = 1

    @property
    def position(self) -> np.ndarray:
        return np.array([self.circle.x, 0.0, self.circle.y])

    def placed_mesh(self) -> trimesh.Trimesh:
        return translated(self.mesh, self.position)

    def scaled_spin(self, rotation: float) -> np.ndarray:
        """Per-frame rotation increments for a global rotation speed."""
        return self.spin * rotation


@dataclass
class JewelField:
    """All diamonds of one generation run."""
    diamonds: List[Diamond] = field(default_factory=list)
    params: JewelParams = field(default_factory=JewelParams)

    def __len__(self) -> int:
        return len(self.diamonds)

    def combined_mesh(self) -> trimesh.Trimesh:
        """Concatenate every placed diamond into one buffer pair."""
        return merge_meshes([d.placed_mesh() for d in self.diamonds])

    def scene_parts(self) -> List[ScenePart]:
        parts = []
        for index, d in enumerate(self.diamonds):
            parts.append(ScenePart(
                name=f"diamond_{index:03d}",
                mesh=d.mesh,
                color=d.appearance.color,
                metalness=d.appearance.metalness,
                roughness=d.appearance.roughness,
                translation=d.position.tolist(),
                extras={
                    "shade": d.appearance.shade,
                    "spin": d.scaled_spin(self.params.rotation).tolist(),
                    "height": d.height,
                    "layers": d.layers,
                }
            ))
        return parts


def height_levels(height: float, n_levels: int = 10, level_min: float = 0.8, level_span: float = 0.6) -> List[float]:
    """
    Discrete diamond heights from level_min to level_min + level_span times
    the base height, rounded half-up to one decimal.
    """
    n_levels = max(int(n_levels), 1)
    if n_levels == 1:
        return [float(np.floor(height * level_min * 10 + 0.5) / 10)]
    levels = []
    for i in range(n_levels):
        multiplier = level_min + (i / (n_levels - 1)) * level_span
        levels.append(float(np.floor(height * multiplier * 10 + 0.5) / 10))
    return levels


def draw_appearance(rng: np.random.Generator, light_fraction: float = 0.65) -> Appearance:
    """Light pieces are bright and more transparent, dark pieces the reverse."""
    if rng.random() < light_fraction:
        return Appearance(
            shade=LIGHT,
            grey=0.7 + rng.random() * 0.3,
            opacity=0.7 + rng.random() * 0.2,
            metalness=0.05 + rng.random() * 0.1,
            roughness=0.1 + rng.random() * 0.2,
        )
    return Appearance(
        shade=DARK,
        grey=rng.random() * 0.3,
        opacity=0.8 + rng.random() * 0.15,
        metalness=0.1 + rng.random() * 0.15,
        roughness=0.15 + rng.random() * 0.25,
    )


def draw_spin(rng: np.random.Generator) -> np.ndarray:
    """Per-axis spin; y is biased so every diamond turns the same way on average."""
    spin = (rng.random(3) - 0.5) * 0.02
    spin[1] += 0.01
    return spin


def build_jewel_field(
    params: Optional[JewelParams] = None,
    config: Optional[Config] = None,
    rng: Optional[np.random.Generator] = None
) -> Tuple[JewelField, MeshMetadata]:
    """
    Generate a jewel field.

    Args:
        params: Field parameters (defaults to JewelParams())
        config: Run configuration (seed used when rng is not given)
        rng: Random generator shared by packing, diamond choice and appearance

    Returns:
        Tuple of (JewelField, MeshMetadata for the combined mesh)
    """
    params = params or JewelParams()
    config = config or Config()
    if rng is None:
        rng = np.random.default_rng(config.seed)

    logger.info("=" * 60)
    logger.info("OPTION J: Jewel Field")
    logger.info("=" * 60)

    # Step 1: Packing
    logger.info(f"\nStep 1: Packing {params.count} circles into {params.bounds[0]}x{params.bounds[1]}")
    packer = CirclePacker(
        params.bounds[0], params.bounds[1],
        params.min_radius, params.max_radius,
        attempts=params.attempts,
        rng=rng
    )
    circles = packer.pack(params.count)

    # Step 2: Height levels
    levels = height_levels(params.height, params.height_levels, params.level_min, params.level_span)
    logger.info(f"\nStep 2: Height levels {levels}")

    # Step 3-4: Diamonds
    logger.info(f"\nStep 3: Synthesizing {len(circles)} diamonds")
    min_layers = max(int(params.min_layers), 1)
    max_layers = max(int(params.max_layers), min_layers)

    diamonds = []
    for circle in circles:
        height = levels[int(rng.integers(len(levels)))]
        layers = int(rng.integers(min_layers, max_layers + 1))
        mesh = synthesize(circle.radius, height, layers)
        diamonds.append(Diamond(
            circle=circle,
            height=height,
            layers=layers,
            mesh=mesh,
            appearance=draw_appearance(rng, params.light_fraction),
            spin=draw_spin(rng),
        ))

    jewel_field = JewelField(diamonds=diamonds, params=params)

    # Step 5: Metadata for the combined mesh
    combined = jewel_field.combined_mesh()
    stats = compute_mesh_stats(combined)
    n_light = sum(1 for d in diamonds if d.appearance.shade == LIGHT)
    metadata = build_metadata(
        combined,
        pipeline="jewel",
        part="field",
        seed=config.seed,
        generation_params={
            "algorithm": "circle_packed_cube_lattice_diamonds",
            **params.to_dict(),
            "computed": {
                "n_circles": len(circles),
                "n_light": n_light,
                "n_dark": len(diamonds) - n_light,
                "height_levels": levels,
                "circles": [c.to_dict() for c in circles],
            },
            "quality": {
                "is_watertight": stats["is_watertight"],
                "max_extent": stats["max_extent"],
            },
        }
    )

    logger.info(f"\nResult: {len(diamonds)} diamonds, {metadata.n_vertices} vertices, {metadata.n_triangles} triangles")

    return jewel_field, metadata
