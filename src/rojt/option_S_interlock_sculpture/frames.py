"""
Concentric square frames of noise-extruded blocks.

Frame i has side 4*i and is sampled on a lattice of step i, so every frame
holds the same 5x5 lattice and only its 16 boundary points become blocks.
Coordinates are folded with abs() before sampling the noise, which gives the
pattern four-fold mirror symmetry about both axes.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from .brush import Brush, Shade, make_box
from .noise import NoiseField

logger = logging.getLogger(__name__)

FRAME_CAP = 65
SIDE_PER_SCALE = 4

# Extrusion offset/height per unit of frame scale, light vs dark
LIGHT_OFFSET, LIGHT_HEIGHT = 15 / 30, 30 / 30
DARK_OFFSET, DARK_HEIGHT = 5 / 30, 10 / 30


@dataclass
class FrameCells:
    """Box primitives of all frames, partitioned by shade."""
    light: List[Brush] = field(default_factory=list)
    dark: List[Brush] = field(default_factory=list)

    def extend(self, other: "FrameCells") -> None:
        self.light.extend(other.light)
        self.dark.extend(other.dark)

    @property
    def total(self) -> int:
        return len(self.light) + len(self.dark)


def frame_points(side: float, step: float) -> np.ndarray:
    """Boundary points of the square lattice [-side/2, side/2]^2 at ``step``."""
    half = side / 2
    n = int(np.floor(side / step + 1e-9))
    coords = -half + np.arange(n + 1) * step

    points = []
    for x in coords:
        for y in coords:
            on_edge = (np.isclose(x, -half) or np.isclose(x, half) or
                       np.isclose(y, -half) or np.isclose(y, half))
            if on_edge:
                points.append((x, y))
    return np.array(points, dtype=np.float64).reshape(-1, 2)


def classify_cell(x: float, y: float, size: float, noise: NoiseField, threshold: float = 0.0) -> Brush:
    """
    Turn one boundary point into a box primitive.

    Noise above ``threshold`` gives a taller light block, otherwise a
    shorter dark one; both scale with the normalized noise nF.
    """
    ax, ay = abs(x), abs(y)
    n_f = (noise.noise(ax / 10, ay / 10, size) + 1) / 2
    value = noise.noise(ax * 0.05, ay * 0.05)

    if value > threshold:
        shade = Shade.LIGHT
        z = size * LIGHT_OFFSET * n_f
        height = size * LIGHT_HEIGHT * n_f
    else:
        shade = Shade.DARK
        z = size * DARK_OFFSET * n_f
        height = size * DARK_HEIGHT * n_f

    return make_box(size, size, height, position=(x, y, z), shade=shade)


def draw_cube_frame(side: float, size: float, noise: NoiseField, threshold: float = 0.0) -> FrameCells:
    """Blocks on the boundary of one square frame."""
    cells = FrameCells()
    for x, y in frame_points(side, size):
        brush = classify_cell(float(x), float(y), size, noise, threshold)
        if brush.shade is Shade.DARK:
            cells.dark.append(brush)
        else:
            cells.light.append(brush)
    return cells


def generate_frames(
    frame_start: int,
    frame_step: int,
    noise: NoiseField,
    threshold: float = 0.0,
    frame_cap: int = FRAME_CAP
) -> FrameCells:
    """
    Blocks of every frame scale frame_start, frame_start + frame_step, ...
    up to frame_cap.

    Returns:
        FrameCells with disjoint light/dark lists (either may be empty)
    """
    frame_start = max(int(frame_start), 1)
    frame_step = max(int(frame_step), 1)

    cells = FrameCells()
    n_frames = 0
    for scale in range(frame_start, int(frame_cap) + 1, frame_step):
        cells.extend(draw_cube_frame(scale * SIDE_PER_SCALE, scale, noise, threshold))
        n_frames += 1

    logger.info(f"Generated {n_frames} frames: {len(cells.light)} light, {len(cells.dark)} dark cells")
    return cells


def balance_label(threshold: float) -> str:
    """
    Human-readable light/dark balance for a threshold in [-1, 1].

    A low threshold lets more noise values through as light blocks.
    """
    if threshold < -0.3:
        return "More Light"
    if threshold > 0.3:
        return "More Dark"
    return "Balanced"
