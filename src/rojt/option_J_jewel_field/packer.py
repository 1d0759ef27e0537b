"""
Random-placement circle packer.

Places circles of varying radius inside a centred rectangle without overlap.
Each trial draws a radius (biased toward the maximum while few circles are
placed), then a centre; the candidate is accepted when it sits strictly
inside the bounds and clears every accepted circle. No backtracking and no
spatial index: a linear scan per trial is fine for a few hundred circles.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..common.config import MIN_DIMENSION

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 5000


@dataclass(frozen=True)
class Circle:
    """Accepted circle, centre (x, y) in the packing plane."""
    x: float
    y: float
    radius: float

    def distance_to(self, other: "Circle") -> float:
        return float(np.hypot(self.x - other.x, self.y - other.y))

    def to_dict(self):
        return {"x": self.x, "y": self.y, "radius": self.radius}


class CirclePacker:
    """
    Packs circles into a ``width`` x ``height`` rectangle centred on the origin.

    Args:
        width, height: Bounding rectangle size
        min_radius, max_radius: Radius range of drawn circles
        attempts: Placement trial budget per pack() call
        rng: numpy Generator; a fresh default_rng() when omitted
    """

    def __init__(
        self,
        width: float,
        height: float,
        min_radius: float,
        max_radius: float,
        attempts: int = DEFAULT_ATTEMPTS,
        rng: Optional[np.random.Generator] = None
    ):
        self.width = max(float(width), MIN_DIMENSION)
        self.height = max(float(height), MIN_DIMENSION)
        self.min_radius = max(float(min_radius), MIN_DIMENSION)
        self.max_radius = max(float(max_radius), self.min_radius)
        self.attempts = max(int(attempts), 0)
        self.rng = rng if rng is not None else np.random.default_rng()
        self._circles: List[Circle] = []
        self._centers = np.zeros((0, 2))
        self._radii = np.zeros(0)

    @property
    def circles(self) -> List[Circle]:
        """Circles of the last pack() call, in acceptance order."""
        return list(self._circles)

    def is_within_bounds(self, x: float, y: float, radius: float) -> bool:
        half_w = self.width / 2
        half_h = self.height / 2
        return (x - radius > -half_w and x + radius < half_w and
                y - radius > -half_h and y + radius < half_h)

    def is_overlapping(self, x: float, y: float, radius: float) -> bool:
        if len(self._radii) == 0:
            return False
        distances = np.hypot(self._centers[:, 0] - x, self._centers[:, 1] - y)
        return bool(np.any(distances < radius + self._radii))

    def draw_radius(self, placed: int, target: int) -> float:
        """Radius for the next trial; the exponent relaxes toward 1 as the packing fills."""
        radius_bias = 1.0 - placed / target
        u = self.rng.random()
        return self.min_radius + (self.max_radius - self.min_radius) * u ** (1.0 / (1.0 + radius_bias * 2.0))

    def pack(self, count: int) -> List[Circle]:
        """
        Pack up to ``count`` circles.

        Stops when ``count`` circles are accepted or the attempt budget runs
        out. Under-delivery is not an error; use len() of the result.
        """
        self._circles = []
        self._centers = np.zeros((0, 2))
        self._radii = np.zeros(0)

        count = int(count)
        if count <= 0:
            return []

        placed = 0
        trials = 0
        while trials < self.attempts and placed < count:
            trials += 1

            radius = self.draw_radius(placed, count)
            x = (self.rng.random() - 0.5) * self.width
            y = (self.rng.random() - 0.5) * self.height

            if self.is_within_bounds(x, y, radius) and not self.is_overlapping(x, y, radius):
                self._circles.append(Circle(float(x), float(y), float(radius)))
                self._centers = np.vstack([self._centers, [x, y]])
                self._radii = np.append(self._radii, radius)
                placed += 1

        if placed < count:
            logger.info(f"Packed {placed}/{count} circles after {trials} attempts (budget exhausted)")
        else:
            logger.info(f"Packed {placed} circles in {trials} attempts")

        return list(self._circles)
