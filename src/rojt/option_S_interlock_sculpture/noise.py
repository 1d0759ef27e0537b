"""
Improved Perlin gradient noise over an owned permutation table.

The table is state of a NoiseField instance rather than a module global.
reseed() shuffles a copy and swaps it in one assignment, so readers never
see a half-shuffled table.
"""

import math
from typing import Optional, Sequence

import numpy as np

# Ken Perlin's reference permutation
PERLIN_PERMUTATION = (
    151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
    140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
    247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
    57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
    74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
    60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
    65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
    200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
    52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
    207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
    119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
    129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
    218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
    81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
    184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
    222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
)

TABLE_SIZE = 256


def fade(t: float) -> float:
    """Quintic fade curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6 - 15) + 10)


def lerp(t: float, a: float, b: float) -> float:
    return a + t * (b - a)


def grad(hash_value: int, x: float, y: float, z: float) -> float:
    """Dot product with one of 12 edge gradients picked by the low 4 bits."""
    h = hash_value & 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h == 12 or h == 14:
        v = x
    else:
        v = z
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)


class NoiseField:
    """
    3-D gradient noise with a reseedable permutation table.

    Args:
        permutation: 256 distinct byte values; Perlin's table when omitted
    """

    def __init__(self, permutation: Optional[Sequence[int]] = None):
        base = np.array(PERLIN_PERMUTATION if permutation is None else permutation, dtype=np.int64)
        if base.shape != (TABLE_SIZE,):
            raise ValueError(f"permutation must have {TABLE_SIZE} entries, got {base.shape}")
        if not np.array_equal(np.sort(base), np.arange(TABLE_SIZE)):
            raise ValueError("permutation must contain each value 0..255 exactly once")
        self._install(base)

    def _install(self, base: np.ndarray) -> None:
        # 512-entry lookup avoids wrap-around on p[X + 1] etc.
        lookup = tuple(int(v) for v in np.concatenate([base, base]))
        self._base, self._p = base, lookup

    @property
    def permutation(self) -> np.ndarray:
        """Copy of the 256-entry base table."""
        return self._base.copy()

    def reseed(self, rng: Optional[np.random.Generator] = None) -> None:
        """Fisher-Yates shuffle of the base table, installed atomically."""
        rng = rng if rng is not None else np.random.default_rng()
        shuffled = self._base.copy()
        rng.shuffle(shuffled)
        self._install(shuffled)

    def noise(self, x: float, y: float, z: float = 0.0) -> float:
        """Noise value in [-1, 1] at (x, y, z)."""
        p = self._p

        fx, fy, fz = math.floor(x), math.floor(y), math.floor(z)
        X, Y, Z = int(fx) & 255, int(fy) & 255, int(fz) & 255
        x -= fx
        y -= fy
        z -= fz
        u, v, w = fade(x), fade(y), fade(z)

        A = (p[X] + Y) & 255
        B = (p[X + 1] + Y) & 255
        AA = (p[A] + Z) & 255
        BA = (p[B] + Z) & 255
        AB = (p[A + 1] + Z) & 255
        BB = (p[B + 1] + Z) & 255

        return lerp(
            w,
            lerp(v,
                 lerp(u, grad(p[AA], x, y, z), grad(p[BA], x - 1, y, z)),
                 lerp(u, grad(p[AB], x, y - 1, z), grad(p[BB], x - 1, y - 1, z))),
            lerp(v,
                 lerp(u, grad(p[AA + 1], x, y, z - 1), grad(p[BA + 1], x - 1, y, z - 1)),
                 lerp(u, grad(p[AB + 1], x, y - 1, z - 1), grad(p[BB + 1], x - 1, y - 1, z - 1))),
        )

    __call__ = noise

    def sample(self, xs: Sequence[float], ys: Sequence[float], z: float = 0.0) -> np.ndarray:
        """Evaluate noise at paired (xs[i], ys[i], z) coordinates."""
        xs = np.asarray(xs, dtype=np.float64).ravel()
        ys = np.asarray(ys, dtype=np.float64).ravel()
        if xs.shape != ys.shape:
            raise ValueError("xs and ys must have the same length")
        return np.array([self.noise(float(a), float(b), z) for a, b in zip(xs, ys)])
