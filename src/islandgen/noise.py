"""Noise generation functions for terrain synthesis.

Provides a coherent 2D gradient noise primitive and the seeded fractal
(fBm) evaluator built on top of it.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import NoiseConfig

# Reference permutation from Ken Perlin's improved noise, repeated so that
# lookups of index + 1 never wrap.
_PERMUTATION = np.array(
    [
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
    ],
    dtype=np.int64,
)
_PERM = np.concatenate([_PERMUTATION, _PERMUTATION])
_PERM.setflags(write=False)

# Offsets are drawn from [-OFFSET_RANGE, OFFSET_RANGE)
OFFSET_RANGE = 100_000


def _fade(t: NDArray[np.float64]) -> NDArray[np.float64]:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _grad(
    hash_: NDArray[np.int64],
    x: NDArray[np.float64],
    y: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Dot product with one of the improved-noise gradients (z = 0 slice)."""
    h = hash_ & 15
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, 0.0))
    return np.where(h & 1, -u, u) + np.where(h & 2, -v, v)


def perlin_noise(x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
    """Coherent 2D gradient noise.

    Pure and seed independent: the same coordinates always give the same
    value. Integer lattice points evaluate to exactly 0.5.

    Args:
        x: Sample x coordinates (scalar or array).
        y: Sample y coordinates, broadcastable against x.

    Returns:
        Noise values in [0, 1].
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    x_floor = np.floor(x)
    y_floor = np.floor(y)
    xi = x_floor.astype(np.int64) & 255
    yi = y_floor.astype(np.int64) & 255
    xf = x - x_floor
    yf = y - y_floor

    u = _fade(xf)
    v = _fade(yf)

    a = _PERM[xi] + yi
    b = _PERM[xi + 1] + yi
    aa = _PERM[a]
    ab = _PERM[a + 1]
    ba = _PERM[b]
    bb = _PERM[b + 1]

    x1 = _lerp(_grad(aa, xf, yf), _grad(ba, xf - 1.0, yf), u)
    x2 = _lerp(_grad(ab, xf, yf - 1.0), _grad(bb, xf - 1.0, yf - 1.0), u)
    value = _lerp(x1, x2, v)

    return np.clip((value + 1.0) * 0.5, 0.0, 1.0)


def _lerp(a: ArrayLike, b: ArrayLike, t: ArrayLike) -> NDArray[np.float64]:
    return a + (b - a) * t


def seeded_rng(seed: int) -> np.random.Generator:
    """Random generator for a terrain seed; negative seeds wrap to 64 bits."""
    return np.random.default_rng(seed % 2**64)


def octave_offsets(
    rng: np.random.Generator,
    octaves: int,
    offset: tuple[float, float] = (0.0, 0.0),
) -> NDArray[np.float64]:
    """Draw one 2D sample offset per octave.

    Args:
        rng: Random number generator; consumes two integers per octave.
        octaves: Number of offsets.
        offset: User offset added to each drawn offset.

    Returns:
        Array of shape (octaves, 2).
    """
    drawn = rng.integers(-OFFSET_RANGE, OFFSET_RANGE, size=(octaves, 2))
    return drawn.astype(np.float64) + np.asarray(offset, dtype=np.float64)


@dataclass(frozen=True, eq=False)
class NoiseField:
    """Fractal sum of coherent noise octaves with fixed sample offsets.

    Octave i samples the primitive at ``(x / scale) * lacunarity**i + offset_i``
    with weight ``persistence**i``. Signed fields map each sample to [-1, 1]
    before weighting; unsigned fields keep [0, 1].
    """

    scale: float
    persistence: float
    lacunarity: float
    offsets: NDArray[np.float64]
    signed: bool = True

    @classmethod
    def from_config(cls, config: NoiseConfig, offsets: NDArray[np.float64]) -> "NoiseField":
        return cls(
            scale=config.scale,
            persistence=config.persistence,
            lacunarity=config.lacunarity,
            offsets=offsets,
        )

    @classmethod
    def from_seed(cls, seed: int, config: NoiseConfig) -> "NoiseField":
        """Build a field whose octave offsets come from a fresh rng for seed."""
        rng = seeded_rng(seed)
        return cls.from_config(config, octave_offsets(rng, config.octaves, config.offset))

    @property
    def octaves(self) -> int:
        return len(self.offsets)

    @property
    def amplitude_sum(self) -> float:
        """Upper bound of the absolute field value."""
        return float(sum(self.persistence**i for i in range(self.octaves)))

    def evaluate(self, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
        """Evaluate the fractal sum at (x, y).

        Args:
            x: Sample x coordinates.
            y: Sample y coordinates, broadcastable against x.

        Returns:
            Field values; bounded by ``amplitude_sum`` in magnitude.
        """
        x = np.asarray(x, dtype=np.float64) / self.scale
        y = np.asarray(y, dtype=np.float64) / self.scale
        total = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)

        amplitude = 1.0
        frequency = 1.0
        for offset_x, offset_y in self.offsets:
            sample = perlin_noise(x * frequency + offset_x, y * frequency + offset_y)
            if self.signed:
                sample = sample * 2.0 - 1.0
            total += sample * amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        return total

    def evaluate_rows(self, row_start: int, row_stop: int, width: int) -> NDArray[np.float64]:
        """Evaluate integer lattice rows [row_start, row_stop) of a grid.

        Returns:
            Array of shape (row_stop - row_start, width).
        """
        ys, xs = np.meshgrid(
            np.arange(row_start, row_stop, dtype=np.float64),
            np.arange(width, dtype=np.float64),
            indexing="ij",
        )
        return self.evaluate(xs, ys)

    def evaluate_grid(self, width: int, height: int) -> NDArray[np.float64]:
        """Evaluate the field on the integer lattice.

        Returns:
            Array of shape (height, width) indexed [y, x].
        """
        return self.evaluate_rows(0, height, width)


def smoothstep(edge0: float, edge1: float, x: NDArray[np.float64]) -> NDArray[np.float64]:
    """Smooth Hermite interpolation between 0 and 1.

    Args:
        edge0: Lower edge of transition.
        edge1: Upper edge of transition.
        x: Input values.

    Returns:
        Smoothly interpolated values in [0, 1].
    """
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)
