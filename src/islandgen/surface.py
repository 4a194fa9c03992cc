"""Surface material classification: sand, grass, stone and snow weights."""

import logging
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import SurfaceConfig, resolve_thresholds

logger = logging.getLogger(__name__)


class MaterialBand(str, Enum):
    """Surface materials in splat-map channel order."""

    SAND = "sand"
    GRASS = "grass"
    STONE = "stone"
    SNOW = "snow"

    @property
    def index(self) -> int:
        """Channel index in a weight array."""
        return _BAND_INDEX[self]


_BAND_INDEX = {band: i for i, band in enumerate(MaterialBand)}

BAND_COUNT = len(MaterialBand)


def classify_weights(
    heights: ArrayLike,
    slopes: ArrayLike,
    config: SurfaceConfig,
) -> NDArray[np.float64]:
    """Blend weights for each cell from its height and slope.

    Heights below the first threshold are sand and between the second and
    third are grass. The gaps between thresholds blend linearly into the
    next band, and above the last threshold stone fades into snow toward 1.
    Cells steeper than the override angle are pure stone.

    Args:
        heights: Normalized heights.
        slopes: Slopes in degrees, same shape as heights.
        config: Thresholds and slope override.

    Returns:
        Array of shape ``heights.shape + (4,)``; each cell sums to 1.
    """
    h = np.asarray(heights, dtype=np.float64)
    slopes = np.asarray(slopes, dtype=np.float64)
    b0, b1, b2, b3 = resolve_thresholds(config.thresholds)

    weights = np.zeros(h.shape + (BAND_COUNT,), dtype=np.float64)
    sand = weights[..., MaterialBand.SAND.index]
    grass = weights[..., MaterialBand.GRASS.index]
    stone = weights[..., MaterialBand.STONE.index]
    snow = weights[..., MaterialBand.SNOW.index]

    sand[h < b0] = 1.0

    band = (h >= b0) & (h < b1)
    blend = (h[band] - b0) / (b1 - b0)
    sand[band] = 1.0 - blend
    grass[band] = blend

    grass[(h >= b1) & (h < b2)] = 1.0

    band = (h >= b2) & (h < b3)
    blend = (h[band] - b2) / (b3 - b2)
    grass[band] = 1.0 - blend
    stone[band] = blend

    band = h >= b3
    if b3 < 1.0:
        blend = np.clip((h[band] - b3) / (1.0 - b3), 0.0, 1.0)
    else:
        blend = np.ones(int(np.count_nonzero(band)))
    stone[band] = 1.0 - blend
    snow[band] = blend

    steep = slopes > config.slope_override_angle
    weights[steep] = 0.0
    stone[steep] = 1.0

    weights /= weights.sum(axis=-1, keepdims=True)
    return weights


def material_weights_for(
    height: float,
    slope: float,
    config: SurfaceConfig,
) -> tuple[float, float, float, float]:
    """Weights for a single sample as a (sand, grass, stone, snow) tuple."""
    weights = classify_weights(np.array([height]), np.array([slope]), config)[0]
    return tuple(float(w) for w in weights)


def band_coverage(weights: NDArray[np.float64]) -> dict[MaterialBand, float]:
    """Mean weight of each band over the grid."""
    means = weights.reshape(-1, BAND_COUNT).mean(axis=0)
    return {band: float(means[band.index]) for band in MaterialBand}


def dominant_band(weights: NDArray[np.float64]) -> NDArray[np.uint8]:
    """Index of the heaviest band per cell."""
    return np.argmax(weights, axis=-1).astype(np.uint8)
