"""Vegetation placement: grass density on a detail sub-grid."""

import logging
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import VegetationConfig
from .sampling import sample_nearest

logger = logging.getLogger(__name__)

SlopeSampler = Callable[[ArrayLike, ArrayLike], NDArray[np.float64]]


def detail_to_heightmap_coords(
    resolution: int,
    heightmap_shape: tuple[int, int],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Map every detail cell onto fractional heightmap coordinates.

    The first and last detail cells land on the heightmap borders.

    Returns:
        Tuple of (u, v) arrays of shape (resolution, resolution).
    """
    rows, cols = heightmap_shape
    steps = np.arange(resolution, dtype=np.float64) / (resolution - 1)
    v, u = np.meshgrid(steps * (rows - 1), steps * (cols - 1), indexing="ij")
    return u, v


def vegetation_mask(
    heights: ArrayLike,
    slopes: ArrayLike,
    config: VegetationConfig,
) -> NDArray[np.bool_]:
    """Cells inside the height band and no steeper than the slope limit."""
    heights = np.asarray(heights)
    slopes = np.asarray(slopes)
    return (
        (heights >= config.min_height)
        & (heights <= config.max_height)
        & (slopes <= config.max_slope_angle)
    )


def place_density(
    heights: NDArray[np.float64],
    slope_at: SlopeSampler,
    config: VegetationConfig,
) -> NDArray[np.int32]:
    """Build the grass density grid.

    Each detail cell takes the height of the nearest heightmap sample and
    the slope at its exact position. Included cells get the configured
    density; all others get 0.

    Args:
        heights: Normalized heightmap.
        slope_at: Slope sampler taking fractional (u, v) heightmap coordinates.
        config: Placement constraints and detail resolution.

    Returns:
        Read-only int32 array of shape (resolution, resolution).
    """
    u, v = detail_to_heightmap_coords(config.resolution, heights.shape)
    cell_heights = sample_nearest(heights, u, v)
    cell_slopes = slope_at(u, v)

    included = vegetation_mask(cell_heights, cell_slopes, config)
    density = np.where(included, config.density, 0).astype(np.int32)

    count = int(np.count_nonzero(included))
    coverage = count / density.size * 100
    logger.info(
        f"Placed grass on {count:,} cells ({coverage:.1f}% coverage) "
        f"at {config.resolution}x{config.resolution}"
    )

    density.setflags(write=False)
    return density
