"""Slope estimation from a normalized heightmap.

Slope at a point is measured by sampling the heightmap on a ring around
it and converting each height difference to an angle in world space. The
same estimator serves classification, vegetation and the read accessors.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .config import GridConfig, SlopeConfig
from .sampling import clamp_coordinates, sample_bilinear


def _ring_directions(samples: int) -> NDArray[np.float64]:
    angles = 2.0 * np.pi * np.arange(samples) / samples
    return np.stack([np.cos(angles), np.sin(angles)], axis=-1)


def slope_at_points(
    heights: NDArray[np.float64],
    u: ArrayLike,
    v: ArrayLike,
    grid: GridConfig,
    config: SlopeConfig,
) -> NDArray[np.float64]:
    """Slope in degrees at fractional grid coordinates.

    Ring samples that fall off the grid are clamped to it; the horizontal
    run is measured to the clamped point so edge cells are not flattened.

    Args:
        heights: Normalized heightmap indexed [row, column].
        u: Column coordinates.
        v: Row coordinates.
        grid: Grid dimensions (cell size and max elevation).
        config: Ring sample count, radius and reduction.

    Returns:
        Slope angles in [0, 90) degrees with the broadcast shape of u and v.
    """
    cu, cv = clamp_coordinates(u, v, heights.shape)
    cu, cv = np.broadcast_arrays(cu, cv)
    cell_x, cell_z = grid.cell_size
    center = sample_bilinear(heights, cu, cv)

    angles = []
    runs = []
    for dx, dz in _ring_directions(config.samples):
        ru, rv = clamp_coordinates(cu + dx * config.radius, cv + dz * config.radius, heights.shape)
        run = np.hypot((ru - cu) * cell_x, (rv - cv) * cell_z)
        rise = np.abs(sample_bilinear(heights, ru, rv) - center) * grid.max_elevation
        angle = np.degrees(np.arctan2(rise, run))
        angles.append(np.where(run > 0, angle, 0.0))
        runs.append(run > 0)

    angles_arr = np.stack(angles)
    if config.mode == "max":
        return angles_arr.max(axis=0)

    counted = np.stack(runs).sum(axis=0)
    total = angles_arr.sum(axis=0)
    return np.divide(total, counted, out=np.zeros_like(total), where=counted > 0)


def estimate_slope(
    heights: NDArray[np.float64],
    grid: GridConfig,
    config: SlopeConfig,
) -> NDArray[np.float64]:
    """Slope in degrees for every heightmap cell.

    Returns:
        Read-only array with the heightmap's shape.
    """
    rows, cols = heights.shape
    v, u = np.meshgrid(
        np.arange(rows, dtype=np.float64),
        np.arange(cols, dtype=np.float64),
        indexing="ij",
    )
    slope = slope_at_points(heights, u, v, grid, config)
    slope.setflags(write=False)
    return slope
