"""Grid sampling at fractional coordinates.

Coordinates are (u, v) = (column, row). Out-of-range queries are clamped
to the grid unless ``strict`` is set.
"""

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.ndimage import map_coordinates

from .exceptions import SamplingOutOfRange

logger = logging.getLogger(__name__)


def clamp_coordinates(
    u: ArrayLike,
    v: ArrayLike,
    shape: tuple[int, ...],
    strict: bool = False,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Clamp (u, v) into the valid range of a grid.

    Args:
        u: Column coordinates.
        v: Row coordinates.
        shape: Grid shape; the first two axes are (rows, columns).
        strict: Raise instead of clamping.

    Returns:
        Clamped (u, v) as float arrays.

    Raises:
        SamplingOutOfRange: If strict and any coordinate is outside the grid.
    """
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    rows, cols = shape[0], shape[1]

    cu = np.clip(u, 0.0, cols - 1)
    cv = np.clip(v, 0.0, rows - 1)
    outside = (cu != u) | (cv != v)
    if np.any(outside):
        if strict:
            raise SamplingOutOfRange(
                f"{np.count_nonzero(outside)} coordinates outside {cols}x{rows} grid"
            )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Clamped {np.count_nonzero(outside)} samples outside {cols}x{rows} grid"
            )
    return cu, cv


def sample_bilinear(
    grid: NDArray[np.float64],
    u: ArrayLike,
    v: ArrayLike,
    strict: bool = False,
) -> NDArray[np.float64]:
    """Bilinearly interpolate a 2D grid at fractional coordinates.

    Args:
        grid: 2D array indexed [row, column].
        u: Column coordinates.
        v: Row coordinates.
        strict: Raise instead of clamping out-of-range queries.

    Returns:
        Interpolated values with the broadcast shape of u and v.
    """
    cu, cv = clamp_coordinates(u, v, grid.shape, strict)
    cu, cv = np.broadcast_arrays(cu, cv)
    coords = np.array([cv.ravel(), cu.ravel()])
    values = map_coordinates(grid, coords, order=1, mode="nearest")
    return values.reshape(cu.shape)


def sample_nearest(
    grid: NDArray,
    u: ArrayLike,
    v: ArrayLike,
    strict: bool = False,
) -> NDArray:
    """Look up the grid cell nearest to fractional coordinates.

    Works for grids with trailing channel axes.
    """
    cu, cv = clamp_coordinates(u, v, grid.shape, strict)
    cols = np.rint(cu).astype(np.int64)
    rows = np.rint(cv).astype(np.int64)
    return grid[rows, cols]
