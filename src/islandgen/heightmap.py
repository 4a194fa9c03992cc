"""Heightmap synthesis: fractal relief, mountain mask, normalization, edge falloff."""

import logging
import warnings
from concurrent import futures

import numpy as np
from numpy.typing import NDArray

from .config import (
    GridConfig,
    MountainConfig,
    NoiseConfig,
    TerrainConfig,
    WaterConfig,
    validate_config,
)
from .curves import Curve
from .exceptions import DegenerateInputWarning
from .noise import OFFSET_RANGE, NoiseField, octave_offsets, seeded_rng

logger = logging.getLogger(__name__)

# Height multiplier at the lowest mask value
FLATTEN_FLOOR = 0.1


def build_noise_fields(
    seed: int,
    noise: NoiseConfig,
    mountains: MountainConfig,
) -> tuple[NoiseField, NoiseField]:
    """Derive the elevation and mountain-mask fields for a seed.

    Octave offsets are drawn first, then the mask offset, from a single
    rng so the same seed always reproduces both fields.

    Args:
        seed: Terrain seed.
        noise: Elevation noise parameters.
        mountains: Mountain mask parameters.

    Returns:
        Tuple of (elevation field, mask field).
    """
    rng = seeded_rng(seed)
    offsets = octave_offsets(rng, noise.octaves, noise.offset)
    mask_offset = rng.integers(-OFFSET_RANGE, OFFSET_RANGE, size=(1, 2)).astype(np.float64)

    elevation = NoiseField.from_config(noise, offsets)
    mask = NoiseField(
        scale=mountains.scale,
        persistence=1.0,
        lacunarity=1.0,
        offsets=mask_offset,
        signed=False,
    )
    return elevation, mask


def mountain_attenuation(mask: NDArray[np.float64], density: float) -> NDArray[np.float64]:
    """Height multiplier for each mask value.

    Cells whose mask falls below ``1 - density`` are flattened towards
    lowland, down to ``FLATTEN_FLOOR`` at mask 0. Other cells keep full relief.

    Args:
        mask: Mask values in [0, 1].
        density: Mountain density in [0, 1].

    Returns:
        Multipliers in [FLATTEN_FLOOR, 1].
    """
    threshold = 1.0 - density
    below = mask < threshold
    ratio = np.divide(mask, threshold, out=np.ones_like(mask), where=below)
    return np.where(below, FLATTEN_FLOOR + (1.0 - FLATTEN_FLOOR) * ratio, 1.0)


def synthesize_raw_heights(
    elevation: NoiseField,
    mask: NoiseField | None,
    density: float,
    samples: int,
    workers: int = 1,
) -> tuple[NDArray[np.float64], float, float]:
    """First pass: masked fractal heights and their global range.

    Rows are independent, so they may be split across threads; the result
    does not depend on the split.

    Args:
        elevation: Elevation noise field.
        mask: Mountain mask field, or None for an unmasked run.
        density: Mountain density.
        samples: Grid samples per side.
        workers: Number of threads.

    Returns:
        Tuple of (raw heights of shape (samples, samples), min, max).
    """

    def rows(start: int, stop: int) -> NDArray[np.float64]:
        heights = elevation.evaluate_rows(start, stop, samples)
        if mask is not None:
            heights *= mountain_attenuation(mask.evaluate_rows(start, stop, samples), density)
        return heights

    if workers <= 1 or samples < 2 * workers:
        raw = rows(0, samples)
    else:
        bounds = np.linspace(0, samples, workers + 1).astype(int)
        with futures.ThreadPoolExecutor(max_workers=workers) as pool:
            chunks = pool.map(rows, bounds[:-1], bounds[1:])
            raw = np.concatenate(list(chunks), axis=0)

    return raw, float(raw.min()), float(raw.max())


def edge_falloff_factor(
    grid: GridConfig,
    falloff_distance: float,
    curve: Curve,
) -> NDArray[np.float64]:
    """Blend factor from each cell's distance to the nearest border.

    Distances are measured in world units. Cells on the border get exactly 0;
    cells at or beyond ``falloff_distance`` get 1.

    Args:
        grid: Grid dimensions.
        falloff_distance: Width of the blend zone in world units.
        curve: Maps normalized distance in [0, 1] to a factor.

    Returns:
        Array of shape (samples, samples) with values in [0, 1].
    """
    n = grid.samples
    steps = np.arange(n, dtype=np.float64)
    to_x_edge = np.minimum(steps, n - 1 - steps) / grid.resolution * grid.width
    to_z_edge = np.minimum(steps, n - 1 - steps) / grid.resolution * grid.length
    distance = np.minimum(to_z_edge[:, None], to_x_edge[None, :])

    if falloff_distance <= 0:
        return np.ones_like(distance)

    inside = distance < falloff_distance
    factor = np.ones_like(distance)
    factor[inside] = np.clip(curve.evaluate(distance[inside] / falloff_distance), 0.0, 1.0)
    factor[distance == 0.0] = 0.0
    return factor


def normalize_heights(
    raw: NDArray[np.float64],
    min_height: float,
    max_height: float,
    remap: Curve | None,
    edge_factor: NDArray[np.float64],
    water_level: float,
) -> NDArray[np.float64]:
    """Second pass: normalize, remap and blend edges toward the water plane.

    Args:
        raw: Raw heights from the first pass.
        min_height: Global minimum of raw.
        max_height: Global maximum of raw.
        remap: Optional curve applied to normalized heights.
        edge_factor: Edge blend factors (0 = water plane).
        water_level: Normalized water level.

    Returns:
        Heights in [0, 1].
    """
    if max_height == min_height:
        message = "Height field is flat; substituting the water plane"
        logger.warning(message)
        warnings.warn(message, DegenerateInputWarning, stacklevel=2)
        return np.full_like(raw, water_level)

    heights = (raw - min_height) / (max_height - min_height)

    if remap is not None:
        heights = np.clip(remap.evaluate(heights), 0.0, 1.0)

    heights = water_level + (heights - water_level) * edge_factor
    return np.clip(heights, 0.0, 1.0)


def synthesize_heightmap(
    seed: int,
    grid: GridConfig,
    noise: NoiseConfig,
    mountains: MountainConfig,
    remap: Curve | None,
    water: WaterConfig,
    workers: int = 1,
    masked: bool = True,
) -> NDArray[np.float64]:
    """Synthesize a normalized heightmap.

    Args:
        seed: Terrain seed.
        grid: Grid dimensions and resolution.
        noise: Elevation noise parameters.
        mountains: Mountain mask parameters.
        remap: Optional height remap curve; an empty curve is the identity.
        water: Water level and edge falloff.
        workers: Threads for the first pass.
        masked: Apply the mountain mask. Disabling it gives the plain fractal.

    Returns:
        Read-only array of shape (resolution + 1, resolution + 1) in [0, 1].

    Raises:
        ConfigurationError: If any parameter is invalid.
    """
    config = validate_config(
        TerrainConfig(
            grid=grid, noise=noise, mountains=mountains, water=water, workers=workers
        )
    )
    water_level = config.water_level_normalized

    if remap is not None and remap.is_empty:
        message = "Remap curve has no keys; using identity"
        logger.warning(message)
        warnings.warn(message, DegenerateInputWarning, stacklevel=2)
        remap = None

    elevation, mask = build_noise_fields(seed, noise, mountains)
    logger.info(
        f"Synthesizing {grid.samples}x{grid.samples} heightmap with seed {seed}, "
        f"mountain density {mountains.density}"
    )

    raw, min_height, max_height = synthesize_raw_heights(
        elevation,
        mask if masked else None,
        mountains.density,
        grid.samples,
        workers=workers,
    )
    logger.debug(f"Raw height range: [{min_height:.4f}, {max_height:.4f}]")

    edge_factor = edge_falloff_factor(
        grid, water.falloff_distance, Curve.from_config(water.falloff_curve)
    )
    heights = normalize_heights(
        raw, min_height, max_height, remap, edge_factor, water_level
    )
    heights.setflags(write=False)
    return heights
