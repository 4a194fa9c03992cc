"""Main terrain generation orchestration."""

import logging
from concurrent import futures
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .config import TerrainConfig, validate_config
from .curves import Curve
from .heightmap import synthesize_heightmap
from .sampling import sample_bilinear, sample_nearest
from .slope import estimate_slope, slope_at_points
from .surface import MaterialBand, band_coverage, classify_weights
from .vegetation import place_density

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TerrainResult:
    """Finished terrain grids and the inputs that produced them.

    All arrays are read-only. Accessors take fractional heightmap
    coordinates (u = column, v = row) and clamp out-of-range queries.
    """

    seed: int
    config: TerrainConfig
    heightmap: NDArray[np.float64]
    slope: NDArray[np.float64]
    material_weights: NDArray[np.float64]
    vegetation_density: NDArray[np.int32]

    @property
    def water_level(self) -> float:
        """Normalized water level the borders settle at."""
        return self.config.water_level_normalized

    def get_normalized_height_at(self, u: float, v: float) -> float:
        """Bilinear height in [0, 1]."""
        return float(sample_bilinear(self.heightmap, u, v))

    def get_world_height_at(self, u: float, v: float) -> float:
        """Bilinear height in world units."""
        return self.get_normalized_height_at(u, v) * self.config.grid.max_elevation

    def get_slope_at(self, u: float, v: float) -> float:
        """Slope in degrees, using the same estimator as classification."""
        return float(
            slope_at_points(self.heightmap, u, v, self.config.grid, self.config.slope)
        )

    def get_material_weights_at(self, u: float, v: float) -> tuple[float, float, float, float]:
        """Weights of the nearest cell as (sand, grass, stone, snow)."""
        weights = sample_nearest(self.material_weights, u, v)
        return tuple(float(w) for w in weights)

    def get_vegetation_density_at(self, u: float, v: float) -> float:
        """Density of the detail cell nearest to a heightmap coordinate."""
        rows, cols = self.heightmap.shape
        detail_rows, detail_cols = self.vegetation_density.shape
        du = np.clip(u, 0.0, cols - 1) / (cols - 1) * (detail_cols - 1)
        dv = np.clip(v, 0.0, rows - 1) / (rows - 1) * (detail_rows - 1)
        return float(sample_nearest(self.vegetation_density, du, dv))

    def stats(self) -> dict[str, Any]:
        """Summary statistics of the generated grids."""
        coverage = band_coverage(self.material_weights)
        return {
            "height_min": float(self.heightmap.min()),
            "height_max": float(self.heightmap.max()),
            "height_mean": float(self.heightmap.mean()),
            "slope_max": float(self.slope.max()),
            "bands": {band.value: coverage[band] for band in MaterialBand},
            "vegetation_coverage": float(np.count_nonzero(self.vegetation_density))
            / self.vegetation_density.size,
        }


def generate_terrain(seed: int, config: TerrainConfig | None = None) -> TerrainResult:
    """Generate a complete terrain tile.

    Args:
        seed: Seed for every random offset.
        config: Terrain configuration; defaults apply when omitted.

    Returns:
        TerrainResult with heightmap, material weights and vegetation density.

    Raises:
        ConfigurationError: If the configuration is invalid. No grid is built.
    """
    if config is None:
        config = TerrainConfig()
    # The result owns its config; later edits to the caller's copy do not reach it
    config = validate_config(config).model_copy(deep=True)
    grid = config.grid

    logger.info(
        f"Generating terrain {grid.width:g}x{grid.length:g} "
        f"({grid.samples}x{grid.samples} samples) with seed {seed}"
    )

    # Stage A: Heightmap
    logger.info("Stage A: Synthesizing heightmap...")
    remap = Curve.from_config(config.remap) if config.remap is not None else None
    heightmap = synthesize_heightmap(
        seed,
        grid,
        config.noise,
        config.mountains,
        remap,
        config.water,
        workers=config.workers,
    )

    # Stage B: Slope
    logger.info("Stage B: Estimating slope...")
    slope = estimate_slope(heightmap, grid, config.slope)

    # Stage C: Surface weights and vegetation, independent of each other
    logger.info("Stage C: Classifying surface and placing vegetation...")
    slope_at = partial(slope_at_points, heightmap, grid=grid, config=config.slope)

    if config.workers > 1:
        with futures.ThreadPoolExecutor(max_workers=2) as pool:
            weights_future = pool.submit(classify_weights, heightmap, slope, config.surface)
            density_future = pool.submit(place_density, heightmap, slope_at, config.vegetation)
            material_weights = weights_future.result()
            vegetation_density = density_future.result()
    else:
        material_weights = classify_weights(heightmap, slope, config.surface)
        vegetation_density = place_density(heightmap, slope_at, config.vegetation)
    material_weights.setflags(write=False)

    result = TerrainResult(
        seed=seed,
        config=config,
        heightmap=heightmap,
        slope=slope,
        material_weights=material_weights,
        vegetation_density=vegetation_density,
    )

    _log_terrain_stats(result)

    # Debug output if enabled
    if config.debug_output_dir:
        from .preview import save_preview_images

        save_preview_images(result, Path(config.debug_output_dir))

    return result


def _log_terrain_stats(result: TerrainResult) -> None:
    """Log terrain generation statistics."""
    stats = result.stats()

    logger.info(f"Terrain stats ({result.heightmap.size:,} samples):")
    logger.info(
        f"  height: min {stats['height_min']:.3f}, max {stats['height_max']:.3f}, "
        f"mean {stats['height_mean']:.3f}"
    )
    for name, share in stats["bands"].items():
        logger.info(f"  {name}: {share * 100:.1f}%")
    logger.info(f"  vegetation coverage: {stats['vegetation_coverage'] * 100:.1f}%")
