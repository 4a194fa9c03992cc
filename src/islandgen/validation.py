"""Post-generation validation."""

import logging

import numpy as np

from .generator import TerrainResult
from .surface import MaterialBand, band_coverage

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-5


class ValidationResult:
    """Findings from checking a generated tile.

    Errors are broken invariants and fail the tile; warnings flag output
    that is valid but probably not what the config intended.
    """

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Record a broken invariant and fail the tile."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Record a suspicious but valid result."""
        self.warnings.append(message)


def validate_terrain(terrain: TerrainResult) -> ValidationResult:
    """Run the invariant checks on a generated tile.

    Args:
        terrain: Generated terrain.

    Returns:
        Collected findings; ``passed`` is False if any invariant is broken.
    """
    result = ValidationResult()

    # Check 1: Heights in [0, 1]
    _check_height_range(terrain, result)

    # Check 2: Borders sit on the water plane
    _check_border_water(terrain, result)

    # Check 3: Weights are a partition of unity
    _check_weights(terrain, result)

    # Check 4: Steep cells are pure stone
    _check_slope_override(terrain, result)

    # Check 5: Vegetation only where allowed
    _check_vegetation(terrain, result)

    _log_validation(terrain, result)

    return result


def _log_validation(terrain: TerrainResult, result: ValidationResult) -> None:
    samples = terrain.heightmap.shape
    if result.passed:
        logger.info(
            f"Tile {samples[0]}x{samples[1]} (seed {terrain.seed}) passed all checks"
        )
    else:
        logger.warning(
            f"Tile {samples[0]}x{samples[1]} (seed {terrain.seed}) broke "
            f"{len(result.errors)} invariant(s): {'; '.join(result.errors)}"
        )
    if result.warnings:
        logger.warning(f"Tile warnings: {'; '.join(result.warnings)}")


def _check_height_range(terrain: TerrainResult, result: ValidationResult) -> None:
    """Check all heights are normalized."""
    heights = terrain.heightmap
    outside = np.count_nonzero((heights < 0.0) | (heights > 1.0) | ~np.isfinite(heights))
    if outside > 0:
        result.add_error(f"{outside} heights outside [0, 1]")


def _check_border_water(terrain: TerrainResult, result: ValidationResult) -> None:
    """Check that border cells equal the water level."""
    if terrain.config.water.falloff_distance <= 0:
        return

    heights = terrain.heightmap
    border = np.concatenate([heights[0, :], heights[-1, :], heights[:, 0], heights[:, -1]])
    off_plane = np.count_nonzero(border != terrain.water_level)
    if off_plane > 0:
        result.add_error(f"Border has {off_plane} cells off the water plane")


def _check_weights(terrain: TerrainResult, result: ValidationResult) -> None:
    """Check weights are non-negative and sum to 1."""
    weights = terrain.material_weights
    if np.any(weights < 0):
        result.add_error("Negative material weights")

    drift = np.abs(weights.sum(axis=-1) - 1.0)
    bad = np.count_nonzero(drift > WEIGHT_TOLERANCE)
    if bad > 0:
        result.add_error(f"{bad} cells have weights not summing to 1")

    coverage = band_coverage(weights)
    unused = [band.value for band in MaterialBand if coverage[band] == 0.0]
    if unused:
        result.add_warning(f"Unused material bands: {', '.join(unused)}")


def _check_slope_override(terrain: TerrainResult, result: ValidationResult) -> None:
    """Check that steep cells are pure stone."""
    steep = terrain.slope > terrain.config.surface.slope_override_angle
    if not np.any(steep):
        return

    expected = np.zeros(len(MaterialBand))
    expected[MaterialBand.STONE.index] = 1.0
    wrong = np.count_nonzero(np.any(terrain.material_weights[steep] != expected, axis=-1))
    if wrong > 0:
        result.add_error(f"{wrong} steep cells are not pure stone")


def _check_vegetation(terrain: TerrainResult, result: ValidationResult) -> None:
    """Check vegetation density values and coverage."""
    density = terrain.vegetation_density
    allowed = {0, terrain.config.vegetation.density}
    values = set(np.unique(density).tolist())
    if not values.issubset(allowed):
        result.add_error(f"Unexpected vegetation density values: {sorted(values - allowed)}")

    if np.count_nonzero(density) == 0 and terrain.config.vegetation.density > 0:
        result.add_warning("No vegetation placed")
