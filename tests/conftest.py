"""Shared test fixtures for terrain tests."""

import numpy as np
import pytest

from islandgen.config import (
    GridConfig,
    MountainConfig,
    NoiseConfig,
    TerrainConfig,
    VegetationConfig,
    WaterConfig,
)
from islandgen.generator import TerrainResult, generate_terrain


@pytest.fixture
def small_config() -> TerrainConfig:
    """65x65 tile on a 64-unit square with an 8-unit edge falloff."""
    return TerrainConfig(
        grid=GridConfig(width=64.0, length=64.0, resolution=64),
        noise=NoiseConfig(scale=20.0),
        mountains=MountainConfig(scale=40.0),
        water=WaterConfig(falloff_distance=8.0),
        vegetation=VegetationConfig(resolution=32),
    )


@pytest.fixture
def small_terrain(small_config: TerrainConfig) -> TerrainResult:
    """Terrain generated from small_config with seed 42."""
    return generate_terrain(42, small_config)


@pytest.fixture
def unit_grid() -> GridConfig:
    """33x33 grid with 1-unit cells and 100-unit max elevation."""
    return GridConfig(width=32.0, length=32.0, resolution=32, max_elevation=100.0)


@pytest.fixture
def ramp_heights(unit_grid: GridConfig) -> np.ndarray:
    """Heightmap rising 0.01 per column (45 degrees on unit_grid)."""
    n = unit_grid.samples
    columns = np.arange(n, dtype=np.float64) * 0.01
    return np.tile(columns, (n, 1))
