"""Deterministic procedural terrain synthesis.

Builds a normalized heightmap from seeded fractal noise, then derives
surface material weights and vegetation density from its height and slope.
"""

from .config import TerrainConfig, load_config, validate_config
from .curves import ColorGradient, Curve
from .exceptions import (
    ConfigurationError,
    DegenerateInputWarning,
    SamplingOutOfRange,
    TerrainError,
)
from .generator import TerrainResult, generate_terrain
from .heightmap import synthesize_heightmap
from .noise import NoiseField, perlin_noise
from .slope import estimate_slope
from .surface import MaterialBand, classify_weights
from .validation import ValidationResult, validate_terrain
from .vegetation import place_density

__all__ = [
    "ColorGradient",
    "ConfigurationError",
    "Curve",
    "DegenerateInputWarning",
    "MaterialBand",
    "NoiseField",
    "SamplingOutOfRange",
    "TerrainConfig",
    "TerrainError",
    "TerrainResult",
    "ValidationResult",
    "classify_weights",
    "estimate_slope",
    "generate_terrain",
    "load_config",
    "perlin_noise",
    "place_density",
    "synthesize_heightmap",
    "validate_config",
    "validate_terrain",
]
