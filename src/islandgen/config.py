"""Terrain synthesis configuration models and TOML loading."""

import math
import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

CONFIGS_DIR = Path(__file__).parent / "configs"

# Upper bound of grass instances per detail cell
MAX_DETAIL_DENSITY = 16


class GridConfig(BaseModel):
    """Tile dimensions in world units and heightmap resolution."""

    width: float = Field(default=512.0, description="Tile width in world units")
    length: float = Field(default=512.0, description="Tile length in world units")
    max_elevation: float = Field(
        default=100.0, description="World height mapped to normalized 1.0"
    )
    resolution: int = Field(
        default=512, description="Heightmap cells per side (grid is resolution + 1)"
    )

    @property
    def samples(self) -> int:
        """Heightmap samples per side."""
        return self.resolution + 1

    @property
    def cell_size(self) -> tuple[float, float]:
        """World units between adjacent samples as (x, z)."""
        return self.width / self.resolution, self.length / self.resolution


class NoiseConfig(BaseModel):
    """Fractal noise parameters for the elevation field."""

    scale: float = Field(default=50.0, description="Sample distance divisor")
    octaves: int = Field(default=4, description="Number of octaves for fBm")
    persistence: float = Field(default=0.5, description="Amplitude multiplier per octave")
    lacunarity: float = Field(default=2.0, description="Frequency multiplier per octave")
    offset: tuple[float, float] = Field(
        default=(0.0, 0.0), description="User offset added to every octave"
    )


class MountainConfig(BaseModel):
    """Large-scale mask that decides where full relief is kept."""

    density: float = Field(
        default=0.5, description="0 = flat plains everywhere, 1 = mountains everywhere"
    )
    scale: float = Field(default=100.0, description="Mask noise scale (cluster size)")


class CurveConfig(BaseModel):
    """Keyframed curve as (time, value) pairs."""

    keys: list[tuple[float, float]] = Field(default_factory=list)
    interpolation: Literal["linear", "smooth"] = Field(
        default="linear", description="Segment shape between keys"
    )


def _ease_in_out() -> CurveConfig:
    return CurveConfig(keys=[(0.0, 0.0), (1.0, 1.0)], interpolation="smooth")


class WaterConfig(BaseModel):
    """Water plane and the edge falloff that blends borders into it."""

    level: float = Field(default=32.0, description="Water level in world units")
    falloff_distance: float = Field(
        default=50.0, description="Distance from edge where flattening starts"
    )
    falloff_curve: CurveConfig = Field(
        default_factory=_ease_in_out,
        description="Maps normalized edge distance (0 = edge) to blend factor",
    )


class SurfaceConfig(BaseModel):
    """Material band thresholds on normalized height."""

    thresholds: tuple[float, float, float, float] = Field(
        default=(0.2, 0.4, 0.7, 0.85),
        description="Sand, grass, stone and snow breakpoints",
    )
    slope_override_angle: float = Field(
        default=40.0, description="Slope in degrees above which cells are stone"
    )


class SlopeConfig(BaseModel):
    """Sampled slope estimator settings."""

    samples: int = Field(default=8, description="Points sampled around each cell")
    radius: float = Field(default=1.0, description="Sampling radius in cells")
    mode: Literal["max", "mean"] = Field(
        default="max", description="Reduction over the sampled angles"
    )


class VegetationConfig(BaseModel):
    """Grass placement constraints."""

    min_height: float = Field(default=0.1, description="Min normalized height")
    max_height: float = Field(default=0.8, description="Max normalized height")
    max_slope_angle: float = Field(default=45.0, description="Max slope in degrees")
    density: int = Field(default=6, description="Detail instances per included cell")
    resolution: int = Field(default=256, description="Detail grid cells per side")


class TerrainConfig(BaseModel):
    """Complete terrain synthesis configuration."""

    grid: GridConfig = Field(default_factory=GridConfig)
    noise: NoiseConfig = Field(default_factory=NoiseConfig)
    mountains: MountainConfig = Field(default_factory=MountainConfig)
    remap: CurveConfig | None = Field(
        default=None, description="Optional curve applied to normalized height"
    )
    water: WaterConfig = Field(default_factory=WaterConfig)
    surface: SurfaceConfig = Field(default_factory=SurfaceConfig)
    slope: SlopeConfig = Field(default_factory=SlopeConfig)
    vegetation: VegetationConfig = Field(default_factory=VegetationConfig)

    workers: int = Field(default=1, description="Threads used for row evaluation")

    # Debug options
    debug_output_dir: str | None = Field(
        default=None, description="Directory for preview images (None = disabled)"
    )

    @property
    def water_level_normalized(self) -> float:
        """Water level as a fraction of max elevation, clamped to [0, 1]."""
        return min(max(self.water.level / self.grid.max_elevation, 0.0), 1.0)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TerrainConfig":
        """Build a config from plain data, reporting errors as ConfigurationError."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e


def validate_config(config: TerrainConfig) -> TerrainConfig:
    """Check a config before generation and return a corrected copy.

    Surface thresholds given out of order are sorted. Everything else that
    is out of range raises.

    Args:
        config: Configuration to check.

    Returns:
        Config with auto-corrected thresholds.

    Raises:
        ConfigurationError: If any parameter is invalid.
    """
    for section in ("grid", "noise", "mountains", "water", "surface", "slope", "vegetation"):
        _check_finite(section, getattr(config, section))

    grid = config.grid
    if grid.resolution <= 0:
        raise ConfigurationError(f"Grid resolution must be positive, got {grid.resolution}")
    if grid.width <= 0 or grid.length <= 0:
        raise ConfigurationError(
            f"Grid dimensions must be positive, got {grid.width}x{grid.length}"
        )
    if grid.max_elevation <= 0:
        raise ConfigurationError(
            f"Max elevation must be positive, got {grid.max_elevation}"
        )

    noise = config.noise
    if noise.octaves < 1:
        raise ConfigurationError(f"Octave count must be at least 1, got {noise.octaves}")
    if noise.scale <= 0:
        raise ConfigurationError(f"Noise scale must be positive, got {noise.scale}")
    if noise.persistence <= 0:
        raise ConfigurationError(f"Persistence must be positive, got {noise.persistence}")
    if noise.lacunarity <= 0:
        raise ConfigurationError(f"Lacunarity must be positive, got {noise.lacunarity}")

    mountains = config.mountains
    if not 0.0 <= mountains.density <= 1.0:
        raise ConfigurationError(
            f"Mountain density must be in [0, 1], got {mountains.density}"
        )
    if mountains.scale <= 0:
        raise ConfigurationError(f"Mountain scale must be positive, got {mountains.scale}")

    if config.water.falloff_distance < 0:
        raise ConfigurationError(
            f"Falloff distance must not be negative, got {config.water.falloff_distance}"
        )
    _check_curve("water.falloff_curve", config.water.falloff_curve)
    if config.remap is not None:
        _check_curve("remap", config.remap)

    thresholds = resolve_thresholds(config.surface.thresholds)

    slope = config.slope
    if slope.samples < 3:
        raise ConfigurationError(f"Slope samples must be at least 3, got {slope.samples}")
    if slope.radius <= 0:
        raise ConfigurationError(f"Slope radius must be positive, got {slope.radius}")

    vegetation = config.vegetation
    if vegetation.resolution < 2:
        raise ConfigurationError(
            f"Vegetation resolution must be at least 2, got {vegetation.resolution}"
        )
    if vegetation.min_height > vegetation.max_height:
        raise ConfigurationError(
            f"Vegetation height band is inverted: "
            f"{vegetation.min_height} > {vegetation.max_height}"
        )
    if not 0 <= vegetation.density <= MAX_DETAIL_DENSITY:
        raise ConfigurationError(
            f"Vegetation density must be in [0, {MAX_DETAIL_DENSITY}], got {vegetation.density}"
        )

    if config.workers < 1:
        raise ConfigurationError(f"Workers must be at least 1, got {config.workers}")

    if thresholds != tuple(config.surface.thresholds):
        surface = config.surface.model_copy(update={"thresholds": thresholds})
        config = config.model_copy(update={"surface": surface})
    return config


def resolve_thresholds(
    thresholds: tuple[float, float, float, float],
) -> tuple[float, float, float, float]:
    """Sort surface thresholds and check they are strictly ascending.

    Raises:
        ConfigurationError: If two thresholds coincide or any is non-finite or outside [0, 1].
    """
    if not all(math.isfinite(t) for t in thresholds):
        raise ConfigurationError(f"Surface thresholds must be finite, got {thresholds}")
    ordered = tuple(sorted(thresholds))
    if any(b <= a for a, b in zip(ordered, ordered[1:])):
        raise ConfigurationError(
            f"Surface thresholds must be strictly ascending, got {thresholds}"
        )
    if ordered[0] < 0 or ordered[-1] > 1:
        raise ConfigurationError(f"Surface thresholds must lie in [0, 1], got {thresholds}")
    return ordered


def _check_finite(section: str, model: BaseModel) -> None:
    """Reject NaN and infinite float fields, including float tuples."""
    for name, value in model:
        values = value if isinstance(value, tuple) else (value,)
        if any(isinstance(v, float) and not math.isfinite(v) for v in values):
            raise ConfigurationError(f"{section}.{name} must be finite, got {value}")


def _check_curve(name: str, curve: CurveConfig) -> None:
    for time, value in curve.keys:
        if not (math.isfinite(time) and math.isfinite(value)):
            raise ConfigurationError(f"Curve '{name}' has a non-finite key ({time}, {value})")


def load_config(config_path: Path) -> TerrainConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed TerrainConfig.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
        ConfigurationError: If values have the wrong shape or type.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return TerrainConfig.from_dict(data)


def find_config(name: str) -> Path:
    """Find a config file by name.

    Searches in the following order:
    1. Exact path if name contains path separator or ends in .toml
    2. islandgen/configs/{name}.toml
    3. islandgen/configs/{name}

    Args:
        name: Config name or path.

    Returns:
        Path to the config file.

    Raises:
        FileNotFoundError: If config file is not found.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {name}")

    config_path = CONFIGS_DIR / f"{name}.toml"
    if config_path.exists():
        return config_path

    config_path = CONFIGS_DIR / name
    if config_path.exists():
        return config_path

    raise FileNotFoundError(
        f"Config '{name}' not found in {CONFIGS_DIR}. "
        f"Available configs: {list_configs()}"
    )


def list_configs() -> list[str]:
    """List available config names."""
    if not CONFIGS_DIR.exists():
        return []
    return sorted(p.stem for p in CONFIGS_DIR.glob("*.toml"))
