"""Preview images of generated terrain for debugging."""

import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from .curves import ColorGradient
from .generator import TerrainResult
from .surface import MaterialBand

logger = logging.getLogger(__name__)

# Default layer colours of the four surface materials
MATERIAL_COLORS: dict[MaterialBand, tuple[float, float, float]] = {
    MaterialBand.SAND: (0.76, 0.70, 0.50),
    MaterialBand.GRASS: (0.4, 0.6, 0.2),
    MaterialBand.STONE: (0.5, 0.5, 0.5),
    MaterialBand.SNOW: (0.95, 0.95, 0.95),
}

WATER_GRADIENT = ColorGradient.from_keys(
    [
        (0.0, (0.05, 0.12, 0.35)),
        (1.0, (0.25, 0.55, 0.75)),
    ]
)

LAND_GRADIENT = ColorGradient.from_keys(
    [
        (0.0, (0.76, 0.70, 0.50)),
        (0.15, (0.4, 0.6, 0.2)),
        (0.55, (0.3, 0.45, 0.15)),
        (0.8, (0.5, 0.5, 0.5)),
        (1.0, (0.95, 0.95, 0.95)),
    ]
)


def _to_rgb8(colors: NDArray[np.float64]) -> NDArray[np.uint8]:
    return np.round(np.clip(colors, 0.0, 1.0) * 255).astype(np.uint8)


def colorize_heightmap(
    heights: NDArray[np.float64],
    water_level: float,
    land: ColorGradient = LAND_GRADIENT,
    water: ColorGradient = WATER_GRADIENT,
) -> NDArray[np.uint8]:
    """Shade a heightmap with separate gradients above and below water.

    Each gradient spans its side of the water level: 0 at the deepest or
    lowest point, 1 at the water line (water) or the summit (land).

    Returns:
        RGB array of shape ``heights.shape + (3,)``.
    """
    below = heights < water_level
    depth = np.divide(heights, water_level, out=np.ones_like(heights), where=water_level > 0)
    span = 1.0 - water_level
    rise = np.divide(
        heights - water_level, span, out=np.zeros_like(heights), where=span > 0
    )
    colors = np.where(below[..., None], water.evaluate(depth), land.evaluate(rise))
    return _to_rgb8(colors)


def blend_material_colors(
    weights: NDArray[np.float64],
    palette: dict[MaterialBand, tuple[float, float, float]] = MATERIAL_COLORS,
) -> NDArray[np.uint8]:
    """Mix band colours by their weights, as a splat-map shader would.

    Returns:
        RGB array of shape ``weights.shape[:-1] + (3,)``.
    """
    colors = np.array([palette[band] for band in MaterialBand], dtype=np.float64)
    return _to_rgb8(weights @ colors)


def vegetation_image(density: NDArray[np.int32]) -> NDArray[np.uint8]:
    """Greyscale image of vegetation density, brightest at the largest value."""
    peak = density.max()
    if peak == 0:
        return np.zeros(density.shape, dtype=np.uint8)
    return np.round(density / peak * 255).astype(np.uint8)


def save_preview_images(result: TerrainResult, output_dir: Path) -> list[Path]:
    """Save heightmap, splat map, slope and vegetation previews as PNGs.

    Args:
        result: Generated terrain.
        output_dir: Directory to save images.

    Returns:
        Paths of the written images; empty if matplotlib is missing.
    """
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        logger.warning("matplotlib not available, skipping preview images")
        return []

    output_dir.mkdir(parents=True, exist_ok=True)

    images = {
        "heightmap": colorize_heightmap(result.heightmap, result.water_level),
        "materials": blend_material_colors(result.material_weights),
        "vegetation": vegetation_image(result.vegetation_density),
    }

    written = []
    for name, image in images.items():
        path = output_dir / f"{name}.png"
        plt.imsave(path, image, cmap="gray" if image.ndim == 2 else None, origin="lower")
        written.append(path)

    fig, ax = plt.subplots(figsize=(10, 10))
    shown = ax.imshow(result.slope, cmap="magma", origin="lower")
    fig.colorbar(shown, ax=ax, label="slope (degrees)")
    ax.set_title("slope")
    ax.axis("off")
    path = output_dir / "slope.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    written.append(path)

    logger.info(f"Preview images saved to {output_dir}")
    return written
