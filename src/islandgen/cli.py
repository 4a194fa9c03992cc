"""Command-line interface for terrain generation."""

import argparse
import logging
import sys
import time


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for terrain generation."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural terrain tile"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Config name from configs/ or path to a TOML file (default: built-in)",
    )
    parser.add_argument(
        "--seed", type=int, default=42, help="Random seed (default: 42)"
    )
    parser.add_argument(
        "--width", type=float, default=None, help="Override tile width in world units"
    )
    parser.add_argument(
        "--length", type=float, default=None, help="Override tile length in world units"
    )
    parser.add_argument(
        "--resolution", type=int, default=None, help="Override heightmap resolution"
    )
    parser.add_argument(
        "--debug-images",
        type=str,
        default=None,
        help="Directory to save preview images (optional)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Import here to avoid slow startup for --help
    from .config import TerrainConfig, find_config, load_config
    from .exceptions import ConfigurationError
    from .generator import generate_terrain
    from .validation import validate_terrain

    try:
        config = load_config(find_config(args.config)) if args.config else TerrainConfig()
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    grid_updates = {
        name: value
        for name, value in (
            ("width", args.width),
            ("length", args.length),
            ("resolution", args.resolution),
        )
        if value is not None
    }
    updates = {}
    if grid_updates:
        updates["grid"] = config.grid.model_copy(update=grid_updates)
    if args.debug_images is not None:
        updates["debug_output_dir"] = args.debug_images
    if updates:
        config = config.model_copy(update=updates)

    grid = config.grid
    print(
        f"Generating {grid.width:g}x{grid.length:g} terrain "
        f"({grid.samples}x{grid.samples} samples) with seed {args.seed}"
    )
    print()

    start_time = time.time()
    try:
        result = generate_terrain(args.seed, config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    gen_time = time.time() - start_time

    print()
    print(f"Generation complete in {gen_time:.1f}s")

    validation = validate_terrain(result)
    return 0 if validation.passed else 1


if __name__ == "__main__":
    sys.exit(main())
