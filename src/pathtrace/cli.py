"""Command-line entry point.

Usage:
    pathtrace [options]
    python -m pathtrace [options]

Options:
    --scene SCENE       "random", "simple" or a scene JSON file (default: random)
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 225)
    --samples SAMPLES   Number of samples per pixel (default: 50)
    --max-depth DEPTH   Maximum bounces per path (default: 50)
    --seed SEED         Random seed (default: 42)
    --arch ARCH         Taichi backend, cpu or gpu (default: cpu)
    --batch-size SIZE   Samples per progress update (default: 10)
    --output OUTPUT     Output image path (default: render.png)
    --quiet             Only log warnings and errors
    --verbose           Log debug output

Example:
    pathtrace --width 200 --height 112 --samples 20 --output spheres.png

A scene JSON file holds the output of SceneManager.save_json. Since a file
carries no camera, it is viewed with the camera of the random spheres scene.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pathtrace.config import ARCHS, RenderConfig, init_taichi

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderConfig()
    parser = argparse.ArgumentParser(
        prog="pathtrace",
        description="Render a scene of spheres with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default="random",
        help="'random', 'simple' or a scene JSON file (default: random)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.width,
        help=f"Image width in pixels (default: {defaults.width})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=defaults.height,
        help=f"Image height in pixels (default: {defaults.height})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Number of samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum bounces per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help=f"Random seed (default: {defaults.seed})",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCHS),
        default=defaults.arch,
        help=f"Taichi backend (default: {defaults.arch})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=defaults.batch_size,
        help=f"Samples per progress update (default: {defaults.batch_size})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=defaults.output,
        help=f"Output image path (default: {defaults.output})",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build a RenderConfig from parsed arguments."""
    return RenderConfig(
        width=args.width,
        height=args.height,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
        arch=args.arch,
        batch_size=args.batch_size,
        output=args.output,
    )


def configure_logging(quiet: bool = False, verbose: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def build_scene(scene: str, config: RenderConfig):
    """Populate the scene and return its camera.

    Args:
        scene: "random", "simple" or a path to a scene JSON file.
        config: Supplies the seed and the camera aspect ratio.

    Returns:
        Tuple of (SceneManager, ThinLensCamera).

    Raises:
        ValueError: If the scene file is invalid.
        OSError: If the scene file cannot be read.
    """
    from pathtrace.scene.random_scene import create_random_scene, create_simple_scene

    if scene == "simple":
        return create_simple_scene(aspect_ratio=config.aspect_ratio)
    if scene == "random":
        return create_random_scene(seed=config.seed, aspect_ratio=config.aspect_ratio)

    # Borrow the random scene's camera, then replace its contents with the file
    manager, camera = create_random_scene(seed=config.seed, grid=0, aspect_ratio=config.aspect_ratio)
    manager.load_json(scene)
    return manager, camera


def render(config: RenderConfig, scene: str = "random") -> Path:
    """Render a scene to config.output.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.
    """
    # Imported here so Taichi fields are allocated after ti.init
    from pathtrace.camera.thin_lens import setup_camera
    from pathtrace.core.progressive import ProgressiveRenderer

    manager, camera = build_scene(scene, config)
    setup_camera(camera)
    logger.info(
        "Rendering %s scene (%d spheres) at %dx%d, %d spp, depth %d",
        scene,
        manager.get_sphere_count(),
        config.width,
        config.height,
        config.samples_per_pixel,
        config.max_depth,
    )

    renderer = ProgressiveRenderer(config.width, config.height, config.max_depth)
    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        progress_pct = (current / target) * 100 if target > 0 else 0
        samples_per_sec = current / elapsed if elapsed > 0 else 0
        logger.info(
            "Progress: %d/%d samples (%.1f%%) - %.1f spp/s",
            current,
            target,
            progress_pct,
            samples_per_sec,
        )

    renderer.render(
        num_samples=config.samples_per_pixel,
        batch_size=config.batch_size,
        callback=progress_callback,
    )

    output_file = Path(config.output)
    renderer.save_image(str(output_file))
    logger.info("Total time: %.2fs", time.time() - start_time)
    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = parse_args(argv)
    configure_logging(quiet=args.quiet, verbose=args.verbose)

    try:
        config = config_from_args(args)
        config.validate()
        init_taichi(config)
        logger.debug("Taichi initialized (arch=%s, seed=%d)", config.arch, config.seed)
        render(config, scene=args.scene)
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
