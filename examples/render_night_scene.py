#!/usr/bin/env python3
"""Render the night scene.

Builds the night meadow scene (or loads a scene from JSON), renders it with
progressive refinement and writes a PPM or PNG image.

Usage:
    python examples/render_night_scene.py [options]

Options:
    --width WIDTH         Image width in pixels (default: 1200)
    --samples SAMPLES     Number of samples per pixel (default: 20)
    --max-depth DEPTH     Maximum bounces per path (default: 50)
    --output OUTPUT       Output file, .ppm or .png (default: night.ppm)
    --scene PATH          Load the scene from a JSON file instead
    --seed SEED           Seed for the night scene layout (default: 0)
    --arch {cpu,gpu}      Taichi backend (default: gpu, falls back to cpu)
    --batch-size SIZE     Samples per progress update (default: 5)
    --quiet               Suppress progress output
    --log-level LEVEL     Logging level (default: INFO)

Example:
    python examples/render_night_scene.py --width 300 --samples 10 --output night.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_night_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the night scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=1200, help="Image width in pixels (default: 1200)")
    parser.add_argument("--samples", type=int, default=20, help="Samples per pixel (default: 20)")
    parser.add_argument("--max-depth", type=int, default=50, help="Maximum bounces (default: 50)")
    parser.add_argument(
        "--output",
        type=str,
        default="night.ppm",
        help="Output file path, .ppm or .png (default: night.ppm)",
    )
    parser.add_argument("--scene", type=str, default=None, help="Scene JSON file to render instead")
    parser.add_argument("--seed", type=int, default=0, help="Night scene layout seed (default: 0)")
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="gpu",
        help="Taichi backend (default: gpu, falls back to cpu)",
    )
    parser.add_argument("--batch-size", type=int, default=5, help="Samples per progress update (default: 5)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def render_night_scene(
    width: int = 1200,
    num_samples: int = 20,
    max_depth: int = 50,
    output_path: str = "night.ppm",
    scene_path: str | None = None,
    seed: int = 0,
    batch_size: int = 5,
    quiet: bool = False,
) -> Path:
    """Render the night scene and save it to a file.

    Returns:
        Path to the saved image file.

    Raises:
        ValueError: If the output extension is not .ppm or .png.
    """
    # Imported after ti.init
    from duskray.camera.thin_lens import setup_camera
    from duskray.core.integrator import RenderSettings
    from duskray.core.progressive import ProgressiveRenderer
    from duskray.preview.export import save_png, save_ppm
    from duskray.scene.manager import SceneManager
    from duskray.scene.night_scene import (
        NightSceneParams,
        create_night_camera,
        create_night_scene,
    )

    output_file = Path(output_path)
    suffix = output_file.suffix.lower()
    if suffix not in (".ppm", ".png"):
        raise ValueError(f"Unsupported output format: {output_file.suffix!r} (use .ppm or .png)")

    settings = RenderSettings(image_width=width, samples_per_pixel=num_samples, max_depth=max_depth)

    if scene_path is not None:
        scene = SceneManager()
        scene.load_json(scene_path)
        camera = create_night_camera(settings.aspect_ratio)
    else:
        scene, camera = create_night_scene(NightSceneParams(seed=seed), settings.aspect_ratio)
    setup_camera(camera)

    renderer = ProgressiveRenderer(settings.image_width, settings.image_height, settings.max_depth)
    start_time = time.perf_counter()

    def progress_callback(current: int, target: int) -> None:
        if quiet:
            return
        elapsed = time.perf_counter() - start_time
        samples_per_sec = current / elapsed if elapsed > 0 else 0
        print(
            f"\r  Progress: {current}/{target} samples - {samples_per_sec:.1f} spp/s",
            end="",
            file=sys.stderr,
            flush=True,
        )

    renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )
    if not quiet:
        print(file=sys.stderr)

    if suffix == ".ppm":
        save_ppm(renderer, output_file)
    else:
        save_png(renderer, output_file)

    logger.info("Saved %s in %.2fs", output_file.absolute(), time.perf_counter() - start_time)
    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
        except Exception:
            logger.warning("GPU backend unavailable, using CPU")
            ti.init(arch=ti.cpu)
    else:
        ti.init(arch=ti.cpu)

    try:
        render_night_scene(
            width=args.width,
            num_samples=args.samples,
            max_depth=args.max_depth,
            output_path=args.output,
            scene_path=args.scene,
            seed=args.seed,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except Exception:
        logger.exception("Render failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
