#!/usr/bin/env python3
"""Render a demo scene headless and save it as a PNG.

Runs the progressive renderer for a number of full passes over the image,
optionally stopping early once every pixel has converged.

Usage:
    python examples/render_scene.py [options]

Options:
    --scene NAME        default, showcase or poisson (default: default)
    --texture PATH      Image mapped on the showcase center sphere
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 225)
    --passes PASSES     Full passes over the image (default: 16)
    --samples SAMPLES   Rays per pixel visit (default: 1)
    --seed SEED         Random seed (default: random)
    --propagate         Fill unsampled pixels with nearby colors each pass
    --output OUTPUT     Output file path (default: render.png)
    --quiet             Suppress progress output

Example:
    python examples/render_scene.py --scene showcase --passes 32 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a demo scene with the progressive path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("default", "showcase", "poisson"),
        default="default",
        help="Scene to render (default: default)",
    )
    parser.add_argument(
        "--texture",
        type=str,
        default=None,
        help="Texture for the showcase center sphere",
    )
    parser.add_argument("--width", type=int, default=400, help="Image width (default: 400)")
    parser.add_argument("--height", type=int, default=225, help="Image height (default: 225)")
    parser.add_argument(
        "--passes",
        type=int,
        default=16,
        help="Full passes over the image (default: 16)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=1,
        help="Rays per pixel visit (default: 1)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--propagate",
        action="store_true",
        help="Fill unsampled pixels with nearby colors after each pass",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_scene(
    scene_name: str = "default",
    texture: str | None = None,
    width: int = 400,
    height: int = 225,
    passes: int = 16,
    samples: int = 1,
    seed: int | None = None,
    propagate: bool = False,
    output_path: str = "render.png",
    quiet: bool = False,
) -> Path:
    """Render a demo scene and save it to a file.

    Returns:
        Path to the saved image file.
    """
    from anytrace.config import RenderSettings
    from anytrace.core.progressive import ProgressiveRenderer
    from anytrace.preview.buffer import ImageBufferSink
    from anytrace.preview.export import save_png
    from anytrace.scene.demo import (
        create_default_scene,
        create_poisson_scene,
        create_showcase_scene,
    )

    settings = RenderSettings(
        width=width, height=height, samples_per_call=samples, seed=seed
    )
    rng = np.random.default_rng(seed)

    if not quiet:
        print(f"Creating {scene_name} scene ({width}x{height})...")
    if scene_name == "showcase":
        scene, camera = create_showcase_scene(texture, settings.aspect_ratio)
    elif scene_name == "poisson":
        scene, camera, _ = create_poisson_scene(rng, aspect_ratio=settings.aspect_ratio)
    else:
        scene, camera = create_default_scene(settings.aspect_ratio)

    sink = ImageBufferSink(width, height)
    renderer = ProgressiveRenderer(
        scene, camera, sink, settings, rng=rng, propagate_each_pass=propagate
    )

    if not quiet:
        print(f"Rendering {passes} passes...")
    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            pixels_per_sec = current / elapsed if elapsed > 0 else 0
            passes_done, _ = renderer.progress
            print(
                f"\r  Pass {passes_done}/{passes} - {pixels_per_sec:.0f} pixels/s",
                end="",
                flush=True,
            )

    for _ in range(passes):
        renderer.render(
            settings.pixel_count,
            batch_size=max(settings.pixel_count // 10, 1),
            callback=progress_callback,
        )
        if renderer.is_complete:
            break

    if not quiet:
        print()
        counts = renderer.status_counts()
        print("  " + ", ".join(f"{status.name.lower()}: {n}" for status, n in counts.items()))

    output_file = Path(output_path)
    save_png(sink, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    try:
        render_scene(
            scene_name=args.scene,
            texture=args.texture,
            width=args.width,
            height=args.height,
            passes=args.passes,
            samples=args.samples,
            seed=args.seed,
            propagate=args.propagate,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
