#!/usr/bin/env python3
"""Interactive progressive renderer in a Taichi GGUI window.

Usage:
    python examples/interactive_scene.py [--scene NAME] [--width W] [--height H]

Controls:
    - Up / Down: move forward / backward (Shift: faster)
    - Left / Right: turn (Shift: faster)
    - P: toggle near-pixel propagation
    - Left click: report the shape under the cursor
    - S: save a PNG
    - Escape: quit

The image restarts from scratch whenever the camera moves and refines for as
long as it stays still.
"""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np
import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive progressive path tracer.")
    parser.add_argument(
        "--scene",
        choices=("default", "showcase", "poisson"),
        default="showcase",
        help="Scene to render (default: showcase)",
    )
    parser.add_argument("--texture", type=str, default=None, help="Showcase texture image")
    parser.add_argument("--width", type=int, default=320, help="Window width (default: 320)")
    parser.add_argument("--height", type=int, default=180, help="Window height (default: 180)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    return parser.parse_args()


def main() -> int:
    """Main entry point for the interactive renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()
    logging.basicConfig(level=logging.INFO)

    # The path tracer runs on the CPU; Taichi only drives the window
    ti.init(arch=ti.cpu)

    from anytrace.config import RenderSettings
    from anytrace.core.progressive import ProgressiveRenderer
    from anytrace.preview.buffer import ImageBufferSink
    from anytrace.preview.interactive import InteractivePreview
    from anytrace.scene.demo import (
        create_default_scene,
        create_poisson_scene,
        create_showcase_scene,
    )

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    settings = RenderSettings(width=args.width, height=args.height, seed=args.seed)
    rng = np.random.default_rng(args.seed)
    if args.scene == "showcase":
        scene, camera = create_showcase_scene(args.texture, settings.aspect_ratio)
    elif args.scene == "poisson":
        scene, camera, target = create_poisson_scene(rng, aspect_ratio=settings.aspect_ratio)
        print(f"Find the odd sphere: it is shape {target}")
    else:
        scene, camera = create_default_scene(settings.aspect_ratio)

    sink = ImageBufferSink(settings.width, settings.height)
    renderer = ProgressiveRenderer(scene, camera, sink, settings, rng=rng)
    preview = InteractivePreview(renderer)

    print(f"Rendering {args.scene} scene at {settings.width}x{settings.height}")
    print("  - Arrows move/turn the camera, Shift for speed")
    print("  - P toggles propagation, S saves a PNG, Escape quits")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
