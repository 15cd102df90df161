"""Light transport for the progressive path tracer.

This module follows camera rays through the scene. At every hit the surface
material contributes a local color (``scatter``) and optionally a continuation
ray (``bounce``). Colors along a path are blended multiplicatively:

    color(ray, depth) = background(ray)                       if depth == 0
                      = background(ray)                       if ray misses
                      = scatter                               if bounce is None
                      = scatter * color(bounce, depth - 1)    otherwise

Exhausting the depth returns the background color rather than black, which
keeps deep glass paths from turning into dark speckles.

The recursion is unrolled into a loop that carries a throughput multiplier,
so deep paths do not consume Python stack frames.

Example:
    >>> import numpy as np
    >>> from anytrace.camera.pinhole import Camera
    >>> from anytrace.core.integrator import sample_pixel
    >>> from anytrace.scene.demo import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> rng = np.random.default_rng(42)
    >>> color_sum = sample_pixel(camera, scene, 10, 10, 64, 36, 4, rng=rng)
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from anytrace.camera.pinhole import Camera
from anytrace.core.ray import ONE, ZERO, Color, Ray
from anytrace.geometry.shape import Shape
from anytrace.scene.intersection import intersect_scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 50

# Sky gradient endpoints
SKY_HORIZON_COLOR = Color(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = Color(0.5, 0.7, 1.0)


def background_color(ray: Ray) -> Color:
    """Sky gradient from white (looking down) to light blue (looking up).

    Args:
        ray: The escaping ray. Only its direction is used.

    Returns:
        The linear background radiance for this direction.
    """
    t = 0.5 * (ray.direction.normalize().y + 1.0)
    return SKY_HORIZON_COLOR * (1.0 - t) + SKY_ZENITH_COLOR * t


def project_ray(
    ray: Ray,
    scene: Sequence[Shape],
    max_depth: int = MAX_DEPTH,
    *,
    rng: np.random.Generator,
) -> Color:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        scene: The shapes to intersect (a Scene or any sequence of shapes).
        max_depth: Maximum number of surface interactions.
        rng: Random generator used by stochastic bounces.

    Returns:
        The estimated linear radiance (RGB) for this path sample.
    """
    throughput = ONE
    for _ in range(max_depth):
        hit = intersect_scene(ray, scene)
        if hit is None:
            return throughput.blend(background_color(ray))

        collision = hit.collision
        throughput = throughput.blend(collision.scatter(ray))
        next_ray = collision.bounce(ray, rng)
        if next_ray is None:
            # Absorbed or emissive terminal surface
            return throughput
        ray = next_ray

    return throughput.blend(background_color(ray))


def pixel_offsets(
    x: float, y: float, width: int, height: int
) -> tuple[float, float]:
    """Convert (sub)pixel coordinates to normalized viewport offsets.

    Pixel x = width - 1 maps to offset 1.0 so the last column reaches the
    viewport edge.
    """
    return x / max(width - 1, 1), y / max(height - 1, 1)


def sample_pixel(
    camera: Camera,
    scene: Sequence[Shape],
    x: int,
    y: int,
    width: int,
    height: int,
    samples: int = 1,
    max_depth: int = MAX_DEPTH,
    *,
    rng: np.random.Generator,
) -> Color:
    """Trace jittered rays through one pixel and sum their radiance.

    Args:
        camera: The camera snapshot to generate rays from.
        scene: The shapes to intersect.
        x: Pixel column (0 = left).
        y: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Number of rays to trace.
        max_depth: Maximum bounces per ray.
        rng: Random generator for jitter and bounces.

    Returns:
        The unnormalized sum of ``samples`` radiance estimates.
    """
    total = ZERO
    for jitter_x, jitter_y in rng.random((samples, 2)):
        offset_x, offset_y = pixel_offsets(x + jitter_x, y + jitter_y, width, height)
        ray = camera.emit_ray_at(offset_x, offset_y)
        total = total + project_ray(ray, scene, max_depth, rng=rng)
    return total


def pick_shape(
    camera: Camera,
    scene: Sequence[Shape],
    x: float,
    y: float,
    width: int,
    height: int,
) -> int | None:
    """Find which shape is visible through a pixel.

    Args:
        camera: The camera to cast from.
        scene: The shapes to intersect.
        x: Pixel column (0 = left), may be fractional.
        y: Pixel row (0 = bottom), may be fractional.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Index of the nearest shape under the pixel, or None for background.
    """
    offset_x, offset_y = pixel_offsets(x, y, width, height)
    hit = intersect_scene(camera.emit_ray_at(offset_x, offset_y), scene)
    return None if hit is None else hit.shape_index
