"""Scene-level ray intersection.

Tests a ray against every shape of a scene and returns the closest hit
together with the index of the shape that produced it.

Only a strictly closer hit replaces the current best, so on an exact tie the
first shape in scene order wins.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from anytrace.core.ray import Ray
from anytrace.geometry.shape import Collision, Shape

# t_min and t_max for ray intersection; t_min also keeps bounced rays from
# re-hitting the surface they start on
T_MIN = 0.001
T_MAX = 100_000.0


class SceneHit(NamedTuple):
    """Closest hit of a ray against a scene.

    Attributes:
        collision: The collision record.
        shape_index: Position of the hit shape in the scene.
    """

    collision: Collision
    shape_index: int


def intersect_scene(
    ray: Ray,
    shapes: Iterable[Shape],
    t_min: float = T_MIN,
    t_max: float = T_MAX,
) -> SceneHit | None:
    """Find the nearest intersection of a ray with a collection of shapes.

    Args:
        ray: The ray to trace.
        shapes: The shapes to test (a Scene or any iterable of shapes).
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The closest hit, or None if the ray hits nothing.
    """
    best: SceneHit | None = None
    for index, shape in enumerate(shapes):
        collision = shape.intersect(ray, t_min, t_max)
        if collision is None:
            continue
        if best is not None and collision.distance >= best.collision.distance:
            continue
        best = SceneHit(collision, index)
    return best
