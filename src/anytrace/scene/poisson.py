"""Poisson-disk style placement of points on a plane.

New points are tried on a circle just outside ``radius`` around a reference
point, starting from a random angle and stepping evenly around the circle.
The first candidate farther than the radius from every existing point wins.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

# Added to the radius so a new point never touches its reference point
RADIUS_EPSILON = 0.01


def distance_squared(p1: tuple[float, float], p2: tuple[float, float]) -> float:
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    return dx * dx + dy * dy


def compute_new_position(
    existing_points: Sequence[tuple[float, float]],
    near_point: tuple[float, float],
    radius: float,
    nb_attempts: int,
    rng: np.random.Generator,
) -> tuple[float, float] | None:
    """Find a point at distance ``radius`` from ``near_point`` clear of others.

    Args:
        existing_points: Points the new one must stay away from.
        near_point: Center of the candidate circle.
        radius: Minimum spacing between points.
        nb_attempts: Number of evenly spaced angles to try.
        rng: Random generator for the starting angle.

    Returns:
        The new point, or None if every candidate collides.
    """
    seed = rng.random()
    radius_squared = radius * radius
    spacing = radius + RADIUS_EPSILON
    for attempt in range(nb_attempts):
        theta = math.tau * (seed + attempt / nb_attempts)
        candidate = (
            near_point[0] + spacing * math.cos(theta),
            near_point[1] + spacing * math.sin(theta),
        )
        if all(
            distance_squared(point, candidate) >= radius_squared
            for point in existing_points
        ):
            return candidate
    return None
