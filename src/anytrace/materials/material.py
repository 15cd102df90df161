"""Material interface and the shared ambient light model.

A material answers two questions about a hit:

    scatter(ray, collision) -> Color
        Deterministic local light contribution of the surface. There is no
        light sampling: every material is lit by one fixed ambient light
        (white, intensity LIGHT_INTENSITY).

    bounce(ray, collision, rng) -> Ray | None
        The next path segment, possibly stochastic. None absorbs the path.

Materials hold no random state; the generator is passed in by the caller.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from anytrace.core.ray import Color, Ray, Vector3, as_vector

if TYPE_CHECKING:
    import numpy as np

    from anytrace.geometry.shape import Collision


# Ambient light shared by all materials
LIGHT_INTENSITY = 3.0
LIGHT_COLOR = Color(1.0, 1.0, 1.0)


class Material(ABC):
    """Base class for surface materials."""

    @abstractmethod
    def scatter(self, ray: Ray, collision: Collision) -> Color:
        """Local color contribution at the collision."""

    @abstractmethod
    def bounce(
        self, ray: Ray, collision: Collision, rng: np.random.Generator
    ) -> Ray | None:
        """Continuation ray, or None if the path terminates."""


def validate_albedo(albedo: tuple[float, float, float] | Vector3) -> Vector3:
    """Check albedo components are in [0, 1] and return them as a Vector3.

    Raises:
        ValueError: If any component is outside [0, 1].
    """
    albedo = as_vector(albedo)
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return albedo


def ambient_term(albedo_over_pi: Vector3) -> Color:
    """Albedo lit by the ambient light, without any angular falloff."""
    return albedo_over_pi.blend(LIGHT_COLOR) * LIGHT_INTENSITY


def albedo_over_pi(albedo: Vector3) -> Vector3:
    return albedo / math.pi
