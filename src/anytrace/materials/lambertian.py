"""Lambertian (ideal diffuse) material implementation.

The Lambertian BRDF is constant for all directions:
    f_r(wi, wo) = albedo / pi

The local contribution is that BRDF lit by the fixed ambient light:
    scatter = albedo / pi * light_color * light_intensity * max(0, n . l)

By default the light direction follows the surface normal, so the cosine
factor is 1 everywhere. This is a shading shortcut, not a physically
normalized estimator.

The bounce direction is normal + random_unit_vector, which is distributed
proportionally to cos(theta) around the normal.

Example:
    >>> from anytrace.materials.lambertian import Lambertian
    >>> teal = Lambertian.from_hex(0x007070)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from anytrace.core.ray import Color, Ray, Vector3, as_vector, random_unit_vector
from anytrace.materials.material import (
    LIGHT_COLOR,
    LIGHT_INTENSITY,
    Material,
    albedo_over_pi,
    validate_albedo,
)

if TYPE_CHECKING:
    import numpy as np

    from anytrace.geometry.shape import Collision


class Lambertian(Material):
    """Lambertian (ideal diffuse) material.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        light_direction: Fixed direction of the ambient light, or None to
            light every point head-on along its normal.
    """

    def __init__(
        self,
        albedo: tuple[float, float, float] | Vector3,
        light_direction: tuple[float, float, float] | Vector3 | None = None,
    ) -> None:
        """Create a diffuse material.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        self.albedo = validate_albedo(albedo)
        self._albedo_over_pi = albedo_over_pi(self.albedo)
        self.light_direction = (
            None if light_direction is None else as_vector(light_direction).normalize()
        )

    @classmethod
    def from_hex(cls, color: int) -> Lambertian:
        """Create a diffuse material from a 0xRRGGBB color."""
        return cls(Vector3.from_hex(color))

    def scatter(self, ray: Ray, collision: Collision) -> Color:
        normal = collision.normal()
        light_vector = normal if self.light_direction is None else self.light_direction
        cosine = max(0.0, normal.dot(light_vector))
        return self._albedo_over_pi.blend(LIGHT_COLOR) * (LIGHT_INTENSITY * cosine)

    def bounce(
        self, ray: Ray, collision: Collision, rng: np.random.Generator
    ) -> Ray | None:
        return Ray(collision.position, collision.normal() + random_unit_vector(rng))

    def __repr__(self) -> str:
        return f"Lambertian(albedo={tuple(self.albedo)})"
