"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when the refraction discriminant is negative

The material randomly chooses between reflection and refraction with the
Schlick reflectance as probability. A ray leaving the medium (its direction
agrees with the outward normal) uses the flipped normal and the inverse
index ratio. Dielectrics never absorb a path.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from anytrace.core.ray import Color, Ray, Vector3, reflect, refract, schlick_fresnel
from anytrace.materials.material import (
    Material,
    albedo_over_pi,
    ambient_term,
    validate_albedo,
)

if TYPE_CHECKING:
    import numpy as np

    from anytrace.geometry.shape import Collision


class Dielectric(Material):
    """Dielectric material.

    Attributes:
        albedo: Tint of the glass (RGB, each component in [0, 1]).
        refraction_index: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    def __init__(
        self,
        albedo: tuple[float, float, float] | Vector3 = (1.0, 1.0, 1.0),
        refraction_index: float = 1.5,
    ) -> None:
        """Create a dielectric material.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            ValueError: If the refraction index is less than 1.0.
        """
        if refraction_index < 1.0:
            raise ValueError(
                f"Index of refraction = {refraction_index} is less than 1.0. "
                "IOR must be >= 1.0 for physically meaningful materials."
            )
        self.albedo = validate_albedo(albedo)
        self.refraction_index = float(refraction_index)
        self._scatter_color = ambient_term(albedo_over_pi(self.albedo))

    def scatter(self, ray: Ray, collision: Collision) -> Color:
        return self._scatter_color

    def refraction(self, ray: Ray, normal: Vector3) -> tuple[Vector3 | None, float]:
        """Refracted direction and the probability of reflecting instead.

        Under total internal reflection the direction is None and the
        probability is 1.0.
        """
        dot_product = ray.direction.dot(normal)
        direction_length = ray.direction.length()
        if dot_product > 0.0:
            # Leaving the medium
            outward_normal = -normal
            ratio = self.refraction_index
            cosine = self.refraction_index * dot_product / direction_length
        else:
            outward_normal = normal
            ratio = 1.0 / self.refraction_index
            cosine = -dot_product / direction_length

        refracted = refract(ray.direction, outward_normal, ratio)
        if refracted is None:
            reflect_prob = 1.0
        else:
            reflect_prob = schlick_fresnel(cosine, self.refraction_index)
        return refracted, reflect_prob

    def bounce(
        self, ray: Ray, collision: Collision, rng: np.random.Generator
    ) -> Ray | None:
        normal = collision.normal()
        reflected = reflect(ray.direction.normalize(), normal)
        refracted, reflect_prob = self.refraction(ray, normal)

        if refracted is None or reflect_prob > rng.random():
            return Ray(collision.position, reflected)
        return Ray(collision.position, refracted)

    def __repr__(self) -> str:
        return (
            f"Dielectric(albedo={tuple(self.albedo)}, "
            f"refraction_index={self.refraction_index})"
        )
