"""Metal (specular reflective) material implementation.

Perfect metals (fuzziness=0) produce mirror reflections, rougher metals
perturb the reflected direction within a sphere scaled by the fuzziness.

The reflection formula is:
    R = I - 2(I . N)N

where I is the normalized incident direction and N is the surface normal.
A perturbed direction that ends up below the surface is absorbed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from anytrace.core.ray import Color, Ray, Vector3, random_unit_vector, reflect
from anytrace.materials.material import (
    Material,
    albedo_over_pi,
    ambient_term,
    validate_albedo,
)

if TYPE_CHECKING:
    import numpy as np

    from anytrace.geometry.shape import Collision


class Metal(Material):
    """Metal material.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzziness: Surface roughness in [0, 1]. 0 = perfect mirror.
    """

    def __init__(
        self,
        albedo: tuple[float, float, float] | Vector3 = (0.8, 0.8, 0.8),
        fuzziness: float = 0.0,
    ) -> None:
        """Create a metal material.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
            ValueError: If fuzziness is outside [0, 1].
        """
        if fuzziness < 0.0 or fuzziness > 1.0:
            raise ValueError(
                f"Fuzziness = {fuzziness} is outside [0, 1]. "
                "Fuzziness must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )
        self.albedo = validate_albedo(albedo)
        self.fuzziness = float(fuzziness)
        self._scatter_color = ambient_term(albedo_over_pi(self.albedo))

    def scatter(self, ray: Ray, collision: Collision) -> Color:
        return self._scatter_color

    def bounce(
        self, ray: Ray, collision: Collision, rng: np.random.Generator
    ) -> Ray | None:
        normal = collision.normal()
        direction = reflect(ray.direction.normalize(), normal)
        if self.fuzziness > 0.0:
            direction = direction + random_unit_vector(rng) * self.fuzziness

        # Fuzz pushed the reflection into the surface: absorbed
        if direction.dot(normal) < 0.0:
            return None
        return Ray(collision.position, direction)

    def __repr__(self) -> str:
        return f"Metal(albedo={tuple(self.albedo)}, fuzziness={self.fuzziness})"
