"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

Expanding gives the quadratic a*t^2 + 2*h*t + c = 0 with
    a = dot(direction, direction)
    h = dot(direction, oc)  (half of traditional b)
    c = dot(oc, oc) - radius^2
    oc = origin - center

The near root (-h - sqrt(d)) / a is tried first, then the far root, so a ray
starting inside the sphere still reports the exit point.

Example:
    >>> from anytrace.core.ray import Ray, Vector3
    >>> from anytrace.geometry.sphere import Sphere
    >>> from anytrace.materials.lambertian import Lambertian
    >>> sphere = Sphere(Vector3(0.0, 0.0, -1.0), 0.5, Lambertian(Vector3(0.5, 0.5, 0.5)))
    >>> hit = sphere.intersect(Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0)), 0.001, 100.0)
    >>> round(hit.distance, 6)
    0.5
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from anytrace.core.ray import Ray, Vector3, as_vector
from anytrace.geometry.shape import Collision, Shape

if TYPE_CHECKING:
    from anytrace.materials.material import Material


class Sphere(Shape):
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be positive).
    """

    def __init__(
        self,
        center: tuple[float, float, float] | Vector3,
        radius: float,
        material: Material,
    ) -> None:
        """Create a sphere owning the given material.

        Raises:
            ValueError: If radius is not positive.
        """
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self.center = as_vector(center)
        self.radius = float(radius)
        self._material = material

    @property
    def material(self) -> Material:
        return self._material

    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Collision | None:
        """Test for ray-sphere intersection.

        Args:
            ray: The ray to test. Direction need not be normalized.
            t_min: Minimum t value for a valid hit (exclusive).
            t_max: Maximum t value for a valid hit (exclusive).

        Returns:
            The collision at the smallest valid root, or None. A zero or
            negative discriminant (miss or tangent ray) and a zero-length
            direction are both reported as no intersection.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        if a == 0.0:
            return None
        h = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius
        discriminant = h * h - a * c

        if discriminant <= 0.0:
            return None

        root = math.sqrt(discriminant)
        for t in ((-h - root) / a, (-h + root) / a):
            if t_min < t < t_max:
                return Collision(distance=t, position=ray.point_at(t), shape=self)
        return None

    def normal_at(self, position: Vector3) -> Vector3:
        return (position - self.center) / self.radius

    def texture_coords_at(self, position: Vector3) -> tuple[float, float]:
        """Spherical (longitude, latitude) coordinates in [0, 1]."""
        n = self.normal_at(position).normalize()
        u = 0.5 + math.atan2(n.z, n.x) / math.tau
        v = 0.5 - math.asin(max(-1.0, min(1.0, n.y))) / math.pi
        return u, v

    def __repr__(self) -> str:
        return (
            f"Sphere(center={tuple(self.center)}, radius={self.radius}, "
            f"material={self._material!r})"
        )
