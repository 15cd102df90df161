"""Shape interface and collision record.

Every primitive in a scene implements :class:`Shape`. A shape owns its
geometry and exclusively owns one material; two shapes that look alike still
hold two material instances.

A :class:`Collision` is the transient result of a successful intersection. It
borrows the shape it hit and only lives while that hit is being shaded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from anytrace.core.ray import Color, Ray, Vector3

if TYPE_CHECKING:
    import numpy as np

    from anytrace.materials.material import Material


class Shape(ABC):
    """A geometric primitive that can be intersected by rays."""

    @abstractmethod
    def intersect(self, ray: Ray, t_min: float, t_max: float) -> Collision | None:
        """Find the nearest hit with parametric distance in (t_min, t_max).

        Returns None for misses, degenerate configurations and hits outside
        the interval.
        """

    @abstractmethod
    def normal_at(self, position: Vector3) -> Vector3:
        """Outward unit normal at a point on the surface."""

    @abstractmethod
    def texture_coords_at(self, position: Vector3) -> tuple[float, float]:
        """Surface (u, v) parametrization at a point on the surface."""

    @property
    @abstractmethod
    def material(self) -> Material:
        """The material owned by this shape."""


@dataclass(frozen=True)
class Collision:
    """A ray-shape hit.

    Attributes:
        distance: Parametric distance along the ray to the hit.
        position: World-space hit position.
        shape: The shape that was hit.
    """

    distance: float
    position: Vector3
    shape: Shape

    def normal(self) -> Vector3:
        return self.shape.normal_at(self.position)

    def texture_coords(self) -> tuple[float, float]:
        return self.shape.texture_coords_at(self.position)

    def scatter(self, ray: Ray) -> Color:
        """Local color contribution of the hit surface."""
        return self.shape.material.scatter(ray, self)

    def bounce(self, ray: Ray, rng: np.random.Generator) -> Ray | None:
        """Continuation ray, or None when the path ends here."""
        return self.shape.material.bounce(ray, self, rng)
