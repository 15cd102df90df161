"""Vector and ray primitives for CPU path tracing.

This module provides the immutable Vector3 value type, the Ray structure and
the vector utility functions shared by shapes, materials and the integrator.

Random sampling helpers take an explicit ``numpy.random.Generator`` so that
every stochastic decision of a render can be reproduced from a single seed.

Example:
    >>> from anytrace.core.ray import Ray, Vector3
    >>> ray = Ray(origin=Vector3(0.0, 0.0, 0.0), direction=Vector3(0.0, 0.0, -1.0))
    >>> ray.point_at(5.0)
    Vector3(x=0.0, y=0.0, z=-5.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np


class Vector3(NamedTuple):
    """An immutable 3D vector of float64 components.

    Used for positions, directions and linear (not gamma corrected) radiance.
    Arithmetic operators are component-wise for vectors; ``*`` and ``/``
    with a scalar scale every component.
    """

    x: float
    y: float
    z: float

    def __add__(self, other: Vector3) -> Vector3:  # type: ignore[override]
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:  # type: ignore[override]
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other: Vector3) -> float:
        """Compute the dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Compute the cross product self x other."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        """Squared Euclidean length (avoids the square root)."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.length_squared())

    def normalize(self) -> Vector3:
        """Return a unit vector in the same direction.

        A zero-length vector is returned unchanged rather than producing NaNs.
        """
        length = self.length()
        if length == 0.0:
            return self
        return Vector3(self.x / length, self.y / length, self.z / length)

    def blend(self, other: Vector3) -> Vector3:
        """Component-wise product, used to tint light by a surface color."""
        return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)

    @classmethod
    def from_hex(cls, color: int) -> Vector3:
        """Build a [0, 1] color from a 0xRRGGBB integer."""
        return cls(
            ((color & 0xFF0000) >> 16) / 255.0,
            ((color & 0x00FF00) >> 8) / 255.0,
            (color & 0x0000FF) / 255.0,
        )


# Radiance and albedo share the vector representation
Color = Vector3

ZERO = Vector3(0.0, 0.0, 0.0)
ONE = Vector3(1.0, 1.0, 1.0)


@dataclass(frozen=True)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. It is not required to be
            unit length; intersection code accounts for its magnitude.
    """

    origin: Vector3
    direction: Vector3

    def point_at(self, t: float) -> Vector3:
        """Compute the point ``origin + direction * t``."""
        return self.origin + self.direction * t


def as_vector(value: tuple[float, float, float] | Vector3) -> Vector3:
    """Coerce a 3-tuple (or NumPy array) to a float Vector3."""
    return Vector3(float(value[0]), float(value[1]), float(value[2]))


# =============================================================================
# Reflection and Refraction
# =============================================================================


def reflect(incident: Vector3, normal: Vector3) -> Vector3:
    """Reflect an incident vector about a normal: ``r - 2(r.n)n``.

    Args:
        incident: The incoming direction vector.
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - normal * (2.0 * incident.dot(normal))


def refract(incident: Vector3, normal: Vector3, eta: float) -> Vector3 | None:
    """Refract an incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction (any length, normalized internally).
        normal: The surface normal facing the incident side.
        eta: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction, or None when the discriminant is negative
        (total internal reflection).
    """
    unit = incident.normalize()
    dt = unit.dot(normal)
    discriminant = 1.0 - eta * eta * (1.0 - dt * dt)
    if discriminant < 0.0:
        return None
    return (unit - normal * dt) * eta - normal * math.sqrt(discriminant)


def schlick_fresnel(cosine: float, ref_idx: float) -> float:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Refractive index (or index ratio).

    Returns:
        The approximate reflectance coefficient.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


def random_unit_vector(rng: np.random.Generator) -> Vector3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Samples an azimuth in [0, 2pi) and a height in [-1, 1), which is
    area-uniform on the unit sphere (Archimedes' hat-box theorem).

    Args:
        rng: The random generator to draw from.

    Returns:
        A random unit vector.
    """
    a = rng.uniform(0.0, math.tau)
    z = rng.uniform(-1.0, 1.0)
    r = math.sqrt(1.0 - z * z)
    return Vector3(r * math.cos(a), r * math.sin(a), z)

