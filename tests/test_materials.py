"""Tests for Lambertian, Metal and Dielectric materials.

Tests cover:
- Parameter validation
- Local color (scatter) under the fixed ambient light
- Bounce directions: diffuse, mirror, fuzzed, refracted and reflected
"""

import math

import numpy as np
import pytest

from anytrace.core.ray import Ray, Vector3
from anytrace.geometry.shape import Collision
from anytrace.geometry.sphere import Sphere
from anytrace.materials.dielectric import Dielectric
from anytrace.materials.lambertian import Lambertian
from anytrace.materials.material import LIGHT_INTENSITY
from anytrace.materials.metal import Metal


def hit_from_above(material):
    """Collision at the top of a unit sphere, hit by a ray coming straight down."""
    sphere = Sphere((0.0, 0.0, 0.0), 1.0, material)
    ray = Ray(Vector3(0.0, 5.0, 0.0), Vector3(0.0, -1.0, 0.0))
    collision = sphere.intersect(ray, 0.001, 100.0)
    assert collision is not None
    return ray, collision


class TestLambertian:
    """Tests for the diffuse material."""

    def test_rejects_out_of_range_albedo(self):
        """Albedo components must be in [0, 1]."""
        with pytest.raises(ValueError, match="energy conservation"):
            Lambertian((1.2, 0.5, 0.5))
        with pytest.raises(ValueError):
            Lambertian((0.5, -0.1, 0.5))

    def test_scatter_is_albedo_over_pi_times_light(self):
        """Lit head-on, scatter = albedo / pi * 3."""
        ray, collision = hit_from_above(Lambertian((0.5, 0.25, 1.0)))
        color = collision.scatter(ray)
        assert color.x == pytest.approx(0.5 / math.pi * LIGHT_INTENSITY)
        assert color.y == pytest.approx(0.25 / math.pi * LIGHT_INTENSITY)
        assert color.z == pytest.approx(1.0 / math.pi * LIGHT_INTENSITY)

    def test_scatter_with_fixed_light_direction(self):
        """A light behind the surface contributes nothing."""
        ray, collision = hit_from_above(Lambertian((0.5, 0.5, 0.5), light_direction=(0.0, -1.0, 0.0)))
        assert collision.scatter(ray) == Vector3(0.0, 0.0, 0.0)

    def test_from_hex(self):
        """Hex construction converts bytes to [0, 1]."""
        material = Lambertian.from_hex(0xFF8000)
        assert material.albedo.x == pytest.approx(1.0)
        assert material.albedo.y == pytest.approx(128 / 255)
        assert material.albedo.z == 0.0

    def test_bounce_leaves_from_hit_point_into_upper_hemisphere(self, rng):
        """Diffuse bounces start at the hit and never point into the surface."""
        ray, collision = hit_from_above(Lambertian((0.5, 0.5, 0.5)))
        for _ in range(100):
            bounced = collision.bounce(ray, rng)
            assert bounced is not None
            assert bounced.origin == collision.position
            assert bounced.direction.dot(collision.normal()) >= 0.0


class TestMetal:
    """Tests for the metal material."""

    def test_rejects_bad_fuzz(self):
        """Fuzziness must be in [0, 1]."""
        with pytest.raises(ValueError, match="Fuzziness"):
            Metal((0.8, 0.8, 0.8), 1.5)
        with pytest.raises(ValueError):
            Metal((0.8, 0.8, 0.8), -0.1)

    def test_scatter_is_constant(self):
        """Metal scatter ignores geometry."""
        ray, collision = hit_from_above(Metal((0.8, 0.6, 0.2), 0.0))
        color = collision.scatter(ray)
        assert color.x == pytest.approx(0.8 / math.pi * LIGHT_INTENSITY)
        assert color.z == pytest.approx(0.2 / math.pi * LIGHT_INTENSITY)

    def test_mirror_reflection_leaves_surface(self, rng):
        """Zero fuzz reflects exactly and points away from the surface."""
        sphere = Sphere((0.0, 0.0, 0.0), 1.0, Metal((0.8, 0.8, 0.8), 0.0))
        ray = Ray(Vector3(-3.0, 3.0, 0.0), Vector3(1.0, -1.0, 0.0))
        collision = sphere.intersect(ray, 0.001, 100.0)
        assert collision is not None
        bounced = collision.bounce(ray, rng)
        assert bounced is not None
        normal = collision.normal()
        assert bounced.direction.dot(normal) > 0.0
        incoming = ray.direction.normalize()
        expected = incoming - normal * (2.0 * incoming.dot(normal))
        assert bounced.direction.x == pytest.approx(expected.x)
        assert bounced.direction.y == pytest.approx(expected.y)

    def test_mirror_reflection_is_deterministic(self):
        """Without fuzz, the generator does not influence the result."""
        ray, collision = hit_from_above(Metal((0.8, 0.8, 0.8), 0.0))
        a = collision.bounce(ray, np.random.default_rng(1))
        b = collision.bounce(ray, np.random.default_rng(2))
        assert a == b
        assert a.direction == Vector3(0.0, 1.0, 0.0)

    def test_fuzzy_reflection_can_be_absorbed(self, rng):
        """Grazing fuzzy reflections sometimes go below the surface."""
        sphere = Sphere((0.0, 0.0, 0.0), 1.0, Metal((0.8, 0.8, 0.8), 1.0))
        # Almost tangent ray hitting near the silhouette
        ray = Ray(Vector3(-5.0, 0.99, 0.0), Vector3(1.0, 0.0, 0.0))
        collision = sphere.intersect(ray, 0.001, 100.0)
        assert collision is not None
        results = [collision.bounce(ray, rng) for _ in range(200)]
        assert any(result is None for result in results)
        for result in results:
            if result is not None:
                assert result.direction.dot(collision.normal()) >= 0.0


class TestDielectric:
    """Tests for the dielectric material."""

    def test_rejects_ior_below_one(self):
        """Indices below 1 are rejected."""
        with pytest.raises(ValueError, match="less than 1.0"):
            Dielectric((1.0, 1.0, 1.0), 0.9)

    def test_never_absorbs(self, rng):
        """Every bounce produces a ray."""
        ray, collision = hit_from_above(Dielectric((1.0, 1.0, 1.0), 1.5))
        for _ in range(100):
            assert collision.bounce(ray, rng) is not None

    def test_entering_ray_mostly_refracts(self, rng):
        """At normal incidence the ray usually continues into the sphere."""
        ray, collision = hit_from_above(Dielectric((1.0, 1.0, 1.0), 1.5))
        _, probability = collision.shape.material.refraction(ray, collision.normal())
        assert probability == pytest.approx(((1.0 - 1.5) / (1.0 + 1.5)) ** 2)
        downward = sum(
            1 for _ in range(200) if collision.bounce(ray, rng).direction.y < 0.0
        )
        assert downward > 150

    def test_total_internal_reflection_always_reflects(self, rng):
        """A grazing ray leaving the glass is always reflected."""
        material = Dielectric((1.0, 1.0, 1.0), 1.5)
        sphere = Sphere((0.0, 0.0, 0.0), 1.0, material)
        collision = Collision(distance=1.0, position=Vector3(0.0, 1.0, 0.0), shape=sphere)
        ray = Ray(Vector3(-1.0, 0.9, 0.0), Vector3(1.0, 0.1, 0.0))

        refracted, probability = material.refraction(ray, collision.normal())
        assert refracted is None
        assert probability == 1.0
        unit = ray.direction.normalize()
        for _ in range(50):
            bounced = collision.bounce(ray, rng)
            assert bounced is not None
            assert bounced.direction.x == pytest.approx(unit.x)
            assert bounced.direction.y == pytest.approx(-unit.y)
