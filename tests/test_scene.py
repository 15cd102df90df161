"""Tests for the scene container, ray-scene intersection and demo scenes."""

import numpy as np
import pytest

from anytrace.camera.pinhole import Camera
from anytrace.core.ray import Ray, Vector3
from anytrace.geometry.sphere import Sphere
from anytrace.materials.dielectric import Dielectric
from anytrace.materials.lambertian import Lambertian
from anytrace.scene.demo import (
    create_default_scene,
    create_poisson_scene,
    create_showcase_scene,
)
from anytrace.scene.intersection import T_MAX, T_MIN, intersect_scene
from anytrace.scene.manager import Scene
from anytrace.scene.poisson import compute_new_position, distance_squared


def gray():
    return Lambertian((0.5, 0.5, 0.5))


class TestScene:
    """Tests for the Scene container."""

    def test_add_returns_indices(self):
        """Shapes are indexed in insertion order."""
        scene = Scene()
        assert scene.add_sphere((0.0, 0.0, -1.0), 0.5, gray()) == 0
        assert scene.add_sphere((1.0, 0.0, -1.0), 0.5, gray()) == 1
        assert len(scene) == 2
        assert isinstance(scene[1], Sphere)
        assert [shape.center.x for shape in scene] == [0.0, 1.0]

    def test_rejects_shared_material(self):
        """Each shape must own its own material instance."""
        scene = Scene()
        material = gray()
        scene.add_sphere((0.0, 0.0, -1.0), 0.5, material)
        with pytest.raises(ValueError, match="own its material"):
            scene.add_sphere((1.0, 0.0, -1.0), 0.5, material)

    def test_rejects_non_shapes(self):
        """Only Shape instances can be added."""
        with pytest.raises(TypeError):
            Scene().add_shape("sphere")

    def test_validate_empty(self):
        """An empty scene is a configuration error."""
        with pytest.raises(ValueError, match="empty"):
            Scene().validate()

    def test_clear(self):
        """clear removes every shape."""
        scene = Scene([Sphere((0.0, 0.0, 0.0), 1.0, gray())])
        scene.clear()
        assert len(scene) == 0


class TestIntersectScene:
    """Tests for nearest-hit search."""

    def test_reference_bounds(self):
        """Reference t range."""
        assert T_MIN == 0.001
        assert T_MAX == 100_000.0

    def test_nearest_hit_wins(self):
        """The closest shape is reported regardless of order."""
        scene = Scene()
        scene.add_sphere((0.0, 0.0, -5.0), 0.5, gray())
        scene.add_sphere((0.0, 0.0, -2.0), 0.5, gray())
        hit = intersect_scene(Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0)), scene)
        assert hit is not None
        assert hit.shape_index == 1
        assert hit.collision.distance == pytest.approx(1.5)

    def test_miss(self):
        """No hit returns None."""
        scene = Scene([Sphere((0.0, 0.0, -2.0), 0.5, gray())])
        assert intersect_scene(Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0)), scene) is None

    def test_tie_keeps_first_shape(self):
        """Identical spheres at the same distance resolve to the first one."""
        scene = Scene()
        scene.add_sphere((0.0, 0.0, -2.0), 0.5, gray())
        scene.add_sphere((0.0, 0.0, -2.0), 0.5, gray())
        hit = intersect_scene(Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0)), scene)
        assert hit.shape_index == 0

    def test_self_intersection_is_skipped(self):
        """A ray starting on a surface does not re-hit it at t ~ 0."""
        scene = Scene([Sphere((0.0, 0.0, 0.0), 1.0, gray())])
        ray = Ray(Vector3(0.0, 1.0, 0.0), Vector3(0.0, 1.0, 0.0))
        assert intersect_scene(ray, scene) is None

    def test_accepts_plain_list(self):
        """Any iterable of shapes can be searched."""
        shapes = [Sphere((0.0, 0.0, -2.0), 0.5, gray())]
        assert intersect_scene(Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0)), shapes) is not None


class TestPoisson:
    """Tests for Poisson-disk placement."""

    def test_new_point_is_spaced(self, rng):
        """The candidate sits just outside the radius around the reference."""
        point = compute_new_position([], (0.0, 0.0), 3.0, 10, rng)
        assert point is not None
        assert distance_squared((0.0, 0.0), point) == pytest.approx(3.01**2)

    def test_respects_existing_points(self, rng):
        """Candidates too close to other points are rejected."""
        existing = [(10.0, 0.0), (10.0, 5.0)]
        for _ in range(20):
            point = compute_new_position(existing, (0.0, 0.0), 3.0, 10, rng)
            assert point is not None
            for other in existing:
                assert distance_squared(other, point) >= 3.0**2

    def test_returns_none_when_crowded(self, rng):
        """A reference point ringed by neighbours yields no new point."""
        ring = [(3.01 * np.cos(a), 3.01 * np.sin(a)) for a in np.linspace(0.0, 2 * np.pi, 24, endpoint=False)]
        assert compute_new_position(ring, (0.0, 0.0), 3.0, 10, rng) is None


class TestDemoScenes:
    """Tests for the ready-made scenes."""

    def test_default_scene(self):
        """Diffuse sphere over a ground sphere."""
        scene, camera = create_default_scene()
        assert len(scene) == 2
        assert isinstance(camera, Camera)
        assert scene[1].radius == 100.0

    def test_demo_camera_framing(self):
        """Demo cameras see a viewport 2 * radians(20) high at unit distance."""
        _, camera = create_default_scene(aspect_ratio=2.0)
        height = camera.vertical.length()
        assert height == pytest.approx(2.0 * np.radians(20.0))
        assert camera.horizontal.length() == pytest.approx(2.0 * height)

    def test_showcase_scene_without_texture(self):
        """Four spheres with glass and metal."""
        scene, _ = create_showcase_scene()
        assert len(scene) == 4
        assert isinstance(scene[0].material, Dielectric)

    def test_showcase_missing_texture(self, tmp_path):
        """A missing texture file propagates FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            create_showcase_scene(tmp_path / "missing.jpg")

    def test_poisson_scene(self, rng):
        """Spheres are spread apart and the odd one is tinted differently."""
        scene, _, target = create_poisson_scene(rng, num_shapes=12)
        assert 2 <= len(scene) <= 12
        centers = [(shape.center.x, shape.center.z) for shape in list(scene)[1:]]
        for i, a in enumerate(centers):
            for b in centers[i + 1 :]:
                assert distance_squared(a, b) >= 3.0**2
        if target < len(scene):
            assert scene[target].material.refraction_index == 1.05

    def test_poisson_scene_rejects_tiny_counts(self, rng):
        """At least four shapes are needed to place the odd sphere."""
        with pytest.raises(ValueError):
            create_poisson_scene(rng, num_shapes=3)
