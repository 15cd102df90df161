"""Pytest configuration for anytrace tests.

Shared fixtures: a seeded random generator, small scenes and cameras, and a
sink that records every pixel update.
"""

from __future__ import annotations

import numpy as np
import pytest

from anytrace.camera.pinhole import Camera
from anytrace.core.pixel_cache import PixelColor, PixelPosition
from anytrace.core.ray import Vector3
from anytrace.materials.lambertian import Lambertian
from anytrace.scene.manager import Scene


class RecordingSink:
    """PixelSink that keeps every update it receives."""

    def __init__(self) -> None:
        self.pixels: list[tuple[PixelPosition, PixelColor]] = []
        self.invalidations = 0
        self.sizes: list[tuple[int, int]] = []

    def set_pixel(self, position: PixelPosition, color: PixelColor) -> None:
        self.pixels.append((position, color))

    def invalidate_pixels(self) -> None:
        self.pixels.clear()
        self.invalidations += 1

    def resize(self, width: int, height: int) -> None:
        self.sizes.append((width, height))


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator so stochastic tests are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def single_sphere_scene() -> Scene:
    """One diffuse sphere of radius 0.5 at (0, 0, -1)."""
    scene = Scene()
    scene.add_sphere(Vector3(0.0, 0.0, -1.0), 0.5, Lambertian((0.5, 0.5, 0.5)))
    return scene


@pytest.fixture
def front_camera() -> Camera:
    """Camera on the +z axis looking at (0, 0, -1); the sphere fits inside the view."""
    return Camera.from_look_at((0.0, 0.0, 2.0), (0.0, 0.0, -1.0), aspect_ratio=2.0)
