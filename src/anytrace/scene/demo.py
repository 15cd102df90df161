"""Ready-made scenes for examples and tests.

Each factory returns a ``(scene, camera)`` pair.

Example:
    >>> from anytrace.scene.demo import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> len(scene)
    2
"""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np

from anytrace.camera.pinhole import DEFAULT_ASPECT_RATIO, Camera
from anytrace.materials.dielectric import Dielectric
from anytrace.materials.lambertian import Lambertian
from anytrace.materials.metal import Metal
from anytrace.materials.texture import Texture
from anytrace.scene.manager import Scene
from anytrace.scene.poisson import compute_new_position

logger = logging.getLogger(__name__)

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0
GROUND_COLOR_HEX = 0x007070

SPHERE_RADIUS = 0.5

DEFAULT_LOOKFROM = (-1.8, 1.0, 2.0)
DEFAULT_LOOKAT = (0.0, 0.0, -1.0)

# Field of view whose viewport is 2 * radians(20) units high at unit distance
DEMO_VFOV = math.degrees(2.0 * math.atan(math.radians(20.0)))


def _ground(color: tuple[float, float, float] | None = None) -> Lambertian:
    if color is None:
        return Lambertian.from_hex(GROUND_COLOR_HEX)
    return Lambertian(color)


def create_default_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[Scene, Camera]:
    """One diffuse sphere resting on a large ground sphere.

    Args:
        aspect_ratio: Width / height of the render target.

    Returns:
        Tuple of (scene, camera).
    """
    scene = Scene()
    scene.add_sphere((0.0, 0.0, -1.0), SPHERE_RADIUS, Lambertian((0.7, 0.3, 0.3)))
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, _ground((0.8, 0.8, 0.0)))
    camera = Camera.from_look_at(
        DEFAULT_LOOKFROM, DEFAULT_LOOKAT, vfov=DEMO_VFOV, aspect_ratio=aspect_ratio
    )
    return scene, camera


def create_showcase_scene(
    texture_path: str | Path | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[Scene, Camera]:
    """Glass, metal and a central sphere over a teal ground.

    Args:
        texture_path: Image mapped onto the central sphere. Without one the
            central sphere is plain diffuse.
        aspect_ratio: Width / height of the render target.

    Returns:
        Tuple of (scene, camera).

    Raises:
        FileNotFoundError: If ``texture_path`` does not exist.
    """
    scene = Scene()
    scene.add_sphere((-1.01, 0.0, -1.0), SPHERE_RADIUS, Dielectric((1.0, 0.8, 0.8), 1.05))
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, _ground())
    scene.add_sphere((1.0, 0.0, -1.0), SPHERE_RADIUS, Metal((0.8, 0.8, 0.8), 0.1))
    if texture_path is not None:
        center_material = Texture.load_from_file(texture_path, 1.0)
    else:
        center_material = Lambertian((0.1, 0.2, 0.5))
    scene.add_sphere((0.0, 0.0, -1.0), SPHERE_RADIUS, center_material)

    camera = Camera.from_look_at(
        DEFAULT_LOOKFROM, DEFAULT_LOOKAT, vfov=DEMO_VFOV, aspect_ratio=aspect_ratio
    )
    return scene, camera


def create_poisson_scene(
    rng: np.random.Generator,
    num_shapes: int = 40,
    spacing: float = 3.0,
    nb_attempts: int = 10,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[Scene, Camera, int]:
    """Scatter glass spheres over the ground with Poisson-disk spacing.

    One sphere, chosen at random, is tinted differently from the others so a
    host can ask the user to find it with ``pick_shape``.

    Args:
        rng: Random generator for placement and the odd sphere.
        num_shapes: Maximum shape count, ground included.
        spacing: Minimum distance between sphere centers on the ground plane.
        nb_attempts: Candidates tried around each reference point.
        aspect_ratio: Width / height of the render target.

    Returns:
        Tuple of (scene, camera, target_index) where ``target_index`` is the
        scene index of the odd sphere.

    Raises:
        ValueError: If ``num_shapes`` is smaller than 4.
    """
    if num_shapes < 4:
        raise ValueError(f"num_shapes must be at least 4, got {num_shapes}")

    scene = Scene()
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, _ground())
    target_index = int(rng.integers(1, num_shapes - 2))

    positions: list[tuple[float, float]] = [(0.0, 5.0), (0.0, 0.0)]
    index = 0
    while index < len(positions) and len(scene) < num_shapes:
        new_position = compute_new_position(
            positions, positions[index], spacing, nb_attempts, rng
        )
        if new_position is None:
            index += 1
            continue
        if len(scene) == target_index:
            material = Dielectric((1.0, 0.6, 0.6), 1.05)
        else:
            material = Dielectric((0.0, 0.6, 1.0), 1.5)
        scene.add_sphere((new_position[0], 0.0, new_position[1]), SPHERE_RADIUS, material)
        positions.append(new_position)

    logger.debug("Poisson scene generated with %d shapes", len(scene))
    camera = Camera.from_look_at(
        (0.0, 6.0, 16.0), (0.0, 0.0, 0.0), vfov=45.0, aspect_ratio=aspect_ratio
    )
    return scene, camera, target_index
