"""Scene module.

Components:
    manager: Scene container (ordered list of shapes)
    intersection: Nearest hit of a ray against a scene
    demo: Ready-made scenes
    poisson: Poisson-disk point placement used by the scattered scene
"""

from .demo import create_default_scene, create_poisson_scene, create_showcase_scene
from .intersection import T_MAX, T_MIN, SceneHit, intersect_scene
from .manager import Scene

__all__ = [
    "Scene",
    "SceneHit",
    "intersect_scene",
    "T_MIN",
    "T_MAX",
    "create_default_scene",
    "create_showcase_scene",
    "create_poisson_scene",
]
