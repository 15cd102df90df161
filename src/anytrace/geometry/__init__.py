"""Geometry module for shape primitives.

Components:
    shape: Shape base class and the Collision record
    sphere: Analytic ray-sphere intersection
"""

from .shape import Collision, Shape
from .sphere import Sphere

__all__ = [
    "Shape",
    "Collision",
    "Sphere",
]
