"""Scene container holding the shapes of a render.

A Scene is an ordered list of shapes. Order does not affect the image (the
nearest hit wins) but it defines the shape indices reported by picking.
Shapes are tested exhaustively; there is no spatial index.

The scene must not be edited while a render pass is in progress. Hosts that
change the scene call ``ProgressiveRenderer.invalidate()`` afterwards.

Example:
    >>> from anytrace.scene.manager import Scene
    >>> from anytrace.geometry.sphere import Sphere
    >>> from anytrace.materials.lambertian import Lambertian
    >>> from anytrace.materials.metal import Metal
    >>> scene = Scene()
    >>> scene.add_sphere((0, 0, -1), 0.5, Lambertian((0.8, 0.3, 0.3)))
    0
    >>> scene.add_sphere((1, 0, -1), 0.5, Metal((0.8, 0.6, 0.2), fuzziness=0.3))
    1
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from anytrace.geometry.shape import Shape
from anytrace.geometry.sphere import Sphere

if TYPE_CHECKING:
    from anytrace.core.ray import Vector3
    from anytrace.materials.material import Material


class Scene:
    """Ordered collection of shapes.

    Attributes:
        shapes: The shapes in insertion order.
    """

    def __init__(self, shapes: Iterable[Shape] = ()) -> None:
        self.shapes: list[Shape] = []
        for shape in shapes:
            self.add_shape(shape)

    def add_shape(self, shape: Shape) -> int:
        """Append a shape and return its index.

        Raises:
            TypeError: If ``shape`` is not a Shape.
            ValueError: If the shape's material is already owned by another
                shape in this scene.
        """
        if not isinstance(shape, Shape):
            raise TypeError(f"Expected a Shape, got {type(shape).__name__}")
        for existing in self.shapes:
            if existing.material is shape.material:
                raise ValueError(
                    "Each shape must own its material; create a separate "
                    "material instance for every shape"
                )
        self.shapes.append(shape)
        return len(self.shapes) - 1

    def add_sphere(
        self,
        center: tuple[float, float, float] | Vector3,
        radius: float,
        material: Material,
    ) -> int:
        """Create a sphere with the given material and add it to the scene."""
        return self.add_shape(Sphere(center, radius, material))

    def clear(self) -> None:
        """Remove every shape."""
        self.shapes.clear()

    def validate(self) -> None:
        """Check the scene can be rendered.

        Raises:
            ValueError: If the scene is empty.
        """
        if not self.shapes:
            raise ValueError("Scene is empty; add at least one shape before rendering")

    def __len__(self) -> int:
        return len(self.shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self.shapes)

    def __getitem__(self, index: int) -> Shape:
        return self.shapes[index]

    def __repr__(self) -> str:
        return f"Scene({len(self.shapes)} shapes)"
