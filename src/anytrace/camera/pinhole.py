"""Pinhole camera model for perspective projection ray generation.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

A Camera is an immutable value. ``move_camera`` and ``rotate`` return a new
camera recomputed from the moved look-from/look-at points, so any render
still holding the previous camera keeps producing consistent rays.

Example:
    >>> from anytrace.camera.pinhole import Camera
    >>> camera = Camera.from_look_at((-1.8, 1.0, 2.0), (0.0, 0.0, -1.0))
    >>> ray = camera.emit_ray_at(0.5, 0.5)  # Ray through image center
    >>> moved = camera.move_camera((0.0, 0.0, 0.5))  # Half a unit forward
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from anytrace.core.ray import Ray, Vector3, as_vector

# Reference camera settings
DEFAULT_LOOKAT = (0.0, 0.0, -1.0)
DEFAULT_VUP = (0.0, 1.0, 0.0)
DEFAULT_VFOV = 20.0
DEFAULT_ASPECT_RATIO = 16.0 / 9.0


def _rotation_matrix(axis: npt.NDArray[np.float64], angle: float) -> npt.NDArray[np.float64]:
    """Rotation matrix about a unit axis (Rodrigues' formula)."""
    x, y, z = axis
    k = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])
    return np.eye(3) + math.sin(angle) * k + (1.0 - math.cos(angle)) * (k @ k)


@dataclass(frozen=True)
class Camera:
    """A pinhole (perspective) camera.

    Attributes:
        origin: Camera position in world space.
        lookat: Point the camera is looking at.
        vup: Up direction used to orient the camera.
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the viewport.
        lower_left_corner: Lower-left corner of the viewport at unit distance.
        horizontal: Vector spanning the full viewport width.
        vertical: Vector spanning the full viewport height.
    """

    origin: Vector3
    lookat: Vector3
    vup: Vector3
    vfov: float
    aspect_ratio: float
    lower_left_corner: Vector3
    horizontal: Vector3
    vertical: Vector3

    @classmethod
    def from_look_at(
        cls,
        lookfrom: tuple[float, float, float] | Vector3,
        lookat: tuple[float, float, float] | Vector3 = DEFAULT_LOOKAT,
        vup: tuple[float, float, float] | Vector3 = DEFAULT_VUP,
        vfov: float = DEFAULT_VFOV,
        aspect_ratio: float = DEFAULT_ASPECT_RATIO,
    ) -> Camera:
        """Compute the camera basis and viewport from view parameters.

        Args:
            lookfrom: Camera position.
            lookat: Point the camera looks at.
            vup: Up direction (must not be parallel to the view direction).
            vfov: Vertical field of view in degrees, in (0, 180).
            aspect_ratio: Viewport width / height.

        Raises:
            ValueError: If the view parameters are degenerate.
        """
        if not 0.0 < vfov < 180.0:
            raise ValueError(f"Vertical field of view must be in (0, 180), got {vfov}")
        if aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")

        h = math.tan(math.radians(vfov) / 2.0)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        origin = np.array(lookfrom, dtype=np.float64)
        target = np.array(lookat, dtype=np.float64)
        up = np.array(vup, dtype=np.float64)

        w = origin - target
        w_norm = np.linalg.norm(w)
        if w_norm == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        w = w / w_norm

        u = np.cross(up, w)
        u_norm = np.linalg.norm(u)
        if u_norm < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_norm
        v = np.cross(w, u)

        horizontal = viewport_width * u
        vertical = viewport_height * v
        lower_left = origin - horizontal / 2.0 - vertical / 2.0 - w

        return cls(
            origin=as_vector(origin),
            lookat=as_vector(target),
            vup=as_vector(up),
            vfov=float(vfov),
            aspect_ratio=float(aspect_ratio),
            lower_left_corner=as_vector(lower_left),
            horizontal=as_vector(horizontal),
            vertical=as_vector(vertical),
        )

    def emit_ray_at(self, offset_x: float, offset_y: float) -> Ray:
        """Generate a ray through normalized image coordinates.

        Args:
            offset_x: Horizontal coordinate in [0, 1] (left to right).
            offset_y: Vertical coordinate in [0, 1] (bottom to top).

        Returns:
            A ray from the camera origin through the viewport point. The
            direction is not normalized.
        """
        return Ray(
            self.origin,
            self.lower_left_corner
            + self.horizontal * offset_x
            + self.vertical * offset_y
            - self.origin,
        )

    def basis(self) -> tuple[Vector3, Vector3, Vector3]:
        """Return the (right, up, forward) unit vectors of the camera."""
        right = self.horizontal.normalize()
        up = self.vertical.normalize()
        forward = (self.lookat - self.origin).normalize()
        return right, up, forward

    def move_camera(self, delta: tuple[float, float, float] | Vector3) -> Camera:
        """Translate the camera in its own frame.

        Args:
            delta: Offset as (right, up, forward) distances.

        Returns:
            A new camera; this one is unchanged.
        """
        delta = as_vector(delta)
        right, up, forward = self.basis()
        offset = right * delta.x + up * delta.y + forward * delta.z
        return Camera.from_look_at(
            self.origin + offset,
            self.lookat + offset,
            self.vup,
            self.vfov,
            self.aspect_ratio,
        )

    def rotate(self, delta_euler: tuple[float, float, float] | Vector3) -> Camera:
        """Rotate the view direction around the camera.

        Args:
            delta_euler: Angles in radians as (pitch, yaw, roll): pitch turns
                about the camera's right axis, yaw about the up vector and
                roll tilts the up vector about the view axis.

        Returns:
            A new camera with the same origin; this one is unchanged.

        Raises:
            ValueError: If the rotation points the view along the up vector.
        """
        pitch, yaw, roll = as_vector(delta_euler)
        right, _, forward = self.basis()
        up = np.array(self.vup.normalize())
        view = np.array(self.lookat - self.origin)
        right_axis = np.array(right)

        rotation = _rotation_matrix(up, yaw) @ _rotation_matrix(right_axis, pitch)
        view = rotation @ view
        new_up = _rotation_matrix(np.array(forward), roll) @ up

        return Camera.from_look_at(
            self.origin,
            self.origin + as_vector(view),
            as_vector(new_up),
            self.vfov,
            self.aspect_ratio,
        )

    def with_aspect_ratio(self, aspect_ratio: float) -> Camera:
        """Same view rebuilt for a render target of another shape."""
        return Camera.from_look_at(
            self.origin, self.lookat, self.vup, self.vfov, aspect_ratio
        )
