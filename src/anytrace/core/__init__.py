"""Core rendering module.

Components:
    ray: Vector3, Ray and sampling helpers
    integrator: Path tracing through the scene (project_ray, sample_pixel)
    pixel_cache: Per-pixel accumulation and convergence tracking
    scheduler: Shuffled pixel visitation order
    progressive: ProgressiveRenderer and the PixelSink protocol
"""

from .pixel_cache import PixelCache, PixelColor, PixelEntry, PixelPosition, PixelStatus
from .ray import (
    ONE,
    ZERO,
    Color,
    Ray,
    Vector3,
    random_unit_vector,
    reflect,
    refract,
    schlick_fresnel,
)

# Note: integrator, scheduler and progressive are NOT imported here to avoid
# circular imports. Import them directly, e.g.:
#   from anytrace.core.progressive import ProgressiveRenderer

__all__ = [
    "Vector3",
    "Color",
    "Ray",
    "ZERO",
    "ONE",
    "reflect",
    "refract",
    "schlick_fresnel",
    "random_unit_vector",
    "PixelCache",
    "PixelColor",
    "PixelEntry",
    "PixelPosition",
    "PixelStatus",
]
