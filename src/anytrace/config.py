"""Render settings for the progressive renderer.

Example:
    >>> from anytrace.config import RenderSettings
    >>> settings = RenderSettings(width=320, height=180, seed=7)
    >>> settings.pixel_count
    57600
"""

from __future__ import annotations

from dataclasses import dataclass

from anytrace.core.integrator import MAX_DEPTH
from anytrace.core.pixel_cache import PROPAGATION_RADIUS, STABILITY_THRESHOLD

# Default render target, 16:9 to match the default camera aspect ratio
DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 225


@dataclass
class RenderSettings:
    """Parameters for a progressive render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_call: Rays traced each time a pixel is visited.
        max_depth: Maximum bounces per ray.
        stability_threshold: Identical resolutions (strictly more than this)
            needed to freeze a pixel.
        propagation_radius: Rectilinear radius of the near-pixel guess pass.
        reshuffle_each_pass: Draw a new visitation order after every pass.
        seed: Seed for the random generator, None for OS entropy.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_call: int = 1
    max_depth: int = MAX_DEPTH
    stability_threshold: int = STABILITY_THRESHOLD
    propagation_radius: int = PROPAGATION_RADIUS
    reshuffle_each_pass: bool = False
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Render target must be at least 1x1, got {self.width}x{self.height}"
            )
        if self.samples_per_call <= 0:
            raise ValueError(
                f"samples_per_call must be positive, got {self.samples_per_call}"
            )
        if self.max_depth <= 0:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.stability_threshold < 0:
            raise ValueError(
                f"stability_threshold must be non-negative, got {self.stability_threshold}"
            )
        if self.propagation_radius < 0:
            raise ValueError(
                f"propagation_radius must be non-negative, got {self.propagation_radius}"
            )

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height
