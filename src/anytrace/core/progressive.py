"""Progressive renderer that refines an image one pixel at a time.

This module ties the scheduler, pixel cache and integrator together:
- Anytime rendering: every call samples a single pixel, so the caller decides
  how much work to do between frames
- Batch and generator wrappers with progress reporting
- Time-sliced stepping for interactive hosts
- Invalidation when the camera, scene or render target changes

Every resolved color is pushed to a sink (any object implementing the
PixelSink protocol), typically a frame buffer shown by a window.

Example:
    >>> from anytrace.config import RenderSettings
    >>> from anytrace.core.progressive import ProgressiveRenderer
    >>> from anytrace.preview.buffer import ImageBufferSink
    >>> from anytrace.scene.demo import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> settings = RenderSettings(width=64, height=36, seed=1)
    >>> sink = ImageBufferSink(settings.width, settings.height)
    >>> renderer = ProgressiveRenderer(scene, camera, sink, settings)
    >>> renderer.render(settings.pixel_count)  # One full pass
    >>> renderer.progress
    (1, 0)
"""

from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Callable, Generator
from typing import Protocol

import numpy as np
import numpy.typing as npt

from anytrace.camera.pinhole import Camera
from anytrace.config import RenderSettings
from anytrace.core import integrator
from anytrace.core.pixel_cache import PixelColor, PixelPosition, PixelStatus
from anytrace.core.ray import Vector3
from anytrace.core.scheduler import PixelScheduler
from anytrace.scene.manager import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (pixels_rendered, target_pixels)
ProgressCallback = Callable[[int, int], None]


class PixelSink(Protocol):
    """Receiver of pixel updates produced by the renderer."""

    def set_pixel(self, position: PixelPosition, color: PixelColor) -> None:
        """Show a new color for one pixel (y = 0 is the bottom row)."""
        ...

    def invalidate_pixels(self) -> None:
        """Forget every pixel previously shown."""
        ...

    def resize(self, width: int, height: int) -> None:
        """Adopt a new render target size; called before invalidate_pixels."""
        ...


class ProgressiveRenderer:
    """An anytime renderer that accumulates samples pixel by pixel.

    Pixels are visited in a shuffled order, one sample batch per visit. Each
    visit folds the new radiance into the pixel cache and forwards the
    resolved color to the sink. Pixels whose color stops changing become
    FINAL and are skipped from then on.

    Attributes:
        scene: Shapes being rendered. Call invalidate() after editing it.
        settings: Render parameters.
        sink: Receiver of pixel updates, or None.
        propagate_each_pass: Run the near-pixel guess pass whenever a full
            pass completes.
    """

    def __init__(
        self,
        scene: Scene,
        camera: Camera,
        sink: PixelSink | None = None,
        settings: RenderSettings | None = None,
        rng: np.random.Generator | None = None,
        propagate_each_pass: bool = False,
    ) -> None:
        """Initialize the renderer.

        Args:
            scene: Non-empty scene to render.
            camera: Initial camera.
            sink: Receiver of pixel updates.
            settings: Render parameters, defaults to RenderSettings().
            rng: Random generator; created from ``settings.seed`` if None.
            propagate_each_pass: Spread guesses to unsampled pixels at the
                end of every pass.

        Raises:
            ValueError: If the scene is empty.
        """
        scene.validate()
        self.scene = scene
        self._camera = camera
        self.sink = sink
        self.settings = settings if settings is not None else RenderSettings()
        self._rng = rng if rng is not None else np.random.default_rng(self.settings.seed)
        self.propagate_each_pass = propagate_each_pass
        self._scheduler = PixelScheduler(
            self.settings.width,
            self.settings.height,
            self._rng,
            reshuffle_each_pass=self.settings.reshuffle_each_pass,
            stability_threshold=self.settings.stability_threshold,
        )
        logger.info(
            "Progressive renderer ready: %dx%d, %d shapes, %d samples per call",
            self.width,
            self.height,
            len(scene),
            self.settings.samples_per_call,
        )

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._scheduler.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._scheduler.height

    @property
    def camera(self) -> Camera:
        return self._camera

    @property
    def scheduler(self) -> PixelScheduler:
        return self._scheduler

    @property
    def progress(self) -> tuple[int, int]:
        """(full_pass_count, cursor) of the scheduler."""
        return self._scheduler.progress()

    @property
    def is_complete(self) -> bool:
        """True once every pixel is FINAL."""
        return self._scheduler.cache.is_complete()

    def status_counts(self) -> dict[PixelStatus, int]:
        return self._scheduler.cache.status_counts()

    # =========================================================================
    # Stepping
    # =========================================================================

    def render_pixel(self, samples_per_call: int | None = None) -> bool:
        """Sample the pixel at the scheduler cursor and advance.

        Args:
            samples_per_call: Rays to trace for this pixel, defaults to
                ``settings.samples_per_call``.

        Returns:
            True if the pixel was sampled, False if it was already FINAL and
            was skipped.

        Raises:
            ValueError: If ``samples_per_call`` is not positive.
        """
        samples = self.settings.samples_per_call if samples_per_call is None else samples_per_call
        if samples <= 0:
            raise ValueError(f"samples_per_call must be positive, got {samples}")

        cache = self._scheduler.cache
        index = self._scheduler.current_index()
        sampled = cache.status(index) != PixelStatus.FINAL
        if sampled:
            position = cache.position_of(index)
            color_sum = integrator.sample_pixel(
                self._camera,
                self.scene,
                position.x,
                position.y,
                self.width,
                self.height,
                samples,
                self.settings.max_depth,
                rng=self._rng,
            )
            color = cache.accumulate(index, color_sum, samples)
            if color is not None and self.sink is not None:
                self.sink.set_pixel(position, color)

        self._scheduler.next()
        if self.propagate_each_pass and self._scheduler.cursor == 0:
            self.propagate()
        return sampled

    def render(
        self,
        num_pixels: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render a number of pixel visits with optional progress callback.

        Can be called repeatedly to keep refining the image.

        Args:
            num_pixels: Total number of pixel visits.
            batch_size: Visits between callbacks.
            callback: Optional callback called after each batch with
                (visits_done, num_pixels).

        Example:
            >>> def progress(current, target):
            ...     print(f"Progress: {current}/{target} pixels")
            >>> renderer.render(10_000, batch_size=1_000, callback=progress)
        """
        for done, target in self.render_progressive(num_pixels, batch_size):
            if callback is not None:
                callback(done, target)

    def render_progressive(
        self,
        num_pixels: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render pixel visits, yielding progress after each batch.

        Args:
            num_pixels: Total number of pixel visits.
            batch_size: Visits before each yield.

        Yields:
            Tuple of (visits_done, num_pixels).

        Example:
            >>> for current, target in renderer.render_progressive(5_000, 500):
            ...     print(f"{current}/{target}")
        """
        if num_pixels <= 0:
            return

        batch_size = max(batch_size, 1)
        done = 0
        while done < num_pixels:
            batch = min(batch_size, num_pixels - done)
            for _ in range(batch):
                self.render_pixel()
            done += batch
            yield (done, num_pixels)

    def render_time_slice(
        self,
        seconds: float,
        clock: Callable[[], float] = time.perf_counter,
    ) -> int:
        """Render pixels until a time budget is spent.

        At least one pixel is visited per call. Stops early once every pixel
        is FINAL.

        Args:
            seconds: Time budget.
            clock: Monotonic clock in seconds.

        Returns:
            Number of pixel visits performed.
        """
        deadline = clock() + seconds
        visits = 0
        while True:
            self.render_pixel()
            visits += 1
            if self._scheduler.cursor == 0 and self.is_complete:
                break
            if clock() >= deadline:
                break
        return visits

    # =========================================================================
    # Invalidation
    # =========================================================================

    def invalidate(self, width: int | None = None, height: int | None = None) -> None:
        """Discard every sample and restart the render.

        A new size also resizes the sink and rebuilds the camera for the new
        aspect ratio.

        Args:
            width: New image width, or None to keep the current one.
            height: New image height, or None to keep the current one.

        Raises:
            ValueError: If a new dimension is not positive.
        """
        resized = False
        if width is not None or height is not None:
            self.settings = dataclasses.replace(
                self.settings,
                width=self.width if width is None else width,
                height=self.height if height is None else height,
            )
            resized = (self.settings.width, self.settings.height) != (self.width, self.height)
        self._scheduler.invalidate(self.settings.width, self.settings.height)
        if resized:
            self._camera = self._camera.with_aspect_ratio(self.settings.aspect_ratio)
            logger.info("Render target resized to %dx%d", self.width, self.height)
        if self.sink is not None:
            if resized:
                self.sink.resize(self.width, self.height)
            self.sink.invalidate_pixels()

    def set_camera(self, camera: Camera) -> None:
        """Install a new camera and restart the render."""
        self._camera = camera
        logger.debug("Camera moved to %s looking at %s", camera.origin, camera.lookat)
        self.invalidate()

    def camera_move(self, delta: tuple[float, float, float] | Vector3) -> None:
        """Translate the camera in its own frame (x right, y up, z forward)."""
        self.set_camera(self._camera.move_camera(delta))

    def camera_rotate(self, delta_euler: tuple[float, float, float] | Vector3) -> None:
        """Rotate the camera by (pitch, yaw, roll) radians."""
        self.set_camera(self._camera.rotate(delta_euler))

    # =========================================================================
    # Queries
    # =========================================================================

    def propagate(self) -> int:
        """Spread resolved colors to nearby unsampled pixels.

        Returns:
            Number of pixels painted.
        """
        if self.sink is None:
            return self._scheduler.cache.propagate(self.settings.propagation_radius).size
        return self._scheduler.propagate_pixels(self.sink, self.settings.propagation_radius)

    def pick_shape(self, x: float, y: float) -> int | None:
        """Index of the shape visible through pixel (x, y), y = 0 at the bottom."""
        return integrator.pick_shape(self._camera, self.scene, x, y, self.width, self.height)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the current image as an 8-bit NumPy array.

        Returns:
            Array of shape (height, width, 3), top row first. Pixels without
            a color yet are black.
        """
        return self._scheduler.cache.get_image_uint8()

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        passes, cursor = self.progress
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"passes={passes}, cursor={cursor})"
        )
