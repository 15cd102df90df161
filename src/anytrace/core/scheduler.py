"""Stochastic pixel visitation order.

The scheduler walks every pixel of the render target once per pass in a
random order, so early partial images cover the whole frame evenly instead of
filling in scanline by scanline. It owns the PixelCache the samples are
accumulated into.

Example:
    >>> import numpy as np
    >>> from anytrace.core.scheduler import PixelScheduler
    >>> scheduler = PixelScheduler(4, 3, np.random.default_rng(0))
    >>> position = scheduler.current()
    >>> scheduler.next()
    >>> scheduler.progress()
    (0, 1)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from anytrace.core.pixel_cache import (
    PROPAGATION_RADIUS,
    STABILITY_THRESHOLD,
    PixelCache,
    PixelPosition,
)

if TYPE_CHECKING:
    from anytrace.core.progressive import PixelSink

logger = logging.getLogger(__name__)


class PixelScheduler:
    """Visits every pixel once per pass in a shuffled order.

    Attributes:
        cache: Per-pixel accumulation state.
        full_pass_count: Number of completed passes.
        reshuffle_each_pass: Draw a new permutation whenever a pass ends.
    """

    def __init__(
        self,
        width: int,
        height: int,
        rng: np.random.Generator,
        reshuffle_each_pass: bool = False,
        stability_threshold: int = STABILITY_THRESHOLD,
    ) -> None:
        """Create a scheduler and its empty pixel cache.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            rng: Random generator used for the permutation.
            reshuffle_each_pass: If True, every pass uses a fresh order.
            stability_threshold: Convergence threshold of the pixel cache.

        Raises:
            ValueError: If a dimension is not positive.
        """
        self._rng = rng
        self.reshuffle_each_pass = reshuffle_each_pass
        self.cache = PixelCache(width, height, stability_threshold)
        self._reset()

    @property
    def width(self) -> int:
        return self.cache.width

    @property
    def height(self) -> int:
        return self.cache.height

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def visitation_order(self) -> npt.NDArray[np.intp]:
        """Read-only view of the current permutation of pixel indices."""
        view = self._order.view()
        view.flags.writeable = False
        return view

    def _reset(self) -> None:
        self._order = self._rng.permutation(self.cache.size)
        self._cursor = 0
        self.full_pass_count = 0
        logger.debug(
            "Scheduler reset for %dx%d (%d pixels)",
            self.width,
            self.height,
            self.cache.size,
        )

    def current_index(self) -> int:
        """Cache index of the pixel at the cursor."""
        return int(self._order[self._cursor])

    def current(self) -> PixelPosition:
        """Pixel position at the cursor."""
        return self.cache.position_of(self.current_index())

    def next(self) -> None:
        """Advance the cursor, wrapping to a new pass at the end."""
        self._cursor += 1
        if self._cursor < len(self._order):
            return

        self._cursor = 0
        self.full_pass_count += 1
        if self.reshuffle_each_pass:
            self._order = self._rng.permutation(self.cache.size)
        counts = self.cache.status_counts()
        logger.debug(
            "Pass %d complete: %s",
            self.full_pass_count,
            ", ".join(f"{status.name.lower()}={count}" for status, count in counts.items()),
        )

    def progress(self) -> tuple[int, int]:
        """Return (full_pass_count, cursor)."""
        return self.full_pass_count, self._cursor

    def invalidate(self, width: int | None = None, height: int | None = None) -> None:
        """Discard every sample and restart from a new permutation.

        Args:
            width: New image width, or None to keep the current one.
            height: New image height, or None to keep the current one.

        Raises:
            ValueError: If a new dimension is not positive.
        """
        new_width = self.width if width is None else width
        new_height = self.height if height is None else height
        if (new_width, new_height) != (self.width, self.height):
            self.cache.resize(new_width, new_height)
        else:
            self.cache.clear()
        self._reset()
        logger.info("Render invalidated (%dx%d)", new_width, new_height)

    def propagate_pixels(
        self, sink: PixelSink, radius: int = PROPAGATION_RADIUS
    ) -> int:
        """Paint unsampled pixels with the color of a nearby resolved pixel.

        Args:
            sink: Receives every painted pixel.
            radius: Maximum rectilinear distance to a source pixel.

        Returns:
            Number of pixels painted.
        """
        painted = self.cache.propagate(radius)
        for index in painted:
            color = self.cache.display_color(int(index))
            if color is not None:
                sink.set_pixel(self.cache.position_of(int(index)), color)
        logger.debug("Propagated guesses to %d pixels (radius %d)", len(painted), radius)
        return len(painted)
