"""Per-pixel sample accumulation and convergence tracking.

Each pixel keeps the running (unnormalized) radiance sum of every sample
taken for it, the sample count, the last color shown for it and a stability
counter. Colors are resolved lazily from sum / count:

    clamp(sum / count, 0, 1) -> sqrt (gamma 2 approximation) -> * 255 -> uint8

A pixel whose resolved color stays identical for more than
``stability_threshold`` consecutive accumulations is declared FINAL and is
never sampled again until the cache is cleared.

Lifecycle:
    NOT_STARTED -> UNSTABLE (first sample)
    UNSTABLE -> UNSTABLE (color changed, streak reset) -> FINAL
    NOT_STARTED -> COPY_NEAR_PIXEL (guess from a neighbour, see propagate)
    COPY_NEAR_PIXEL -> UNSTABLE (first real sample)

Known limitation: the stability test cannot tell a converged pixel from one
that is flat from the first sample (plain sky, for instance), so such pixels
freeze after a handful of samples regardless of noise elsewhere.

The cache is stored as NumPy arrays indexed by ``y * width + x`` with y = 0
on the bottom row.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple

import numpy as np
import numpy.typing as npt

from anytrace.core.ray import Vector3

# Consecutive identical resolutions required (strictly more than this) to freeze a pixel
STABILITY_THRESHOLD = 3

# Maximum rectilinear distance painted by the near-pixel propagation pass
PROPAGATION_RADIUS = 3

_STREAK_MAX = np.iinfo(np.uint8).max


class PixelStatus(IntEnum):
    """Lifecycle state of a pixel."""

    NOT_STARTED = 0
    UNSTABLE = 1
    COPY_NEAR_PIXEL = 2
    FINAL = 3


class PixelPosition(NamedTuple):
    """0-based pixel coordinates, origin at the bottom-left corner."""

    x: int
    y: int


class PixelColor(NamedTuple):
    """An 8-bit display color with the state of the pixel it belongs to.

    Attributes:
        r, g, b: Channels in [0, 255].
        status: Lifecycle state of the pixel when the color was produced.
        distance: Source distance for COPY_NEAR_PIXEL colors, else None.
    """

    r: int
    g: int
    b: int
    status: PixelStatus = PixelStatus.UNSTABLE
    distance: int | None = None

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class PixelEntry:
    """Snapshot of one pixel's cache state.

    Attributes:
        accumulated_radiance: Sum of all samples, None before the first one.
        sample_count: Number of samples folded into the sum.
        last_resolved_color: Last color resolved from real samples.
        same_color_streak: Consecutive identical resolutions.
        status: Lifecycle state.
        copy_distance: Distance to the guess source for COPY_NEAR_PIXEL.
        display_color: Color currently shown (a resolved color or a guess).
    """

    accumulated_radiance: Vector3 | None
    sample_count: int
    last_resolved_color: tuple[int, int, int] | None
    same_color_streak: int
    status: PixelStatus
    copy_distance: int | None
    display_color: tuple[int, int, int] | None


def resolve_color(radiance: Vector3, sample_count: int) -> tuple[int, int, int]:
    """Tone map an accumulated radiance sum to an 8-bit color.

    Args:
        radiance: Unnormalized radiance sum.
        sample_count: Number of samples in the sum (must be positive).

    Returns:
        The (r, g, b) channels. NaN channels resolve to 0.
    """
    scale = 1.0 / sample_count
    channels = []
    for component in radiance:
        value = component * scale
        if math.isnan(value):
            value = 0.0
        value = min(max(value, 0.0), 1.0)
        channels.append(int(math.sqrt(value) * 255.0))
    return channels[0], channels[1], channels[2]


def _shift_slices(offset: int, size: int) -> tuple[slice, slice]:
    """Source and target slices moving an axis of length ``size`` by ``offset``."""
    if offset >= 0:
        return slice(0, size - offset), slice(offset, size)
    return slice(-offset, size), slice(0, size + offset)


def _manhattan_offsets(radius: int) -> list[tuple[int, int, int]]:
    """(distance, dx, dy) for every offset with 1 <= |dx| + |dy| <= radius."""
    offsets = [
        (abs(dx) + abs(dy), dx, dy)
        for dy in range(-radius, radius + 1)
        for dx in range(-radius, radius + 1)
        if 0 < abs(dx) + abs(dy) <= radius
    ]
    offsets.sort(key=lambda offset: offset[0])
    return offsets


class PixelCache:
    """Accumulated radiance and convergence state for every pixel.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        stability_threshold: Streak length that must be exceeded to freeze
            a pixel.
    """

    def __init__(
        self,
        width: int,
        height: int,
        stability_threshold: int = STABILITY_THRESHOLD,
    ) -> None:
        """Allocate an empty cache.

        Raises:
            ValueError: If a dimension is not positive or the threshold is
                negative.
        """
        if stability_threshold < 0:
            raise ValueError(
                f"Stability threshold must be non-negative, got {stability_threshold}"
            )
        self.stability_threshold = stability_threshold
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        """Reallocate the cache for new dimensions (all pixels cleared).

        Raises:
            ValueError: If a dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Render target must be at least 1x1, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        size = self.width * self.height
        self._radiance = np.zeros((size, 3), dtype=np.float64)
        self._sample_count = np.zeros(size, dtype=np.uint64)
        self._colors = np.zeros((size, 3), dtype=np.uint8)
        self._has_resolved = np.zeros(size, dtype=bool)
        self._streak = np.zeros(size, dtype=np.uint8)
        self._status = np.zeros(size, dtype=np.int8)
        self._copy_distance = np.zeros(size, dtype=np.int32)

    def clear(self) -> None:
        """Reset every pixel to NOT_STARTED with no samples."""
        self._radiance.fill(0.0)
        self._sample_count.fill(0)
        self._colors.fill(0)
        self._has_resolved.fill(False)
        self._streak.fill(0)
        self._status.fill(PixelStatus.NOT_STARTED)
        self._copy_distance.fill(0)

    @property
    def size(self) -> int:
        return self.width * self.height

    def index_of(self, x: int, y: int) -> int:
        return y * self.width + x

    def position_of(self, index: int) -> PixelPosition:
        y, x = divmod(int(index), self.width)
        return PixelPosition(x, y)

    def status(self, index: int) -> PixelStatus:
        return PixelStatus(int(self._status[index]))

    def entry(self, index: int) -> PixelEntry:
        """Return a snapshot of one pixel's state."""
        count = int(self._sample_count[index])
        status = self.status(index)
        has_display = self._has_resolved[index] or status == PixelStatus.COPY_NEAR_PIXEL
        return PixelEntry(
            accumulated_radiance=Vector3(*map(float, self._radiance[index])) if count else None,
            sample_count=count,
            last_resolved_color=self._color_tuple(index) if self._has_resolved[index] else None,
            same_color_streak=int(self._streak[index]),
            status=status,
            copy_distance=(
                int(self._copy_distance[index])
                if status == PixelStatus.COPY_NEAR_PIXEL
                else None
            ),
            display_color=self._color_tuple(index) if has_display else None,
        )

    def _color_tuple(self, index: int) -> tuple[int, int, int]:
        r, g, b = self._colors[index]
        return int(r), int(g), int(b)

    def accumulate(
        self, index: int, color_sum: Vector3, samples_taken: int
    ) -> PixelColor | None:
        """Fold new samples into a pixel and update its convergence state.

        Args:
            index: Pixel index (``y * width + x``).
            color_sum: Unnormalized radiance sum of the new samples.
            samples_taken: Number of samples in ``color_sum`` (positive).

        Returns:
            The newly resolved color with the pixel status, or None when the
            pixel is already FINAL (nothing was changed).

        Raises:
            ValueError: If ``samples_taken`` is not positive.
        """
        if samples_taken <= 0:
            raise ValueError(f"samples_taken must be positive, got {samples_taken}")
        if self._status[index] == PixelStatus.FINAL:
            return None

        radiance = self._radiance[index]
        radiance += color_sum
        self._sample_count[index] += np.uint64(samples_taken)

        color = resolve_color(Vector3(*radiance), int(self._sample_count[index]))

        if self._has_resolved[index] and color == self._color_tuple(index):
            self._streak[index] = min(int(self._streak[index]) + 1, _STREAK_MAX)
        else:
            self._streak[index] = 0

        if self._streak[index] > self.stability_threshold:
            status = PixelStatus.FINAL
        else:
            status = PixelStatus.UNSTABLE

        self._status[index] = status
        self._copy_distance[index] = 0
        self._colors[index] = color
        self._has_resolved[index] = True
        return PixelColor(*color, status=status)

    def resolve(self, index: int) -> tuple[int, int, int] | None:
        """Recompute a pixel's color from its stored totals.

        Does not modify the pixel. Returns None before the first sample.
        """
        count = int(self._sample_count[index])
        if count == 0:
            return None
        return resolve_color(Vector3(*self._radiance[index]), count)

    def propagate(self, radius: int = PROPAGATION_RADIUS) -> npt.NDArray[np.intp]:
        """Spread resolved colors to nearby unsampled pixels.

        Every pixel with a resolved color paints the NOT_STARTED pixels within
        ``radius`` (rectilinear distance) with its color, marking them
        COPY_NEAR_PIXEL. An existing guess is only replaced by one from a
        strictly closer source. Sampled pixels are never touched.

        Returns:
            Indices of the pixels that were painted.
        """
        height, width = self.height, self.width
        sources = self._has_resolved.reshape(height, width)
        colors = self._colors.reshape(height, width, 3)
        status = self._status.reshape(height, width)
        distance = self._copy_distance.reshape(height, width)
        painted = np.zeros((height, width), dtype=bool)

        # Closest offsets first, so a tie never replaces an earlier guess
        for d, dx, dy in _manhattan_offsets(radius):
            if abs(dx) >= width or abs(dy) >= height:
                continue
            src_x, dst_x = _shift_slices(dx, width)
            src_y, dst_y = _shift_slices(dy, height)

            target_status = status[dst_y, dst_x]
            eligible = sources[src_y, src_x] & (
                (target_status == PixelStatus.NOT_STARTED)
                | (
                    (target_status == PixelStatus.COPY_NEAR_PIXEL)
                    & (distance[dst_y, dst_x] > d)
                )
            )
            if not eligible.any():
                continue

            colors[dst_y, dst_x][eligible] = colors[src_y, src_x][eligible]
            target_status[eligible] = PixelStatus.COPY_NEAR_PIXEL
            distance[dst_y, dst_x][eligible] = d
            painted[dst_y, dst_x] |= eligible

        return np.flatnonzero(painted)

    def display_color(self, index: int) -> PixelColor | None:
        """Color currently shown for a pixel, with its status."""
        status = self.status(index)
        if status == PixelStatus.COPY_NEAR_PIXEL:
            return PixelColor(
                *self._color_tuple(index),
                status=status,
                distance=int(self._copy_distance[index]),
            )
        if not self._has_resolved[index]:
            return None
        return PixelColor(*self._color_tuple(index), status=status)

    def status_counts(self) -> dict[PixelStatus, int]:
        """Number of pixels in each lifecycle state."""
        counts = np.bincount(self._status.astype(np.intp), minlength=len(PixelStatus))
        return {status: int(counts[status]) for status in PixelStatus}

    def is_complete(self) -> bool:
        """True once every pixel is FINAL."""
        return bool(np.all(self._status == PixelStatus.FINAL))

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Displayed colors as an image with the top row first.

        Returns:
            Array of shape (height, width, 3), dtype uint8. Pixels without a
            color are black.
        """
        image = self._colors.reshape(self.height, self.width, 3).copy()
        shown = self._has_resolved | (self._status == PixelStatus.COPY_NEAR_PIXEL)
        image[~shown.reshape(self.height, self.width)] = 0
        return np.ascontiguousarray(np.flipud(image))

    def get_status_map(self) -> npt.NDArray[np.int8]:
        """Per-pixel PixelStatus values with the top row first."""
        return np.flipud(self._status.reshape(self.height, self.width)).copy()
