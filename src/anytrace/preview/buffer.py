"""In-memory frame buffer implementing the PixelSink protocol.

The renderer reports pixels with y = 0 on the bottom row; the buffer stores
them top row first so the array can be shown or saved directly.

Example:
    >>> from anytrace.preview.buffer import ImageBufferSink
    >>> sink = ImageBufferSink(64, 36)
    >>> sink.image.shape
    (36, 64, 3)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from anytrace.core.pixel_cache import PixelColor, PixelPosition, PixelStatus


class ImageBufferSink:
    """NumPy uint8 frame buffer with a per-pixel status mask.

    Attributes:
        width: Buffer width in pixels.
        height: Buffer height in pixels.
        image: RGB buffer of shape (height, width, 3), top row first.
        status: Status of each displayed pixel, shape (height, width).
        updates: Number of set_pixel calls since the last invalidation.
    """

    def __init__(self, width: int, height: int) -> None:
        """Allocate a black buffer.

        Raises:
            ValueError: If a dimension is not positive.
        """
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        """Reallocate the buffer for new dimensions.

        Raises:
            ValueError: If a dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Buffer must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height
        self.image: npt.NDArray[np.uint8] = np.zeros((height, width, 3), dtype=np.uint8)
        self.status: npt.NDArray[np.int8] = np.full(
            (height, width), PixelStatus.NOT_STARTED, dtype=np.int8
        )
        self.updates = 0

    def set_pixel(self, position: PixelPosition, color: PixelColor) -> None:
        row = self.height - 1 - position.y
        self.image[row, position.x] = color.rgb
        self.status[row, position.x] = color.status
        self.updates += 1

    def invalidate_pixels(self) -> None:
        self.image.fill(0)
        self.status.fill(PixelStatus.NOT_STARTED)
        self.updates = 0

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Copy of the buffer, shape (height, width, 3), top row first."""
        return self.image.copy()

    def coverage(self) -> float:
        """Fraction of pixels showing a color (sampled or guessed)."""
        return float(np.count_nonzero(self.status != PixelStatus.NOT_STARTED)) / self.status.size
