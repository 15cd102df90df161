"""Image export utilities for rendered images.

Colors produced by the renderer are already tone mapped and gamma corrected
(clamp, sqrt, 8-bit), so export is a straight write through Pillow.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from anytrace.preview.export import save_png
    >>> renderer.render(renderer.settings.pixel_count * 8)
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


class ImageSource(Protocol):
    """Anything that can produce an (H, W, 3) uint8 image, top row first."""

    def get_image_uint8(self) -> npt.NDArray[np.uint8]: ...


def save_png(source: ImageSource, filepath: str | Path) -> None:
    """Save the current image of a renderer or frame buffer as a PNG file.

    Args:
        source: A ProgressiveRenderer, ImageBufferSink or any ImageSource.
        filepath: Output file path (should end in .png).
    """
    save_png_from_array(source.get_image_uint8(), filepath)


def save_png_from_array(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB array as a PNG file.

    Args:
        image: Array of shape (H, W, 3), dtype uint8, top row first.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not an 8-bit RGB image.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")

    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
