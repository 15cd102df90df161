"""Matplotlib-based preview display for rendered images.

Features:
    - Static preview of the current partial image
    - Pixel status map (not started, unstable, guessed, final)
    - Pass count display

Example:
    >>> from anytrace.preview.display import show_preview
    >>> renderer.render(renderer.settings.pixel_count * 4)
    >>> show_preview(renderer, show_status=True)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from anytrace.core.pixel_cache import PixelStatus

if TYPE_CHECKING:
    from anytrace.core.progressive import ProgressiveRenderer


# Display colors for each pixel status
STATUS_COLORS: dict[PixelStatus, tuple[int, int, int]] = {
    PixelStatus.NOT_STARTED: (0, 0, 0),
    PixelStatus.UNSTABLE: (220, 60, 40),
    PixelStatus.COPY_NEAR_PIXEL: (240, 200, 40),
    PixelStatus.FINAL: (60, 200, 80),
}


def status_image(statuses: npt.NDArray[np.integer]) -> npt.NDArray[np.uint8]:
    """Map a (H, W) array of PixelStatus values to an RGB image.

    Args:
        statuses: Pixel status values.

    Returns:
        Array of shape (H, W, 3), dtype uint8.
    """
    palette = np.zeros((len(PixelStatus), 3), dtype=np.uint8)
    for status, color in STATUS_COLORS.items():
        palette[status] = color
    return palette[statuses.astype(np.intp)]


def renderer_status_map(renderer: ProgressiveRenderer) -> npt.NDArray[np.int8]:
    """Per-pixel statuses of a renderer, top row first."""
    return renderer.scheduler.cache.get_status_map()


def format_title(renderer: ProgressiveRenderer) -> str:
    passes, cursor = renderer.progress
    counts = renderer.status_counts()
    final = counts[PixelStatus.FINAL]
    return (
        f"Pass {passes} ({cursor}/{renderer.width * renderer.height}) - "
        f"{final} final pixels"
    )


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    show_status: bool = False,
    title: str | None = None,
    figsize: tuple[float, float] = (10, 6),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    Args:
        renderer: The ProgressiveRenderer instance to display.
        show_status: Add a second panel with the pixel status map.
        title: Custom title (default shows pass count and final pixels).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = renderer.get_image_uint8()
    title_text = format_title(renderer) if title is None else title

    if show_status:
        fig, axes = plt.subplots(1, 2, figsize=figsize)
        axes[0].imshow(image)
        axes[0].set_title(title_text)
        axes[0].axis("off")
        axes[1].imshow(status_image(renderer_status_map(renderer)))
        axes[1].set_title("Pixel status")
        axes[1].axis("off")
    else:
        fig, ax = plt.subplots(1, 1, figsize=figsize)
        ax.imshow(image)
        ax.set_title(title_text)
        ax.axis("off")

    plt.tight_layout()
    plt.show(block=block)
