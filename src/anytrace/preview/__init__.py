"""Preview module for output and visualization.

Components:
    buffer: In-memory frame buffer implementing the PixelSink protocol
    display: Matplotlib-based preview with a pixel status map
    export: PNG export utilities
    interactive: Taichi GGUI-based interactive preview window

Example:
    >>> from anytrace.preview import ImageBufferSink, save_png, show_preview
    >>> sink = ImageBufferSink(400, 225)
    >>> renderer = ProgressiveRenderer(scene, camera, sink, settings)
    >>> renderer.render(400 * 225 * 8)
    >>> show_preview(renderer)
    >>> save_png(sink, "output.png")
"""

from anytrace.preview.buffer import ImageBufferSink
from anytrace.preview.display import show_preview, status_image
from anytrace.preview.export import compute_rmse, save_png, save_png_from_array
from anytrace.preview.interactive import InteractivePreview

__all__ = [
    "ImageBufferSink",
    "InteractivePreview",
    "show_preview",
    "status_image",
    "save_png",
    "save_png_from_array",
    "compute_rmse",
]
