"""Interactive preview window using Taichi GGUI.

This module hosts a ProgressiveRenderer in a ti.ui.Window. Every frame the
renderer gets a small time budget, then the frame buffer is uploaded to the
canvas. Camera input invalidates the render and the image starts refining
again from scratch.

Controls:
    - Up / Down: move forward / backward (hold Shift to go faster)
    - Left / Right: turn left / right (hold Shift to go faster)
    - P: toggle near-pixel propagation at the end of every pass
    - Left click: report the shape under the cursor
    - S: save a timestamped PNG
    - Escape: close the window

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from anytrace.preview.interactive import InteractivePreview
    >>>
    >>> preview = InteractivePreview(renderer)
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from anytrace.preview.buffer import ImageBufferSink

if TYPE_CHECKING:
    import numpy.typing as npt

    from anytrace.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Speeds (per second)
# =============================================================================

MOVE_SPEED = 1.0
MOVE_SPEED_FAST = 5.0
TURN_SPEED = 0.75
TURN_SPEED_FAST = 1.5

# Rendering budget per displayed frame
DEFAULT_TIME_SLICE = 1.0 / 30.0


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    The preview installs an ImageBufferSink on the renderer (unless the
    renderer already has one) and shows it on every frame.

    Attributes:
        renderer: The renderer being displayed.
        sink: The frame buffer shown in the window.
        time_slice: Seconds of rendering per frame.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        renderer: ProgressiveRenderer,
        *,
        title: str = "anytrace - Interactive Preview",
        time_slice: float = DEFAULT_TIME_SLICE,
    ) -> None:
        """Initialize the interactive preview.

        Args:
            renderer: The renderer to host.
            title: Window title.
            time_slice: Seconds of rendering per frame.

        Note:
            Taichi must be initialized before creating the preview. The window
            itself is created lazily by run().
        """
        self.renderer = renderer
        self.width = renderer.width
        self.height = renderer.height
        self.time_slice = time_slice
        self._title = title

        if isinstance(renderer.sink, ImageBufferSink):
            self.sink = renderer.sink
        else:
            self.sink = ImageBufferSink(self.width, self.height)
            renderer.sink = self.sink
            renderer.invalidate()

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Taichi fields are indexed (x, y) with the origin at the bottom-left
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

    def _initialize_window(self) -> None:
        if self._window is not None:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, image: npt.NDArray[np.uint8]) -> None:
        """Upload an 8-bit image (top row first) to the display field.

        Raises:
            ValueError: If image shape doesn't match (height, width, 3).
        """
        expected_shape = (self.height, self.width, 3)
        if image.shape != expected_shape:
            raise ValueError(
                f"Image shape {image.shape} doesn't match expected {expected_shape}"
            )
        self.display_image.from_numpy(to_display_array(image))

    def is_running(self) -> bool:
        return self.window.running

    def show_frame(self) -> None:
        """Present the current display image."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def handle_input(self, elapsed: float) -> None:
        """Apply held keys and pending key events.

        Args:
            elapsed: Seconds since the previous frame, scales camera speed.
        """
        window = self.window
        fast = window.is_pressed(ti.ui.SHIFT)

        move = (MOVE_SPEED_FAST if fast else MOVE_SPEED) * elapsed
        turn = (TURN_SPEED_FAST if fast else TURN_SPEED) * elapsed
        if window.is_pressed(ti.ui.UP):
            self.renderer.camera_move((0.0, 0.0, move))
        elif window.is_pressed(ti.ui.DOWN):
            self.renderer.camera_move((0.0, 0.0, -move))
        if window.is_pressed(ti.ui.LEFT):
            self.renderer.camera_rotate((0.0, turn, 0.0))
        elif window.is_pressed(ti.ui.RIGHT):
            self.renderer.camera_rotate((0.0, -turn, 0.0))

        for event in window.get_events(ti.ui.PRESS):
            if event.key == ti.ui.ESCAPE:
                window.running = False
            elif event.key == "p":
                self.renderer.propagate_each_pass = not self.renderer.propagate_each_pass
                logger.info("Propagation %s", "on" if self.renderer.propagate_each_pass else "off")
            elif event.key == "s":
                self.export_png()
            elif event.key == ti.ui.LMB:
                self._pick_under_cursor()

    def _pick_under_cursor(self) -> None:
        cursor_x, cursor_y = self.window.get_cursor_pos()
        shape_index = self.renderer.pick_shape(
            cursor_x * (self.width - 1), cursor_y * (self.height - 1)
        )
        if shape_index is None:
            print("Picked: background")
        else:
            print(f"Picked: shape {shape_index} {self.renderer.scene[shape_index]!r}")

    def run(self) -> None:
        """Run the render/display loop until the window is closed."""
        self._initialize_window()
        last_frame = time.perf_counter()

        while self.is_running():
            now = time.perf_counter()
            self.handle_input(now - last_frame)
            last_frame = now

            if not self.renderer.is_complete:
                self.renderer.render_time_slice(self.time_slice)
            self.update_image(self.sink.image)
            self.show_frame()

    def close(self) -> None:
        """Stop the event loop. The window cannot be reopened."""
        if self._window is not None:
            self._window.running = False

    def export_png(self) -> str:
        """Save the frame buffer to a timestamped PNG file.

        Returns:
            The file name written.
        """
        from anytrace.preview.export import save_png

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"anytrace_{timestamp}.png"
        save_png(self.sink, filename)
        passes, _ = self.renderer.progress
        print(f"Exported: {filename} ({passes} passes)")
        return filename

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            return not (ssh_connection and not display)

        return bool(display or wayland)


def to_display_array(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.float32]:
    """Convert an (H, W, 3) uint8 image to the (W, H, 3) float layout of the canvas.

    Flips rows (Taichi has its origin at the bottom-left) and scales to [0, 1].
    """
    flipped = np.flipud(image).astype(np.float32) / 255.0
    return np.ascontiguousarray(np.transpose(flipped, (1, 0, 2)))
