"""Image texture material.

Samples an RGB image at the hit's surface coordinates. Coordinates are scaled
and wrapped (modulo the image size, sign-corrected) so textures tile in both
directions. A texture surface never bounces: it shows the image as-is and
terminates the path.

Example:
    >>> from anytrace.materials.texture import Texture
    >>> texture = Texture.load_from_file("textures/earth.jpg", scale=1.0)  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from anytrace.core.ray import Color, Ray
from anytrace.materials.material import Material

if TYPE_CHECKING:
    from anytrace.geometry.shape import Collision

logger = logging.getLogger(__name__)


class Texture(Material):
    """Terminal material that displays an image.

    Attributes:
        image: Image array of shape (height, width, 3) with dtype uint8.
            Row 0 is the top of the image.
        scale: Number of image repetitions per unit of texture coordinate.
    """

    def __init__(self, image: npt.NDArray[np.uint8], scale: float = 1.0) -> None:
        """Create a texture from an image array.

        Raises:
            ValueError: If the image is not a non-empty (H, W, 3) array.
        """
        image = np.asarray(image)
        if image.ndim != 3 or image.shape[2] != 3 or image.shape[0] == 0 or image.shape[1] == 0:
            raise ValueError(f"Texture image must have shape (H, W, 3), got {image.shape}")
        self.image = image.astype(np.uint8, copy=False)
        self.scale = float(scale)

    @classmethod
    def load_from_file(cls, path: str | Path, scale: float = 1.0) -> Texture:
        """Load a texture from an image file using Pillow.

        Raises:
            FileNotFoundError: If the file does not exist.
            PIL.UnidentifiedImageError: If the file is not a readable image.
        """
        with PILImage.open(path) as pil_image:
            image = np.asarray(pil_image.convert("RGB"), dtype=np.uint8)
        logger.debug("Loaded texture %s (%dx%d)", path, image.shape[1], image.shape[0])
        return cls(image, scale)

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    def wrap(self, value: float, bound: int) -> int:
        """Map a texture coordinate to a pixel index in [0, bound)."""
        # int() truncates toward zero, the modulo then folds negatives back
        coord = int(value * self.scale * bound)
        return coord % bound

    def scatter(self, ray: Ray, collision: Collision) -> Color:
        u, v = collision.texture_coords()
        tex_x = self.wrap(u, self.width)
        tex_y = self.wrap(v, self.height)
        r, g, b = self.image[tex_y, tex_x]
        return Color(r / 255.0, g / 255.0, b / 255.0)

    def bounce(
        self, ray: Ray, collision: Collision, rng: np.random.Generator
    ) -> Ray | None:
        return None

    def __repr__(self) -> str:
        return f"Texture({self.width}x{self.height}, scale={self.scale})"
