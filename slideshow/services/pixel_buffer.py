"""Rasterize Pillow images into encoder-ready pixel buffers."""

import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


class PixelBufferAdapter:
    """Converts bitmaps into the layout the encoder consumes.

    The encoder takes packed ``rgb24`` frames: a C-contiguous ``uint8`` array
    of shape ``(height, width, 3)``. Alpha is dropped after flattening onto
    black, and frames of the wrong size are resampled to the output size.
    """

    def __init__(self, width: int, height: int):
        """Initialize the adapter.

        Args:
            width: Output frame width.
            height: Output frame height.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid pixel buffer size {width}x{height}")
        self.width = width
        self.height = height

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.height, self.width, 3)

    def convert(self, image: Image.Image) -> np.ndarray:
        """Rasterize ``image`` into a new pixel buffer.

        Args:
            image: Any Pillow image.

        Returns:
            ``uint8`` array of shape ``(height, width, 3)``.
        """
        if image.size != (self.width, self.height):
            logger.debug(
                "Resampling frame from %dx%d to %dx%d",
                image.width,
                image.height,
                self.width,
                self.height,
            )
            image = image.resize((self.width, self.height), Image.Resampling.LANCZOS)

        if image.mode == "RGBA":
            flattened = Image.new("RGB", image.size, (0, 0, 0))
            flattened.paste(image, mask=image.getchannel("A"))
            image = flattened
        elif image.mode != "RGB":
            image = image.convert("RGB")

        return np.ascontiguousarray(np.asarray(image, dtype=np.uint8))
