"""Unit tests for PixelBufferAdapter."""

import numpy as np
import pytest
from PIL import Image

from slideshow.services.pixel_buffer import PixelBufferAdapter


class TestPixelBufferAdapter:
    """Tests for converting bitmaps into encoder buffers."""

    def test_rgb_layout(self) -> None:
        """Test that buffers are packed HxWx3 uint8."""
        adapter = PixelBufferAdapter(40, 30)
        buffer = adapter.convert(Image.new("RGB", (40, 30), (1, 2, 3)))

        assert buffer.shape == adapter.shape == (30, 40, 3)
        assert buffer.dtype == np.uint8
        assert buffer.flags["C_CONTIGUOUS"]
        assert tuple(buffer[0, 0]) == (1, 2, 3)

    def test_rgba_flattened_onto_black(self) -> None:
        """Test that translucent pixels are premultiplied against black."""
        adapter = PixelBufferAdapter(4, 4)
        buffer = adapter.convert(Image.new("RGBA", (4, 4), (200, 100, 50, 128)))
        assert np.allclose(buffer[1, 1], (100, 50, 25), atol=2)

    def test_wrong_size_resampled(self) -> None:
        """Test that off-size frames are scaled to the output size."""
        adapter = PixelBufferAdapter(16, 8)
        buffer = adapter.convert(Image.new("RGB", (32, 16), (9, 9, 9)))
        assert buffer.shape == (8, 16, 3)

    def test_other_modes_converted(self) -> None:
        """Test that grayscale input becomes RGB."""
        buffer = PixelBufferAdapter(2, 2).convert(Image.new("L", (2, 2), 77))
        assert tuple(buffer[0, 0]) == (77, 77, 77)

    def test_invalid_size(self) -> None:
        """Test that empty buffers are rejected."""
        with pytest.raises(ValueError):
            PixelBufferAdapter(0, 10)
