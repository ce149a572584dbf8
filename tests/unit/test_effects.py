"""Unit tests for the effect engine and overlay compositing."""

import pytest
from PIL import Image

from slideshow.models import FrameEffect
from slideshow.services.compositor import composite_overlay
from slideshow.services.effects import (
    apply_effect,
    effect_geometry,
    fade_in_alpha,
    fade_out_alpha,
)

SIZE = (100, 150)


class TestFadeCurves:
    """Tests for fade opacity curves."""

    def test_fade_in_endpoints(self) -> None:
        """Test that fade-in starts transparent and is opaque after a third."""
        assert fade_in_alpha(0.0) == 0.0
        assert fade_in_alpha(1 / 3) == pytest.approx(1.0)
        assert fade_in_alpha(0.9) == 1.0

    def test_fade_in_non_decreasing(self) -> None:
        """Test that fade-in never decreases."""
        values = [fade_in_alpha(i / 100) for i in range(100)]
        assert values == sorted(values)
        assert all(0.0 <= v <= 1.0 for v in values)

    def test_fade_out_holds_then_drops(self) -> None:
        """Test that fade-out is opaque until 0.66 then drops to zero."""
        assert fade_out_alpha(0.0) == 1.0
        assert fade_out_alpha(0.66) == pytest.approx(1.0)
        assert fade_out_alpha(1.0) == 0.0
        values = [fade_out_alpha(i / 100) for i in range(100)]
        assert values == sorted(values, reverse=True)


class TestEffectGeometry:
    """Tests for per-effect affine parameters."""

    def test_none_is_identity(self) -> None:
        """Test that NONE leaves the frame untouched."""
        geometry = effect_geometry(FrameEffect.NONE, 0.5, SIZE)
        assert (geometry.scale, geometry.translate_x, geometry.translate_y, geometry.alpha) == (
            1.0,
            0.0,
            0.0,
            1.0,
        )

    def test_zoom_in_scale_range(self) -> None:
        """Test that zoom-in grows from 100% to 115%."""
        assert effect_geometry(FrameEffect.ZOOM_IN, 0.0, SIZE).scale == pytest.approx(1.0)
        assert effect_geometry(FrameEffect.ZOOM_IN, 1.0, SIZE).scale == pytest.approx(1.15)

    def test_zoom_out_scale_range(self) -> None:
        """Test that zoom-out shrinks from 115% to 100%."""
        assert effect_geometry(FrameEffect.ZOOM_OUT, 0.0, SIZE).scale == pytest.approx(1.15)
        assert effect_geometry(FrameEffect.ZOOM_OUT, 1.0, SIZE).scale == pytest.approx(1.0)

    @pytest.mark.parametrize("effect", [FrameEffect.ZOOM_IN, FrameEffect.ZOOM_OUT])
    @pytest.mark.parametrize("progress", [0.0, 0.25, 0.5, 0.99])
    def test_zoom_is_centered(self, effect: FrameEffect, progress: float) -> None:
        """Test that the overflow is split evenly on opposite sides."""
        width, height = SIZE
        g = effect_geometry(effect, progress, SIZE)
        left = -g.translate_x
        right = g.translate_x + width * g.scale - width
        top = -g.translate_y
        bottom = g.translate_y + height * g.scale - height
        assert left == pytest.approx(right)
        assert top == pytest.approx(bottom)

    def test_pan_directions(self) -> None:
        """Test that pans move the scaled image by up to a tenth of the width."""
        left = effect_geometry(FrameEffect.PAN_LEFT, 1.0, SIZE)
        right = effect_geometry(FrameEffect.PAN_RIGHT, 1.0, SIZE)
        assert left.scale == pytest.approx(1.1)
        assert left.translate_x == pytest.approx(10.0)
        assert right.translate_x == pytest.approx(-10.0)
        assert left.translate_y == right.translate_y == 0.0


class TestApplyEffect:
    """Tests for rendering effects onto frames."""

    @pytest.fixture
    def still(self) -> Image.Image:
        return Image.new("RGB", SIZE, (250, 250, 250))

    def test_none_returns_input(self, still: Image.Image) -> None:
        """Test that NONE is a no-op returning the same object."""
        assert apply_effect(still, FrameEffect.NONE, 0.4) is still

    @pytest.mark.parametrize("effect", list(FrameEffect))
    def test_output_size_preserved(self, still: Image.Image, effect: FrameEffect) -> None:
        """Test that every effect keeps the frame size."""
        assert apply_effect(still, effect, 0.5).size == SIZE

    def test_fade_in_starts_black(self, still: Image.Image) -> None:
        """Test that the first fade-in frame is black."""
        frame = apply_effect(still, FrameEffect.FADE_IN, 0.0)
        assert frame.getpixel((50, 75))[:3] == (0, 0, 0)

    def test_fade_out_midway_is_dimmed(self, still: Image.Image) -> None:
        """Test that fade-out blends toward black."""
        frame = apply_effect(still, FrameEffect.FADE_OUT, 0.8)
        red = frame.getpixel((50, 75))[0]
        assert 0 < red < 250

    def test_pan_left_exposes_black_edge(self, still: Image.Image) -> None:
        """Test that uncovered regions are opaque black."""
        frame = apply_effect(still, FrameEffect.PAN_LEFT, 0.9)
        assert frame.getpixel((2, 75)) == (0, 0, 0, 255)
        assert frame.getpixel((60, 75))[:3] == (250, 250, 250)

    def test_zoom_output_opaque(self, still: Image.Image) -> None:
        """Test that zoomed frames are fully opaque."""
        frame = apply_effect(still, FrameEffect.ZOOM_IN, 0.5)
        assert frame.getchannel("A").getextrema() == (255, 255)

    def test_is_deterministic(self, still: Image.Image) -> None:
        """Test that equal inputs give identical output."""
        a = apply_effect(still, FrameEffect.ZOOM_OUT, 0.3)
        b = apply_effect(still, FrameEffect.ZOOM_OUT, 0.3)
        assert a.tobytes() == b.tobytes()


class TestCompositeOverlay:
    """Tests for overlay compositing."""

    def test_transparent_overlay_keeps_base(self) -> None:
        """Test that zero-alpha overlay pixels leave the base untouched."""
        base = Image.new("RGB", (10, 10), (10, 20, 30))
        overlay = Image.new("RGBA", (10, 10), (255, 0, 0, 0))
        frame = composite_overlay(overlay, base)
        assert frame.getpixel((5, 5)) == (10, 20, 30, 255)

    def test_opaque_overlay_wins(self) -> None:
        """Test that opaque overlay pixels replace the base."""
        base = Image.new("RGBA", (10, 10), (10, 20, 30, 255))
        overlay = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
        overlay.putpixel((1, 1), (255, 0, 0, 255))
        frame = composite_overlay(overlay, base)
        assert frame.getpixel((1, 1)) == (255, 0, 0, 255)
        assert base.getpixel((1, 1)) == (10, 20, 30, 255)

    def test_size_mismatch_raises(self) -> None:
        """Test that mismatched sizes are rejected."""
        with pytest.raises(ValueError, match="does not match"):
            composite_overlay(Image.new("RGBA", (5, 5)), Image.new("RGB", (6, 6)))
