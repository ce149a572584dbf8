"""Unit tests for the Pillow slide renderers."""

from datetime import datetime

import pytest
from PIL import Image

from slideshow.models import DateRange
from slideshow.services.renderers import PillowSlideRenderer

SIZE = (120, 200)


@pytest.fixture
def renderer() -> PillowSlideRenderer:
    return PillowSlideRenderer()


@pytest.fixture
def photos() -> list[Image.Image]:
    return [Image.new("RGB", (60 + i * 10, 40), (40 * i, 100, 200)) for i in range(10)]


class TestCards:
    """Tests for title and end cards."""

    def test_title_card_size(self, renderer: PillowSlideRenderer, photos: list[Image.Image]) -> None:
        """Test that the title card fills the frame."""
        card = renderer.render_title_card(
            title="Autumn Scavenger Hunt",
            subtitle="Find everything orange",
            date_range=DateRange(start=datetime(2026, 10, 1), end=datetime(2026, 10, 3)),
            photos=photos,
            size=SIZE,
        )
        assert card.size == SIZE
        assert card.mode == "RGB"

    def test_title_card_without_extras(self, renderer: PillowSlideRenderer) -> None:
        """Test a bare title with no photos, subtitle, or dates."""
        card = renderer.render_title_card(title="Hunt", subtitle=None, date_range=None, photos=[], size=SIZE)
        assert card.size == SIZE

    def test_end_card_size(self, renderer: PillowSlideRenderer, photos: list[Image.Image]) -> None:
        """Test that the end card fills the frame."""
        card = renderer.render_end_card(item_count=1, title="Hunt", photos=photos[:3], size=SIZE)
        assert card.size == SIZE


class TestPhotoSlides:
    """Tests for polaroid, fullscreen and overlay rendering."""

    def test_polaroid_on_black(self, renderer: PillowSlideRenderer, photos: list[Image.Image]) -> None:
        """Test that the tilted card sits on a black frame."""
        frame = renderer.render_polaroid(
            image=photos[0],
            caption="A pumpkin",
            captured_at=datetime(2026, 10, 2),
            rotation=4.5,
            size=SIZE,
        )
        assert frame.size == SIZE
        assert frame.getpixel((0, 0)) == (0, 0, 0)
        assert frame.getpixel((SIZE[0] // 2, SIZE[1] // 2)) != (0, 0, 0)

    def test_fullscreen_covers_frame(self, renderer: PillowSlideRenderer) -> None:
        """Test aspect-fill with centre crop."""
        wide = Image.new("RGB", (400, 100), (10, 200, 30))
        frame = renderer.render_fullscreen(image=wide, size=SIZE)
        assert frame.size == SIZE
        for corner in [(0, 0), (SIZE[0] - 1, SIZE[1] - 1)]:
            assert frame.getpixel(corner) == pytest.approx((10, 200, 30), abs=2)

    def test_overlay_transparent_above_box(self, renderer: PillowSlideRenderer) -> None:
        """Test that only the bottom box is drawn."""
        overlay = renderer.render_text_overlay(
            caption="Red leaf",
            captured_at=datetime(2026, 10, 2),
            size=SIZE,
        )
        assert overlay.size == SIZE
        assert overlay.mode == "RGBA"
        assert overlay.getpixel((SIZE[0] // 2, 10))[3] == 0
        assert overlay.getpixel((SIZE[0] - 1, SIZE[1] - 1))[3] > 150
