"""Pytest configuration and shared fixtures."""

import io
import random
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from config.settings import Settings
from slideshow.models import Slide, VideoConfig


def make_image(size: tuple[int, int] = (120, 90), color: tuple[int, int, int] = (200, 40, 40)) -> Image.Image:
    """Create a solid-colour RGB test photo."""
    return Image.new("RGB", size, color)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Provide small, fast settings writing into a temp directory."""
    return Settings(
        video_width=64,
        video_height=96,
        video_fps=10,
        photo_duration=0.5,
        title_duration=0.3,
        end_duration=0.3,
        random_seed=42,
        ready_poll_interval=0.001,
        ready_timeout=1.0,
        output_dir=str(tmp_path),
    )


@pytest.fixture
def video_config(test_settings: Settings) -> VideoConfig:
    """Provide the video config derived from the test settings."""
    return test_settings.video_config()


@pytest.fixture
def rng() -> random.Random:
    """Provide a seeded random source."""
    return random.Random(1234)


@pytest.fixture
def sample_slides(tmp_path: Path) -> list[Slide]:
    """Provide three slides covering each image source kind."""
    photo_path = tmp_path / "beach.png"
    make_image((80, 120), (30, 90, 200)).save(photo_path)

    return [
        Slide(
            image=make_image(),
            caption="Red door",
            captured_at=datetime(2026, 10, 3, 9, 30),
        ),
        Slide(
            image=encode_png(make_image((100, 100), (40, 180, 60))),
            caption="Green leaf",
            captured_at=datetime(2026, 10, 4, 14, 0),
        ),
        Slide(image=photo_path, caption="Blue sea"),
    ]


@pytest.fixture
def corrupt_slide() -> Slide:
    """Provide a slide whose bytes are not an image."""
    return Slide(image=b"definitely not a png", caption="Broken")
