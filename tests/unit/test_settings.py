"""Unit tests for settings and logging setup."""

import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from config.logging_setup import LOG_FORMAT, configure_logging
from config.settings import Settings
from slideshow.models import CorruptSlidePolicy


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self) -> None:
        """Test the documented defaults."""
        settings = Settings()
        assert (settings.video_width, settings.video_height, settings.video_fps) == (750, 1334, 24)
        assert settings.polaroid_percentage == 0.67
        assert settings.ready_timeout == 30.0
        assert settings.corrupt_slide_policy == CorruptSlidePolicy.SKIP
        assert settings.output_dir is None

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that SLIDESHOW_ variables override defaults."""
        monkeypatch.setenv("SLIDESHOW_VIDEO_FPS", "30")
        monkeypatch.setenv("SLIDESHOW_CORRUPT_SLIDE_POLICY", "fail")
        settings = Settings()
        assert settings.video_fps == 30
        assert settings.corrupt_slide_policy == CorruptSlidePolicy.FAIL

    @pytest.mark.parametrize(
        "kwargs",
        [{"polaroid_percentage": 1.2}, {"video_fps": 0}, {"ready_timeout": 0}, {"encoder_queue_size": 0}],
    )
    def test_bounds(self, kwargs: dict) -> None:
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            Settings(**kwargs)

    def test_video_config(self) -> None:
        """Test deriving the immutable video config."""
        config = Settings(video_width=320, video_height=480, video_fps=12, photo_duration=2.5).video_config()
        assert config.size == (320, 480)
        assert config.fps == 12
        assert config.photo_duration == 2.5


class TestConfigureLogging:
    """Tests for root logger setup."""

    @pytest.fixture(autouse=True)
    def reset_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delattr(logging.getLogger(), "_slideshow_logging_configured", raising=False)

    def test_configures_once(self) -> None:
        """Test that repeated calls do not reconfigure."""
        settings = Settings(log_level="debug")
        with patch("config.logging_setup.logging.basicConfig") as basic_config:
            configure_logging(settings)
            configure_logging(settings)

        basic_config.assert_called_once_with(level=logging.DEBUG, format=LOG_FORMAT, force=False)

    def test_force_reconfigures(self) -> None:
        """Test that force applies the configuration again."""
        with patch("config.logging_setup.logging.basicConfig") as basic_config:
            configure_logging(Settings())
            configure_logging(Settings(log_level="WARNING"), force=True)

        assert basic_config.call_count == 2
        assert basic_config.call_args.kwargs["level"] == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        """Test that a bogus level name does not break startup."""
        with patch("config.logging_setup.logging.basicConfig") as basic_config:
            configure_logging(Settings(log_level="chatty"))
        assert basic_config.call_args.kwargs["level"] == logging.INFO
