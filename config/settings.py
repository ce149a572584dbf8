"""Pydantic Settings configuration for slideshow generation."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from slideshow.models import CorruptSlidePolicy, VideoConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SLIDESHOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Video output
    video_width: int = Field(default=750, ge=16, le=7680, description="Output frame width in pixels")
    video_height: int = Field(default=1334, ge=16, le=7680, description="Output frame height in pixels")
    video_fps: int = Field(default=24, ge=1, le=120, description="Output video FPS")
    video_codec: str = Field(default="libx264", description="Video codec for encoding")
    audio_codec: str = Field(default="aac", description="Audio codec for the muxed container")
    video_bitrate: str | None = Field(
        default=None,
        description="Optional ffmpeg bitrate string (e.g. '4000k')",
    )

    # Timing
    photo_duration: float = Field(
        default=4.0,
        ge=0.0,
        le=60.0,
        description="Default seconds each photo stays on screen",
    )
    title_duration: float = Field(default=4.0, ge=0.0, le=60.0, description="Title card duration in seconds")
    end_duration: float = Field(default=4.0, ge=0.0, le=60.0, description="End card duration in seconds")
    transition_duration: float = Field(
        default=1.0,
        ge=0.0,
        le=10.0,
        description="Reserved transition duration in seconds (not used by any effect)",
    )

    # Timeline
    polaroid_percentage: float = Field(
        default=0.67,
        ge=0.0,
        le=1.0,
        description="Fraction of photo slides rendered as static polaroid frames",
    )
    polaroid_max_tilt: float = Field(
        default=6.0,
        ge=0.0,
        le=45.0,
        description="Maximum polaroid rotation in degrees (either direction)",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for effect selection and polaroid tilt (None = unseeded)",
    )

    # Frame writer
    ready_poll_interval: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Seconds to sleep between encoder readiness polls",
    )
    ready_timeout: float = Field(
        default=30.0,
        gt=0.0,
        le=3600.0,
        description="Maximum seconds to wait for the encoder to accept a frame",
    )
    encoder_queue_size: int = Field(
        default=8,
        ge=1,
        le=512,
        description="Frames buffered ahead of the ffmpeg process",
    )

    # Audio
    audio_path: str | None = Field(default=None, description="Default background audio track")

    # Storage
    output_dir: str | None = Field(
        default=None,
        description="Directory for generated videos (system temp dir if unset)",
    )

    # Policy
    corrupt_slide_policy: CorruptSlidePolicy = Field(
        default=CorruptSlidePolicy.SKIP,
        description="Skip or fail on slides whose image cannot be decoded",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    def video_config(self) -> VideoConfig:
        """Build the immutable per-run video configuration."""
        return VideoConfig(
            width=self.video_width,
            height=self.video_height,
            fps=self.video_fps,
            photo_duration=self.photo_duration,
            title_duration=self.title_duration,
            end_duration=self.end_duration,
            transition_duration=self.transition_duration,
        )
