"""Pydantic models for slideshow domain entities."""

import io
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Sequence

from PIL import Image, ImageOps
from pydantic import BaseModel, ConfigDict, Field

from slideshow.exceptions import SlideDecodeError


class SlideStyle(str, Enum):
    """How a photo slide is framed."""

    POLAROID = "polaroid"
    FULLSCREEN = "fullscreen"


class FrameEffect(str, Enum):
    """Per-frame visual transform applied to a still."""

    NONE = "none"
    FADE_IN = "fade_in"
    FADE_OUT = "fade_out"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    PAN_LEFT = "pan_left"
    PAN_RIGHT = "pan_right"


class BlockKind(str, Enum):
    """Kind of a timeline block."""

    TITLE = "title"
    PHOTO = "photo"
    END = "end"


class CorruptSlidePolicy(str, Enum):
    """What to do with a slide whose image cannot be decoded."""

    SKIP = "skip"
    FAIL = "fail"


class GenerationStatus(str, Enum):
    """Terminal status of a generation run."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class VideoConfig(BaseModel):
    """Output geometry and timing, constant for one generation run."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(750, gt=0, description="Frame width in pixels")
    height: int = Field(1334, gt=0, description="Frame height in pixels")
    fps: int = Field(24, gt=0, description="Frames per second")
    photo_duration: float = Field(4.0, ge=0.0, description="Seconds per photo slide")
    title_duration: float = Field(4.0, ge=0.0, description="Seconds for the title card")
    end_duration: float = Field(4.0, ge=0.0, description="Seconds for the end card")
    transition_duration: float = Field(
        1.0,
        ge=0.0,
        description="Reserved; no effect currently uses it",
    )

    @property
    def size(self) -> tuple[int, int]:
        """Frame size as (width, height)."""
        return (self.width, self.height)


def format_medium_date(value: datetime) -> str:
    """Format a date like ``Oct 3, 2026``."""
    return f"{value:%b} {value.day}, {value.year}"


class Slide(BaseModel):
    """One photograph to render, with its caption and metadata.

    ``image`` may be a decoded Pillow image, encoded image bytes, or a path
    to an image file. Encoded sources are decoded by :meth:`load_image`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    image: Image.Image | Path | bytes = Field(..., description="Photo bitmap or encoded source")
    caption: str = Field("", description="Caption drawn with the photo")
    captured_at: datetime | None = Field(None, description="When the photo was taken")
    location: str | None = Field(None, description="Where the photo was taken (unused)")

    def load_image(self) -> Image.Image:
        """Decode the slide's image into an RGB(A) Pillow image.

        Returns:
            A fully loaded Pillow image.

        Raises:
            SlideDecodeError: If the source cannot be decoded.
        """
        try:
            if isinstance(self.image, Image.Image):
                image = self.image
                image.load()
            elif isinstance(self.image, bytes):
                image = Image.open(io.BytesIO(self.image))
                image.load()
            else:
                with Image.open(self.image) as opened:
                    opened.load()
                    image = opened.copy()
            image = ImageOps.exif_transpose(image)
        except (OSError, ValueError, SyntaxError) as e:
            raise SlideDecodeError(f"Failed to decode image for '{self.caption}': {e}") from e

        if image.width == 0 or image.height == 0:
            raise SlideDecodeError(f"Image for '{self.caption}' has no pixels")
        if image.mode not in ("RGB", "RGBA"):
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        return image


class DateRange(BaseModel):
    """Span between the earliest and latest capture dates."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @classmethod
    def from_slides(cls, slides: Sequence[Slide]) -> "DateRange | None":
        """Compute the capture-date span, or None if no slide is dated."""
        dates = [s.captured_at for s in slides if s.captured_at is not None]
        if not dates:
            return None
        return cls(start=min(dates), end=max(dates))

    def format(self) -> str:
        """Human-readable range, collapsed to one date for a single day."""
        if self.start.date() == self.end.date():
            return format_medium_date(self.start)
        return f"{format_medium_date(self.start)} – {format_medium_date(self.end)}"


class TimelineEntry(BaseModel):
    """A single planned block of the video."""

    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    duration: float = Field(..., ge=0.0, description="Block duration in seconds")
    frame_count: int = Field(..., ge=0, description="floor(duration * fps)")
    effect: FrameEffect = FrameEffect.NONE
    style: SlideStyle | None = Field(None, description="Photo slide style (photo blocks only)")
    slide_index: int | None = Field(None, description="Index into the input slides (photo blocks only)")
    rotation: float = Field(0.0, description="Polaroid tilt in degrees")


class Timeline(BaseModel):
    """Ordered plan of every block in a run."""

    model_config = ConfigDict(frozen=True)

    fps: int = Field(..., gt=0)
    entries: list[TimelineEntry] = Field(default_factory=list)

    @property
    def total_frames(self) -> int:
        """Frames across all blocks, used to normalize progress."""
        return sum(entry.frame_count for entry in self.entries)

    @property
    def photo_entries(self) -> list[TimelineEntry]:
        """Photo blocks in timeline order."""
        return [e for e in self.entries if e.kind == BlockKind.PHOTO]

    @property
    def styles(self) -> list[SlideStyle]:
        """Style sequence of the photo blocks."""
        return [e.style for e in self.photo_entries if e.style is not None]


class GenerationResult(BaseModel):
    """Outcome of one generate() call."""

    run_id: str = Field(..., description="Unique run identifier")
    status: GenerationStatus = Field(..., description="Terminal status")
    output_path: Path | None = Field(None, description="Playable video file on success")
    error_kind: str | None = Field(None, description="Exception class name on failure")
    error_message: str | None = Field(None, description="Human-readable failure message")
    frames_written: int = Field(0, ge=0, description="Frames appended to the encoder")
    skipped_slides: list[int] = Field(
        default_factory=list,
        description="Indices of slides dropped because their image failed to decode",
    )
    audio_muxed: bool = Field(False, description="Whether the audio track made it into the output")

    @property
    def succeeded(self) -> bool:
        return self.status == GenerationStatus.COMPLETED
