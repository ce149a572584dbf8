"""Core domain logic for slideshow generation."""

from slideshow.exceptions import (
    AudioMuxError,
    EncoderTimeoutError,
    EncodingError,
    GenerationCancelledError,
    GenerationInProgressError,
    SetupError,
    SlideDecodeError,
    SlideshowError,
)
from slideshow.models import (
    BlockKind,
    CorruptSlidePolicy,
    FrameEffect,
    GenerationResult,
    GenerationStatus,
    Slide,
    SlideStyle,
    Timeline,
    TimelineEntry,
    VideoConfig,
)

__all__ = [
    # Models
    "BlockKind",
    "CorruptSlidePolicy",
    "FrameEffect",
    "GenerationResult",
    "GenerationStatus",
    "Slide",
    "SlideStyle",
    "Timeline",
    "TimelineEntry",
    "VideoConfig",
    # Exceptions
    "SlideshowError",
    "SetupError",
    "EncodingError",
    "EncoderTimeoutError",
    "AudioMuxError",
    "SlideDecodeError",
    "GenerationCancelledError",
    "GenerationInProgressError",
]
