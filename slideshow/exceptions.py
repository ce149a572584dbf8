"""Domain exceptions for slideshow generation."""


class SlideshowError(Exception):
    """Base exception for all slideshow errors."""

    def __init__(self, message: str, *, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class SetupError(SlideshowError):
    """Raised when the output encoder or file cannot be allocated."""

    def __init__(self, message: str, *, output_path: str | None = None):
        super().__init__(message, context={"output_path": output_path})
        self.output_path = output_path


class EncodingError(SlideshowError):
    """Raised when the encoder fails during or after writing."""

    def __init__(self, message: str, *, frame_index: int | None = None):
        super().__init__(message, context={"frame_index": frame_index})
        self.frame_index = frame_index


class EncoderTimeoutError(EncodingError):
    """Raised when the encoder stays busy longer than the readiness timeout."""

    def __init__(self, message: str, *, frame_index: int | None = None, waited: float = 0.0):
        super().__init__(message, frame_index=frame_index)
        self.context["waited"] = waited
        self.waited = waited


class AudioMuxError(SlideshowError):
    """Raised when the audio track cannot be merged into the video."""

    def __init__(self, message: str, *, audio_path: str | None = None):
        super().__init__(message, context={"audio_path": audio_path})
        self.audio_path = audio_path


class SlideDecodeError(SlideshowError):
    """Raised when a slide's image cannot be decoded into a bitmap."""

    def __init__(self, message: str, *, slide_index: int | None = None):
        super().__init__(message, context={"slide_index": slide_index})
        self.slide_index = slide_index


class GenerationCancelledError(SlideshowError):
    """Raised when a run observes its cancellation token."""

    def __init__(self, message: str = "Generation cancelled", *, frames_written: int = 0):
        super().__init__(message, context={"frames_written": frames_written})
        self.frames_written = frames_written


class GenerationInProgressError(SlideshowError):
    """Raised when generate() is called while a run is already active."""
