"""Service implementations for slideshow rendering and encoding."""

from slideshow.services.audio import AudioMuxer, MockAudioMuxer
from slideshow.services.encoder import FFmpegVideoEncoder, MockVideoEncoder
from slideshow.services.frame_writer import FrameWriter, WriterState
from slideshow.services.pixel_buffer import PixelBufferAdapter
from slideshow.services.renderers import PillowSlideRenderer
from slideshow.services.timeline import TimelineBuilder

__all__ = [
    # Encoding
    "FFmpegVideoEncoder",
    "MockVideoEncoder",
    "FrameWriter",
    "WriterState",
    "PixelBufferAdapter",
    # Audio
    "AudioMuxer",
    "MockAudioMuxer",
    # Rendering
    "PillowSlideRenderer",
    "TimelineBuilder",
]
