"""Protocol interfaces for slideshow services."""

from slideshow.protocols.audio_muxer import IAudioMuxer
from slideshow.protocols.encoder import EncoderStatus, IVideoEncoder
from slideshow.protocols.renderer import ISlideRenderer

__all__ = [
    "EncoderStatus",
    "IAudioMuxer",
    "ISlideRenderer",
    "IVideoEncoder",
]
