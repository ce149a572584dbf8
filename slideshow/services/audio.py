"""Audio muxing: loop a track to the video's length and merge it in."""

import asyncio
import logging
import math
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from slideshow.constants import MUXED_OUTPUT_PREFIX, OUTPUT_SUFFIX
from slideshow.exceptions import AudioMuxError

if TYPE_CHECKING:
    from config.settings import Settings
    from slideshow.protocols.audio_muxer import IAudioMuxer

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


@dataclass(frozen=True)
class AudioSegment:
    """One insertion of the audio asset into the output timeline.

    Each segment plays the asset from its beginning for ``duration`` seconds,
    starting at ``start`` on the video timeline.
    """

    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


def plan_audio_segments(video_duration: float, audio_duration: float) -> list[AudioSegment]:
    """Lay copies of the audio back to back until the video is covered.

    The last copy is truncated to exactly fill the remainder, giving
    ``ceil(video_duration / audio_duration)`` gapless segments.

    Args:
        video_duration: Length of the video in seconds.
        audio_duration: Length of the audio asset in seconds.

    Returns:
        Segments in timeline order (empty for a zero-length video).

    Raises:
        AudioMuxError: If the audio asset has no duration.
    """
    if audio_duration <= 0:
        raise AudioMuxError(f"Audio duration must be positive, got {audio_duration}")
    if video_duration <= 0:
        return []

    count = max(1, math.ceil(video_duration / audio_duration - _EPSILON))
    segments = []
    for i in range(count):
        start = i * audio_duration
        remaining = video_duration - start
        if remaining <= _EPSILON:
            break
        segments.append(AudioSegment(start=start, duration=min(audio_duration, remaining)))
    return segments


def _muxed_output_path(video_path: Path) -> Path:
    return video_path.parent / f"{MUXED_OUTPUT_PREFIX}_{uuid.uuid4().hex}{OUTPUT_SUFFIX}"


class AudioMuxer:
    """Merges a looped audio asset into a finished video using MoviePy."""

    def __init__(self, settings: "Settings"):
        """Initialize the audio muxer.

        Args:
            settings: Application settings (codecs).
        """
        self._settings = settings

    async def mux(self, video_path: Path, audio_path: Path) -> Path:
        """Produce a new video with the audio looped over its full length.

        The silent input is deleted once the new file is written.

        Args:
            video_path: Finished silent video.
            audio_path: Audio asset.

        Returns:
            Path to the new video file.

        Raises:
            AudioMuxError: If the asset is missing or the export fails.
        """
        video_path = Path(video_path)
        audio_path = Path(audio_path)
        if not audio_path.is_file():
            raise AudioMuxError(f"Audio file not found: {audio_path}", audio_path=str(audio_path))

        output_path = _muxed_output_path(video_path)
        logger.info("Muxing audio %s into %s", audio_path.name, video_path.name)

        try:
            await asyncio.to_thread(self._export, video_path, audio_path, output_path)
        except AudioMuxError:
            output_path.unlink(missing_ok=True)
            raise
        except Exception as e:
            output_path.unlink(missing_ok=True)
            raise AudioMuxError(f"Audio export failed: {e}", audio_path=str(audio_path)) from e

        video_path.unlink(missing_ok=True)
        logger.info("Muxed video saved to: %s", output_path)
        return output_path

    def _export(self, video_path: Path, audio_path: Path, output_path: Path) -> None:
        from moviepy import AudioFileClip, CompositeAudioClip, VideoFileClip

        video = VideoFileClip(str(video_path))
        audio = AudioFileClip(str(audio_path))
        try:
            segments = plan_audio_segments(video.duration, audio.duration)
            logger.debug(
                "Looping %.2fs audio over %.2fs video in %d segments",
                audio.duration,
                video.duration,
                len(segments),
            )
            track = CompositeAudioClip(
                [audio.subclipped(0, seg.duration).with_start(seg.start) for seg in segments]
            ).with_duration(video.duration)

            video.with_audio(track).write_videofile(
                str(output_path),
                fps=video.fps,
                codec=self._settings.video_codec,
                audio_codec=self._settings.audio_codec,
                logger=None,
            )
        finally:
            audio.close()
            video.close()


class MockAudioMuxer:
    """Audio muxer for debug runs and tests.

    Copies the video to a new file instead of encoding, or raises
    ``AudioMuxError`` when ``fail_with`` is set.
    """

    def __init__(self, *, fail_with: str | None = None):
        self.fail_with = fail_with
        self.calls: list[tuple[Path, Path]] = []

    async def mux(self, video_path: Path, audio_path: Path) -> Path:
        self.calls.append((Path(video_path), Path(audio_path)))
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise AudioMuxError(self.fail_with, audio_path=str(audio_path))

        output_path = _muxed_output_path(Path(video_path))
        shutil.copyfile(video_path, output_path)
        Path(video_path).unlink(missing_ok=True)
        return output_path


async def mux_with_fallback(
    muxer: "IAudioMuxer",
    video_path: Path,
    audio_path: Path | None,
) -> tuple[Path, bool]:
    """Try to add audio, falling back to the silent video on failure.

    Args:
        muxer: Audio muxer to use.
        video_path: Finished silent video.
        audio_path: Audio asset, or None to skip muxing.

    Returns:
        Tuple of (final video path, whether audio was muxed).
    """
    if audio_path is None:
        return video_path, False

    try:
        return await muxer.mux(video_path, audio_path), True
    except AudioMuxError as e:
        logger.warning("Audio muxing failed, keeping silent video: %s", e)
        return video_path, False
