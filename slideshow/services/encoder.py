"""Video encoder sessions backed by ffmpeg."""

import asyncio
import logging
import queue
import threading
from fractions import Fraction
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from slideshow.exceptions import EncodingError, SetupError
from slideshow.models import VideoConfig
from slideshow.protocols.encoder import EncoderStatus

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

_DRAIN_POLL_SECONDS = 0.05
_CANCEL_JOIN_SECONDS = 5.0


class _BaseEncoder:
    """Timestamp and session bookkeeping shared by encoder implementations."""

    def __init__(self, output_path: Path, config: VideoConfig):
        self._output_path = Path(output_path)
        self._config = config
        self._status = EncoderStatus.UNKNOWN
        self._error: str | None = None
        self._session_start: Fraction | None = None
        self._last_time: Fraction | None = None
        self._input_finished = False
        self.frames_appended = 0

    @property
    def output_path(self) -> Path:
        return self._output_path

    @property
    def status(self) -> EncoderStatus:
        return self._status

    @property
    def error(self) -> str | None:
        return self._error

    def start_session(self, at: Fraction = Fraction(0)) -> None:
        if self._status != EncoderStatus.WRITING:
            raise EncodingError(f"Cannot start session in status {self._status.value}")
        self._session_start = Fraction(at)

    def _check_append(self, frame: np.ndarray, presentation_time: Fraction) -> None:
        if self._status != EncoderStatus.WRITING:
            raise EncodingError(
                f"Cannot append frame in status {self._status.value}",
                frame_index=self.frames_appended,
            )
        if self._session_start is None:
            raise EncodingError("Session not started", frame_index=self.frames_appended)
        if self._input_finished:
            raise EncodingError("Input already marked as finished", frame_index=self.frames_appended)
        expected = (self._config.height, self._config.width, 3)
        if frame.shape != expected or frame.dtype != np.uint8:
            raise EncodingError(
                f"Frame has shape {frame.shape} ({frame.dtype}), expected {expected} (uint8)",
                frame_index=self.frames_appended,
            )
        if presentation_time < self._session_start:
            raise EncodingError(
                f"Presentation time {presentation_time} precedes session start {self._session_start}",
                frame_index=self.frames_appended,
            )
        if self._last_time is not None and presentation_time <= self._last_time:
            raise EncodingError(
                f"Presentation time {presentation_time} does not follow {self._last_time}",
                frame_index=self.frames_appended,
            )

    def _record_append(self, presentation_time: Fraction) -> None:
        self._last_time = presentation_time
        self.frames_appended += 1


class FFmpegVideoEncoder(_BaseEncoder):
    """H.264 encoder session feeding ffmpeg through a bounded queue.

    ``append`` never blocks. Frames go into a queue of ``encoder_queue_size``
    slots that a single drain thread writes into moviepy's
    ``FFMPEG_VideoWriter``. The session reports ready only while the queue
    has free capacity, which gives the frame writer real backpressure.
    """

    def __init__(self, output_path: Path, *, config: VideoConfig, settings: "Settings"):
        """Initialize the encoder session.

        Args:
            output_path: Destination ``.mp4`` file.
            config: Output frame size and fps.
            settings: Application settings (codec, bitrate, queue size).
        """
        super().__init__(output_path, config)
        self._settings = settings
        self._queue: queue.Queue[np.ndarray] = queue.Queue(maxsize=settings.encoder_queue_size)
        self._writer = None
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()
        self._finished_event = threading.Event()

    @property
    def is_ready_for_more_media_data(self) -> bool:
        return self._status == EncoderStatus.WRITING and not self._queue.full()

    def start_writing(self) -> None:
        if self._status != EncoderStatus.UNKNOWN:
            raise SetupError("Encoder session already started", output_path=str(self._output_path))

        if not self._output_path.parent.is_dir():
            raise SetupError(
                f"Output directory does not exist: {self._output_path.parent}",
                output_path=str(self._output_path),
            )

        try:
            from moviepy.video.io.ffmpeg_writer import FFMPEG_VideoWriter
        except ImportError as e:
            raise SetupError(
                "moviepy not installed. Install with: pip install moviepy",
                output_path=str(self._output_path),
            ) from e

        try:
            self._writer = FFMPEG_VideoWriter(
                str(self._output_path),
                self._config.size,
                self._config.fps,
                codec=self._settings.video_codec,
                bitrate=self._settings.video_bitrate,
            )
        except Exception as e:
            self._status = EncoderStatus.FAILED
            self._error = str(e)
            raise SetupError(f"Failed to start encoder: {e}", output_path=str(self._output_path)) from e

        self._status = EncoderStatus.WRITING
        self._thread = threading.Thread(target=self._drain, name="ffmpeg-drain", daemon=True)
        self._thread.start()
        logger.info(
            "Encoder started: %s (%dx%d @ %d fps, %s)",
            self._output_path,
            self._config.width,
            self._config.height,
            self._config.fps,
            self._settings.video_codec,
        )

    def append(self, frame: np.ndarray, presentation_time: Fraction) -> bool:
        self._check_append(frame, presentation_time)
        try:
            self._queue.put_nowait(frame)
        except queue.Full:
            return False
        self._record_append(presentation_time)
        return True

    def mark_as_finished(self) -> None:
        self._input_finished = True
        self._finished_event.set()

    async def finish_writing(self) -> None:
        if self._thread is None:
            raise EncodingError("Encoder session was never started")
        if not self._input_finished:
            self.mark_as_finished()

        await asyncio.to_thread(self._thread.join)
        await asyncio.to_thread(self._close_writer)

        if self._status == EncoderStatus.WRITING:
            if self._output_path.exists() and self._output_path.stat().st_size > 0:
                self._status = EncoderStatus.COMPLETED
                logger.info("Encoder finished: %d frames -> %s", self.frames_appended, self._output_path)
            else:
                self._status = EncoderStatus.FAILED
                self._error = f"Encoder produced no output at {self._output_path}"

    async def cancel_writing(self) -> None:
        if self._status in (EncoderStatus.COMPLETED, EncoderStatus.CANCELLED):
            return
        self._status = EncoderStatus.CANCELLED
        self._stop.set()

        if self._thread is not None:
            await asyncio.to_thread(self._thread.join, _CANCEL_JOIN_SECONDS)
            if self._thread.is_alive():
                # The drain thread owns the writer until write_frame returns
                logger.warning("ffmpeg still busy after %.1fs, output removed on drain exit", _CANCEL_JOIN_SECONDS)
                return

        await asyncio.to_thread(self._discard_output)
        logger.info("Encoder cancelled, removed %s", self._output_path)

    def _drain(self) -> None:
        """Write queued frames into ffmpeg until input is finished."""
        while not self._stop.is_set():
            try:
                frame = self._queue.get(timeout=_DRAIN_POLL_SECONDS)
            except queue.Empty:
                if self._finished_event.is_set():
                    return
                continue
            try:
                self._writer.write_frame(frame)
            except Exception as e:
                logger.error("ffmpeg rejected frame: %s", e)
                self._error = str(e)
                if self._status == EncoderStatus.WRITING:
                    self._status = EncoderStatus.FAILED
                return
        self._discard_output()

    def _discard_output(self) -> None:
        self._close_writer()
        self._output_path.unlink(missing_ok=True)

    def _close_writer(self) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        try:
            writer.close()
        except Exception as e:
            if self._status == EncoderStatus.WRITING:
                self._error = str(e)
                self._status = EncoderStatus.FAILED
            logger.warning("Error closing ffmpeg writer: %s", e)


class MockVideoEncoder(_BaseEncoder):
    """In-memory encoder for debug runs and tests.

    Records presentation times instead of encoding. It can simulate an
    encoder that is busy for ``busy_polls`` readiness checks after each frame,
    a setup failure, a mid-stream failure, or a failure while finishing.
    """

    def __init__(
        self,
        output_path: Path,
        *,
        config: VideoConfig,
        busy_polls: int = 0,
        never_ready: bool = False,
        fail_on_setup: str | None = None,
        fail_after_frames: int | None = None,
        fail_on_finish: str | None = None,
        keep_frames: bool = False,
    ):
        super().__init__(output_path, config)
        self.busy_polls = busy_polls
        self.never_ready = never_ready
        self.fail_on_setup = fail_on_setup
        self.fail_after_frames = fail_after_frames
        self.fail_on_finish = fail_on_finish
        self.keep_frames = keep_frames
        self.presentation_times: list[Fraction] = []
        self.frames: list[np.ndarray] = []
        self.poll_count = 0
        self.not_ready_count = 0
        self._busy_remaining = 0

    @property
    def session_start(self) -> Fraction | None:
        return self._session_start

    @property
    def is_ready_for_more_media_data(self) -> bool:
        self.poll_count += 1
        if self._status != EncoderStatus.WRITING or self.never_ready:
            self.not_ready_count += 1
            return False
        if self._busy_remaining > 0:
            self._busy_remaining -= 1
            self.not_ready_count += 1
            return False
        return True

    def start_writing(self) -> None:
        if self.fail_on_setup is not None:
            self._status = EncoderStatus.FAILED
            self._error = self.fail_on_setup
            raise SetupError(self.fail_on_setup, output_path=str(self._output_path))
        self._status = EncoderStatus.WRITING

    def append(self, frame: np.ndarray, presentation_time: Fraction) -> bool:
        self._check_append(frame, presentation_time)
        if self.fail_after_frames is not None and self.frames_appended >= self.fail_after_frames:
            self._status = EncoderStatus.FAILED
            self._error = f"Simulated encoder failure after {self.frames_appended} frames"
            return False
        self.presentation_times.append(presentation_time)
        if self.keep_frames:
            self.frames.append(frame.copy())
        self._record_append(presentation_time)
        self._busy_remaining = self.busy_polls
        return True

    def mark_as_finished(self) -> None:
        self._input_finished = True

    async def finish_writing(self) -> None:
        await asyncio.sleep(0)
        if self._status != EncoderStatus.WRITING:
            return
        if self.fail_on_finish is not None:
            self._status = EncoderStatus.FAILED
            self._error = self.fail_on_finish
            return
        self._output_path.write_bytes(f"mock video: {self.frames_appended} frames\n".encode())
        self._status = EncoderStatus.COMPLETED

    async def cancel_writing(self) -> None:
        await asyncio.sleep(0)
        self._output_path.unlink(missing_ok=True)
        self._status = EncoderStatus.CANCELLED
