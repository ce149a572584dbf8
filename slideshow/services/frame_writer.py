"""Frame writer: turns stills into timestamped frames under backpressure."""

import asyncio
import logging
from enum import Enum
from fractions import Fraction
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image

from slideshow.cancellation import CancellationToken
from slideshow.exceptions import EncoderTimeoutError, EncodingError, GenerationCancelledError
from slideshow.models import FrameEffect
from slideshow.protocols.encoder import EncoderStatus
from slideshow.services.compositor import composite_overlay
from slideshow.services.effects import apply_effect
from slideshow.services.pixel_buffer import PixelBufferAdapter
from slideshow.services.timeline import frames_for_duration

if TYPE_CHECKING:
    from slideshow.protocols.encoder import IVideoEncoder


class WriterState(str, Enum):
    """Lifecycle of a frame writer."""

    IDLE = "idle"
    WRITING = "writing"
    FINALIZING = "finalizing"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELLED = "cancelled"


class FrameWriter:
    """Writes still images to an encoder as a continuous frame sequence.

    State machine: IDLE -> WRITING -> FINALIZING -> FINISHED | FAILED, with
    CANCELLED reachable from any non-terminal state.

    The frame counter runs across every still written, so frame ``k`` of the
    run always carries presentation time ``k / fps``. Before each frame the
    writer polls the encoder's readiness and sleeps ``poll_interval`` seconds
    while it is busy, failing once ``ready_timeout`` elapses.
    """

    def __init__(
        self,
        encoder: "IVideoEncoder",
        *,
        fps: int,
        adapter: PixelBufferAdapter,
        poll_interval: float = 0.01,
        ready_timeout: float = 30.0,
        cancel_token: CancellationToken | None = None,
    ):
        """Initialize the frame writer.

        Args:
            encoder: Encoder session that has already been started.
            fps: Frames per second; one timestamp unit per frame.
            adapter: Converts composed bitmaps into encoder buffers.
            poll_interval: Seconds between readiness polls.
            ready_timeout: Maximum seconds to wait for one frame slot.
            cancel_token: Checked between frames.
        """
        if fps <= 0:
            raise ValueError(f"fps must be > 0, got {fps}")
        self._encoder = encoder
        self._fps = fps
        self._adapter = adapter
        self._poll_interval = poll_interval
        self._ready_timeout = ready_timeout
        self._cancel_token = cancel_token
        self._state = WriterState.IDLE
        self._frame_index = 0
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def frames_written(self) -> int:
        """Run-wide count of frames appended so far."""
        return self._frame_index

    def presentation_time(self, frame_index: int) -> Fraction:
        """Timestamp of run-wide frame ``frame_index``."""
        return Fraction(frame_index, self._fps)

    async def write_still(
        self,
        image: Image.Image,
        *,
        duration: float,
        effect: FrameEffect = FrameEffect.NONE,
        overlay: Image.Image | None = None,
    ) -> int:
        """Emit ``floor(duration * fps)`` frames of ``image``.

        Frame ``i`` of the still is rendered with ``effect`` at progress
        ``i / frame_count``. The overlay, if any, is drawn unchanged on top
        of every transformed frame.

        Args:
            image: The still to animate.
            duration: Seconds the still is on screen.
            effect: Effect applied per frame.
            overlay: Static RGBA overlay composited on each frame.

        Returns:
            The run-wide frame count after this still.

        Raises:
            EncodingError: If the encoder fails or rejects a frame.
            EncoderTimeoutError: If the encoder stays busy too long.
            GenerationCancelledError: If the cancel token is set.
        """
        if self._state not in (WriterState.IDLE, WriterState.WRITING):
            raise EncodingError(f"Cannot write frames in state {self._state.value}")

        frame_count = frames_for_duration(duration, self._fps)
        if frame_count == 0:
            return self._frame_index

        if self._state == WriterState.IDLE:
            self._encoder.start_session(Fraction(0))
            self._state = WriterState.WRITING
            self.logger.debug("Encoder session started at 0")

        try:
            for i in range(frame_count):
                self._check_cancelled()
                await self._wait_until_ready()

                frame = apply_effect(image, effect, i / frame_count)
                if overlay is not None:
                    frame = composite_overlay(overlay, frame)
                buffer = self._adapter.convert(frame)

                if not self._encoder.append(buffer, self.presentation_time(self._frame_index)):
                    raise EncodingError(
                        self._encoder.error or "Encoder rejected frame",
                        frame_index=self._frame_index,
                    )
                self._frame_index += 1
        except GenerationCancelledError:
            raise
        except EncodingError:
            self._state = WriterState.FAILED
            raise

        return self._frame_index

    async def finish(self) -> Path:
        """Mark input complete and wait for the encoder to flush.

        Returns:
            The finished output file.

        Raises:
            EncodingError: With the encoder's own message if it failed.
        """
        if self._state not in (WriterState.IDLE, WriterState.WRITING):
            raise EncodingError(f"Cannot finish in state {self._state.value}")
        if self._state == WriterState.IDLE:
            self._encoder.start_session(Fraction(0))

        self._state = WriterState.FINALIZING
        self._encoder.mark_as_finished()
        await self._encoder.finish_writing()

        if self._encoder.status != EncoderStatus.COMPLETED:
            self._state = WriterState.FAILED
            raise EncodingError(
                self._encoder.error or f"Encoder finished with status {self._encoder.status.value}",
                frame_index=self._frame_index,
            )

        self._state = WriterState.FINISHED
        self.logger.info("Finished writing %d frames", self._frame_index)
        return self._encoder.output_path

    async def cancel(self) -> None:
        """Abort the encoder session and discard the partial file."""
        if self._state in (WriterState.FINISHED, WriterState.CANCELLED):
            return
        await self._encoder.cancel_writing()
        self._state = WriterState.CANCELLED
        self.logger.info("Cancelled after %d frames", self._frame_index)

    def _check_cancelled(self) -> None:
        if self._cancel_token is not None:
            self._cancel_token.raise_if_cancelled(frames_written=self._frame_index)

    async def _wait_until_ready(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._ready_timeout
        while not self._encoder.is_ready_for_more_media_data:
            if self._encoder.status == EncoderStatus.FAILED:
                raise EncodingError(
                    self._encoder.error or "Encoder failed",
                    frame_index=self._frame_index,
                )
            if loop.time() >= deadline:
                raise EncoderTimeoutError(
                    f"Encoder not ready after {self._ready_timeout:.2f}s",
                    frame_index=self._frame_index,
                    waited=self._ready_timeout,
                )
            await asyncio.sleep(self._poll_interval)
            self._check_cancelled()
