"""Generation orchestrator: turns an ordered photo list into a video file."""

import logging
import random
import tempfile
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Sequence

from PIL import Image

from slideshow.cancellation import CancellationToken
from slideshow.constants import (
    OUTPUT_PREFIX,
    OUTPUT_SUFFIX,
    PROGRESS_ENCODER_READY,
    PROGRESS_FRAMES_BASE,
    PROGRESS_FRAMES_WEIGHT,
    PROGRESS_PHOTOS_PREPARED,
    PROGRESS_STARTED,
    PROGRESS_TITLE_STARTED,
)
from slideshow.exceptions import (
    GenerationCancelledError,
    GenerationInProgressError,
    SlideDecodeError,
)
from slideshow.models import (
    BlockKind,
    CorruptSlidePolicy,
    DateRange,
    GenerationResult,
    GenerationStatus,
    Slide,
    SlideStyle,
    Timeline,
    TimelineEntry,
)
from slideshow.services.audio import AudioMuxer, mux_with_fallback
from slideshow.services.encoder import FFmpegVideoEncoder
from slideshow.services.frame_writer import FrameWriter
from slideshow.services.pixel_buffer import PixelBufferAdapter
from slideshow.services.renderers import PillowSlideRenderer
from slideshow.services.timeline import TimelineBuilder

if TYPE_CHECKING:
    from config.settings import Settings
    from slideshow.models import VideoConfig
    from slideshow.protocols import IAudioMuxer, ISlideRenderer, IVideoEncoder

EncoderFactory = Callable[[Path, "VideoConfig"], "IVideoEncoder"]
ProgressListener = Callable[[float], None]


@dataclass
class _Run:
    """Mutable state of one generate() call."""

    run_id: str
    title: str
    subtitle: str | None
    slides: Sequence[Slide]
    timeline: Timeline
    audio_path: Path | None
    cancel_token: CancellationToken
    images: dict[int, Image.Image] = field(default_factory=dict)
    skipped: list[int] = field(default_factory=list)
    writer: FrameWriter | None = None

    @property
    def frames_written(self) -> int:
        return self.writer.frames_written if self.writer is not None else 0


class SlideshowGenerator:
    """Orchestrates slideshow generation.

    Runs a strictly sequential pipeline:
    1. Encoder setup
    2. Photo preparation (decode, apply the corrupt-slide policy)
    3. Title card
    4. Photo slides in timeline order
    5. End card
    6. Finalization
    7. Audio mux (optional, falls back to the silent video)

    Progress is published through the read-only ``progress`` property and
    any listeners registered with ``add_progress_listener``.
    """

    def __init__(
        self,
        *,
        settings: "Settings",
        renderer: "ISlideRenderer | None" = None,
        encoder_factory: EncoderFactory | None = None,
        audio_muxer: "IAudioMuxer | None" = None,
        rng: random.Random | None = None,
    ):
        """Initialize the generator.

        Args:
            settings: Application settings.
            renderer: Static slide renderer (defaults to Pillow).
            encoder_factory: Builds an encoder session for an output path
                and video config (defaults to the ffmpeg encoder).
            audio_muxer: Audio muxer (defaults to the MoviePy muxer).
            rng: Random source for effects and tilt. Seeded from
                ``settings.random_seed`` when omitted.
        """
        self._settings = settings
        self._config = settings.video_config()
        self._renderer = renderer or PillowSlideRenderer()
        self._encoder_factory = encoder_factory or self._default_encoder
        self._audio_muxer = audio_muxer or AudioMuxer(settings)
        self._rng = rng or random.Random(settings.random_seed)
        self._timeline_builder = TimelineBuilder(
            self._config,
            rng=self._rng,
            max_tilt=settings.polaroid_max_tilt,
        )
        self._adapter = PixelBufferAdapter(self._config.width, self._config.height)
        self._listeners: list[ProgressListener] = []
        self._progress = 0.0
        self._is_generating = False
        self._lock = threading.Lock()
        self._error_message: str | None = None
        self._logger = logging.getLogger(self.__class__.__name__)

    @property
    def progress(self) -> float:
        """Progress of the current or last run, in [0, 1]."""
        return self._progress

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def error_message(self) -> str | None:
        """Message of the last failed run, or None."""
        return self._error_message

    def add_progress_listener(self, listener: ProgressListener) -> None:
        """Register a callback invoked with each new progress value."""
        self._listeners.append(listener)

    def remove_progress_listener(self, listener: ProgressListener) -> None:
        self._listeners.remove(listener)

    async def generate(
        self,
        title: str,
        subtitle: str | None,
        slides: Sequence[Slide],
        *,
        polaroid_percentage: float | None = None,
        photo_duration: float | None = None,
        audio_path: Path | str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> GenerationResult:
        """Render ``slides`` into a video file.

        Args:
            title: Title shown on the opening and closing cards.
            subtitle: Optional line under the title.
            slides: Photos in display order. May be empty.
            polaroid_percentage: Fraction of polaroid slides (defaults to
                the configured value).
            photo_duration: Seconds per photo (defaults to the configured
                value).
            audio_path: Audio asset looped over the video (defaults to the
                configured track, if any).
            cancel_token: Token a host can set to stop the run.

        Returns:
            The run result. Failures and cancellation are reported through
            its status rather than raised.

        Raises:
            GenerationInProgressError: If a run is already active.
            ValueError: If a timing or percentage parameter is out of range.
        """
        if polaroid_percentage is None:
            polaroid_percentage = self._settings.polaroid_percentage
        if audio_path is None:
            audio_path = self._settings.audio_path

        # Callers on different threads (see workers.tasks) share this instance
        with self._lock:
            if self._is_generating:
                raise GenerationInProgressError("A slideshow is already being generated")

            timeline = self._timeline_builder.build(
                len(slides),
                polaroid_percentage=polaroid_percentage,
                photo_duration=photo_duration,
            )
            run = _Run(
                run_id=uuid.uuid4().hex,
                title=title,
                subtitle=subtitle,
                slides=slides,
                timeline=timeline,
                audio_path=Path(audio_path) if audio_path is not None else None,
                cancel_token=cancel_token or CancellationToken(),
            )

            self._is_generating = True
            self._error_message = None
            self._progress = 0.0

        try:
            return await self._execute(run)
        finally:
            self._is_generating = False

    async def _execute(self, run: _Run) -> GenerationResult:
        self._logger.info(
            "Starting run %s: '%s', %d slides, %d frames",
            run.run_id,
            run.title,
            len(run.slides),
            run.timeline.total_frames,
        )
        self._set_progress(PROGRESS_STARTED)

        try:
            run.cancel_token.raise_if_cancelled()
            await self._stage_setup(run)
            self._stage_prepare_photos(run)

            for entry in run.timeline.entries:
                run.cancel_token.raise_if_cancelled(frames_written=run.frames_written)
                await self._stage_block(run, entry)
                self._set_frame_progress(run)

            run.cancel_token.raise_if_cancelled(frames_written=run.frames_written)
            output_path = await self._stage_finalize(run)
            output_path, audio_muxed = await self._stage_audio(run, output_path)

        except GenerationCancelledError as e:
            await self._abort(run)
            self._logger.info("Run %s cancelled after %d frames", run.run_id, run.frames_written)
            return GenerationResult(
                run_id=run.run_id,
                status=GenerationStatus.CANCELLED,
                error_kind=type(e).__name__,
                error_message=str(e),
                frames_written=run.frames_written,
                skipped_slides=run.skipped,
            )

        except Exception as e:
            self._logger.exception("Run %s failed: %s", run.run_id, e)
            await self._abort(run)
            self._error_message = str(e)
            return GenerationResult(
                run_id=run.run_id,
                status=GenerationStatus.FAILED,
                error_kind=type(e).__name__,
                error_message=str(e),
                frames_written=run.frames_written,
                skipped_slides=run.skipped,
            )

        self._set_progress(1.0)
        self._logger.info("Run %s completed: %s", run.run_id, output_path)
        return GenerationResult(
            run_id=run.run_id,
            status=GenerationStatus.COMPLETED,
            output_path=output_path,
            frames_written=run.frames_written,
            skipped_slides=run.skipped,
            audio_muxed=audio_muxed,
        )

    async def _stage_setup(self, run: _Run) -> None:
        """Allocate the output file and start the encoder session."""
        output_dir = Path(self._settings.output_dir or tempfile.gettempdir())
        output_path = output_dir / f"{OUTPUT_PREFIX}_{run.run_id}{OUTPUT_SUFFIX}"
        self._logger.info("Stage: Encoder setup (%s)", output_path)

        encoder = self._encoder_factory(output_path, self._config)
        encoder.start_writing()
        run.writer = FrameWriter(
            encoder,
            fps=self._config.fps,
            adapter=self._adapter,
            poll_interval=self._settings.ready_poll_interval,
            ready_timeout=self._settings.ready_timeout,
            cancel_token=run.cancel_token,
        )
        self._set_progress(PROGRESS_ENCODER_READY)

    def _stage_prepare_photos(self, run: _Run) -> None:
        """Decode every slide image, skipping or failing on corrupt ones."""
        self._logger.info("Stage: Preparing %d photos", len(run.slides))
        policy = self._settings.corrupt_slide_policy

        for index, slide in enumerate(run.slides):
            try:
                run.images[index] = slide.load_image()
            except SlideDecodeError as e:
                if policy == CorruptSlidePolicy.FAIL:
                    raise SlideDecodeError(f"Slide {index}: {e}", slide_index=index) from e
                self._logger.warning("Skipping slide %d: %s", index, e)
                run.skipped.append(index)

        self._set_progress(PROGRESS_PHOTOS_PREPARED)

    async def _stage_block(self, run: _Run, entry: TimelineEntry) -> None:
        """Render one timeline block and write its frames."""
        writer = run.writer
        size = self._config.size
        photos = list(run.images.values())

        if entry.kind == BlockKind.TITLE:
            self._set_progress(PROGRESS_TITLE_STARTED)
            self._logger.info("Stage: Title card")
            still = self._renderer.render_title_card(
                title=run.title,
                subtitle=run.subtitle,
                date_range=DateRange.from_slides(run.slides),
                photos=photos,
                size=size,
            )
            await writer.write_still(still, duration=entry.duration, effect=entry.effect)
            return

        if entry.kind == BlockKind.END:
            self._logger.info("Stage: End card")
            still = self._renderer.render_end_card(
                item_count=len(run.slides),
                title=run.title,
                photos=photos,
                size=size,
            )
            await writer.write_still(still, duration=entry.duration, effect=entry.effect)
            return

        index = entry.slide_index
        image = run.images.get(index)
        if image is None:
            return

        slide = run.slides[index]
        self._logger.debug(
            "Slide %d: %s, effect=%s, rotation=%.2f",
            index,
            entry.style.value,
            entry.effect.value,
            entry.rotation,
        )
        if entry.style == SlideStyle.POLAROID:
            still = self._renderer.render_polaroid(
                image=image,
                caption=slide.caption,
                captured_at=slide.captured_at,
                rotation=entry.rotation,
                size=size,
            )
            await writer.write_still(still, duration=entry.duration, effect=entry.effect)
        else:
            still = self._renderer.render_fullscreen(image=image, size=size)
            overlay = self._renderer.render_text_overlay(
                caption=slide.caption,
                captured_at=slide.captured_at,
                size=size,
            )
            await writer.write_still(
                still,
                duration=entry.duration,
                effect=entry.effect,
                overlay=overlay,
            )

    async def _stage_finalize(self, run: _Run) -> Path:
        self._logger.info("Stage: Finalizing %d frames", run.frames_written)
        return await run.writer.finish()

    async def _stage_audio(self, run: _Run, video_path: Path) -> tuple[Path, bool]:
        if run.audio_path is None:
            return video_path, False
        self._logger.info("Stage: Audio mux (%s)", run.audio_path.name)
        return await mux_with_fallback(self._audio_muxer, video_path, run.audio_path)

    async def _abort(self, run: _Run) -> None:
        """Discard the partial output of a run that did not finish."""
        if run.writer is not None:
            await run.writer.cancel()

    def _set_frame_progress(self, run: _Run) -> None:
        total = run.timeline.total_frames
        if total <= 0:
            return
        self._set_progress(PROGRESS_FRAMES_BASE + PROGRESS_FRAMES_WEIGHT * run.frames_written / total)

    def _set_progress(self, value: float) -> None:
        value = max(self._progress, min(1.0, max(0.0, value)))
        if value == self._progress:
            return
        self._progress = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                self._logger.exception("Progress listener %r failed", listener)

    def _default_encoder(self, output_path: Path, config: "VideoConfig") -> "IVideoEncoder":
        return FFmpegVideoEncoder(output_path, config=config, settings=self._settings)
