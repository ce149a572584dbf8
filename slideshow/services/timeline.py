"""Timeline construction: slide order, styles, effects, and frame counts."""

import logging
import math
import random
from typing import Sequence

from slideshow.constants import (
    DEFAULT_POLAROID_PERCENTAGE,
    FULLSCREEN_EFFECTS,
    STYLE_MODULUS,
    STYLE_OFFSET,
    STYLE_STRIDE,
)
from slideshow.models import (
    BlockKind,
    FrameEffect,
    SlideStyle,
    Timeline,
    TimelineEntry,
    VideoConfig,
)

logger = logging.getLogger(__name__)


def frames_for_duration(duration: float, fps: int) -> int:
    """Number of whole frames in ``duration`` seconds at ``fps``.

    Rounds to nine decimals before flooring so values like ``0.7 * 10``
    (6.9999...) yield 7 frames.
    """
    if duration <= 0:
        return 0
    return int(math.floor(round(duration * fps, 9)))


def slide_style_for_index(index: int, polaroid_percentage: float) -> SlideStyle:
    """Deterministic style for the slide at ``index``.

    ``value = ((index * 7 + 3) % 10) / 10`` walks all ten tenths before
    repeating, so any percentage gives an evenly interleaved mix that is the
    same on every run.
    """
    value = ((index * STYLE_STRIDE + STYLE_OFFSET) % STYLE_MODULUS) / STYLE_MODULUS
    return SlideStyle.POLAROID if value < polaroid_percentage else SlideStyle.FULLSCREEN


def assign_styles(count: int, polaroid_percentage: float) -> list[SlideStyle]:
    """Style sequence for ``count`` slides."""
    return [slide_style_for_index(i, polaroid_percentage) for i in range(count)]


def choose_effect(rng: random.Random) -> FrameEffect:
    """Pick a Ken Burns effect for a fullscreen slide."""
    return rng.choice(FULLSCREEN_EFFECTS)


def total_frames(config: VideoConfig, slide_count: int, photo_duration: float) -> int:
    """Frames for title, ``slide_count`` photos, and end card."""
    return (
        frames_for_duration(config.title_duration, config.fps)
        + slide_count * frames_for_duration(photo_duration, config.fps)
        + frames_for_duration(config.end_duration, config.fps)
    )


class TimelineBuilder:
    """Plans the ordered blocks of a slideshow.

    Style assignment is a pure function of the slide index. Effect choice and
    polaroid tilt come from the injected random source, so seeding it makes
    the whole plan reproducible.
    """

    def __init__(
        self,
        config: VideoConfig,
        *,
        rng: random.Random | None = None,
        max_tilt: float = 6.0,
    ):
        """Initialize the builder.

        Args:
            config: Output video configuration.
            rng: Random source for effects and tilt.
            max_tilt: Maximum polaroid rotation in degrees.
        """
        self._config = config
        self._rng = rng or random.Random()
        self._max_tilt = max_tilt

    def build(
        self,
        slide_count: int,
        *,
        polaroid_percentage: float = DEFAULT_POLAROID_PERCENTAGE,
        photo_duration: float | None = None,
    ) -> Timeline:
        """Build the timeline for ``slide_count`` photos.

        Args:
            slide_count: Number of input slides.
            polaroid_percentage: Fraction in [0, 1] of polaroid slides.
            photo_duration: Seconds per photo (defaults to the config value).

        Returns:
            The planned timeline.

        Raises:
            ValueError: If a parameter is out of range.
        """
        if slide_count < 0:
            raise ValueError(f"slide_count must be >= 0, got {slide_count}")
        if not 0.0 <= polaroid_percentage <= 1.0:
            raise ValueError(f"polaroid_percentage must be in [0, 1], got {polaroid_percentage}")
        if photo_duration is None:
            photo_duration = self._config.photo_duration
        if photo_duration < 0:
            raise ValueError(f"photo_duration must be >= 0, got {photo_duration}")

        fps = self._config.fps
        entries = [
            TimelineEntry(
                kind=BlockKind.TITLE,
                duration=self._config.title_duration,
                frame_count=frames_for_duration(self._config.title_duration, fps),
                effect=FrameEffect.NONE,
            )
        ]

        photo_frames = frames_for_duration(photo_duration, fps)
        for index, style in enumerate(assign_styles(slide_count, polaroid_percentage)):
            if style == SlideStyle.POLAROID:
                effect = FrameEffect.NONE
                rotation = self._rng.uniform(-self._max_tilt, self._max_tilt)
            else:
                effect = choose_effect(self._rng)
                rotation = 0.0
            entries.append(
                TimelineEntry(
                    kind=BlockKind.PHOTO,
                    duration=photo_duration,
                    frame_count=photo_frames,
                    effect=effect,
                    style=style,
                    slide_index=index,
                    rotation=rotation,
                )
            )

        entries.append(
            TimelineEntry(
                kind=BlockKind.END,
                duration=self._config.end_duration,
                frame_count=frames_for_duration(self._config.end_duration, fps),
                effect=FrameEffect.FADE_OUT,
            )
        )

        timeline = Timeline(fps=fps, entries=entries)
        logger.debug(
            "Planned %d photo slides (%d polaroid), %d total frames",
            slide_count,
            timeline.styles.count(SlideStyle.POLAROID),
            timeline.total_frames,
        )
        return timeline
