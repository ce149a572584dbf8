"""Numeric constants for effects, style assignment, and progress reporting.

This module centralizes the tuning values shared by the effect engine,
timeline builder, and orchestrator.
"""

from typing import Final

from slideshow.models import FrameEffect

# Effect engine
ZOOM_AMOUNT: Final[float] = 0.15  # zoom range 100% <-> 115%
PAN_SCALE: Final[float] = 1.1
PAN_AMOUNT: Final[float] = 0.1  # fraction of width
FADE_RATE: Final[float] = 3.0  # fade completes in a third of the slide
FADE_OUT_START: Final[float] = 0.66

FULLSCREEN_EFFECTS: Final[tuple[FrameEffect, ...]] = (
    FrameEffect.ZOOM_IN,
    FrameEffect.ZOOM_OUT,
    FrameEffect.PAN_LEFT,
    FrameEffect.PAN_RIGHT,
)

# Style assignment: value = ((index * STRIDE + OFFSET) % MODULUS) / MODULUS
STYLE_STRIDE: Final[int] = 7
STYLE_OFFSET: Final[int] = 3
STYLE_MODULUS: Final[int] = 10
DEFAULT_POLAROID_PERCENTAGE: Final[float] = 0.67

# Progress milestones
PROGRESS_STARTED: Final[float] = 0.01
PROGRESS_ENCODER_READY: Final[float] = 0.02
PROGRESS_PHOTOS_PREPARED: Final[float] = 0.03
PROGRESS_TITLE_STARTED: Final[float] = 0.05
PROGRESS_FRAMES_BASE: Final[float] = 0.10
PROGRESS_FRAMES_WEIGHT: Final[float] = 0.90

# Output naming
OUTPUT_PREFIX: Final[str] = "slideshow"
MUXED_OUTPUT_PREFIX: Final[str] = "slideshow_final"
OUTPUT_SUFFIX: Final[str] = ".mp4"
