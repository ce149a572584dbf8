"""Effect engine: per-frame transforms for still images.

Every function here is pure. Given the same image, effect, and progress the
output is identical, so effects can be checked frame by frame.
"""

from dataclasses import dataclass

from PIL import Image

from slideshow.constants import (
    FADE_OUT_START,
    FADE_RATE,
    PAN_AMOUNT,
    PAN_SCALE,
    ZOOM_AMOUNT,
)
from slideshow.models import FrameEffect

BLACK = (0, 0, 0, 255)


@dataclass(frozen=True)
class FrameGeometry:
    """Affine parameters for one frame.

    A source point ``p`` lands at ``p * scale + (translate_x, translate_y)``
    in the output frame. ``alpha`` is the opacity of the transformed image
    over the black background.
    """

    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    alpha: float = 1.0


def fade_in_alpha(progress: float) -> float:
    """Opacity for FADE_IN: fully opaque after the first third."""
    return min(1.0, progress * FADE_RATE)


def fade_out_alpha(progress: float) -> float:
    """Opacity for FADE_OUT: starts dropping in the last third."""
    return min(1.0, max(0.0, 1.0 - (progress - FADE_OUT_START) * FADE_RATE))


def _centered_zoom(scale: float, width: int, height: int) -> FrameGeometry:
    return FrameGeometry(
        scale=scale,
        translate_x=-(width * (scale - 1.0)) / 2.0,
        translate_y=-(height * (scale - 1.0)) / 2.0,
    )


def effect_geometry(effect: FrameEffect, progress: float, size: tuple[int, int]) -> FrameGeometry:
    """Compute the transform and opacity for ``effect`` at ``progress``.

    Args:
        effect: The effect to evaluate.
        progress: Fraction of the slide elapsed, in [0, 1).
        size: Frame size as (width, height).

    Returns:
        The frame geometry.
    """
    width, height = size

    if effect == FrameEffect.NONE:
        return FrameGeometry()
    if effect == FrameEffect.FADE_IN:
        return FrameGeometry(alpha=fade_in_alpha(progress))
    if effect == FrameEffect.FADE_OUT:
        return FrameGeometry(alpha=fade_out_alpha(progress))
    if effect == FrameEffect.ZOOM_IN:
        return _centered_zoom(1.0 + ZOOM_AMOUNT * progress, width, height)
    if effect == FrameEffect.ZOOM_OUT:
        return _centered_zoom(1.0 + ZOOM_AMOUNT - ZOOM_AMOUNT * progress, width, height)
    if effect == FrameEffect.PAN_LEFT:
        return FrameGeometry(scale=PAN_SCALE, translate_x=width * PAN_AMOUNT * progress)
    if effect == FrameEffect.PAN_RIGHT:
        return FrameGeometry(scale=PAN_SCALE, translate_x=-width * PAN_AMOUNT * progress)

    raise ValueError(f"Unknown frame effect: {effect}")


def apply_effect(image: Image.Image, effect: FrameEffect, progress: float) -> Image.Image:
    """Apply ``effect`` to ``image`` at ``progress``.

    ``NONE`` returns the input unchanged. Every other effect draws the
    transformed image onto an opaque black frame of the same size, so
    regions uncovered by a pan or zoom are black rather than undefined.

    Args:
        image: Source still.
        effect: Effect to apply.
        progress: Fraction of the slide elapsed, in [0, 1).

    Returns:
        An opaque RGBA frame, or ``image`` itself for ``NONE``.
    """
    if effect == FrameEffect.NONE:
        return image

    geometry = effect_geometry(effect, progress, image.size)
    source = image if image.mode == "RGBA" else image.convert("RGBA")
    background = Image.new("RGBA", image.size, BLACK)

    if geometry.scale != 1.0 or geometry.translate_x or geometry.translate_y:
        # Image.transform maps output -> input, so pass the inverse affine
        inv = 1.0 / geometry.scale
        source = source.transform(
            image.size,
            Image.Transform.AFFINE,
            (inv, 0.0, -geometry.translate_x * inv, 0.0, inv, -geometry.translate_y * inv),
            resample=Image.Resampling.BILINEAR,
            fillcolor=(0, 0, 0, 0),
        )

    frame = background.copy()
    frame.alpha_composite(source)

    if geometry.alpha < 1.0:
        frame = Image.blend(background, frame, max(0.0, geometry.alpha))

    return frame
