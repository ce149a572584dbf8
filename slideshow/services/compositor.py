"""Overlay compositing for fullscreen slides."""

from PIL import Image


def composite_overlay(overlay: Image.Image, base: Image.Image) -> Image.Image:
    """Alpha-composite a static overlay on top of a base frame.

    Overlay pixels with zero alpha leave the base pixel untouched. Neither
    input is modified.

    Args:
        overlay: RGBA overlay, same size as ``base``.
        base: The (possibly effect-transformed) photo frame.

    Returns:
        A new RGBA image.

    Raises:
        ValueError: If the two images differ in size.
    """
    if overlay.size != base.size:
        raise ValueError(
            f"Overlay size {overlay.size} does not match frame size {base.size}"
        )

    frame = base.convert("RGBA") if base.mode != "RGBA" else base.copy()
    frame.alpha_composite(overlay if overlay.mode == "RGBA" else overlay.convert("RGBA"))
    return frame
