"""Static slide renderers built on Pillow.

These produce the fixed-size bitmaps the pipeline animates: title card, end
card, polaroid frame, fullscreen photo, and the caption overlay.
"""

from datetime import datetime
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont, ImageOps

from slideshow.models import DateRange, format_medium_date

LAVENDER = (179, 128, 230)
LAVENDER_LIGHT = (230, 217, 247)
ACCENT_PINK = (230, 128, 166)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GRAY = (128, 128, 128)

MAX_BORDER_PHOTOS = 8
# (x, y, degrees) as fractions of the frame, clockwise from top-left
_BORDER_SLOTS = [
    (0.12, 0.07, -8.0),
    (0.50, 0.05, 4.0),
    (0.88, 0.08, -5.0),
    (0.90, 0.50, 7.0),
    (0.86, 0.92, -4.0),
    (0.50, 0.94, 6.0),
    (0.14, 0.91, -7.0),
    (0.10, 0.48, 5.0),
]


def _font(size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=max(1, int(size)))


def _vertical_gradient(size: tuple[int, int], top: tuple[int, int, int], bottom: tuple[int, int, int]) -> Image.Image:
    width, height = size
    t = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, None]
    rows = np.asarray(top, dtype=np.float32) * (1.0 - t) + np.asarray(bottom, dtype=np.float32) * t
    pixels = np.broadcast_to(rows[:, None, :], (height, width, 3))
    return Image.fromarray(np.ascontiguousarray(pixels).astype(np.uint8), "RGB")


def _scaled(color: tuple[int, int, int], factor: float) -> tuple[int, int, int]:
    return tuple(int(c * factor) for c in color)  # type: ignore[return-value]


def _wrap(draw: ImageDraw.ImageDraw, text: str, font, max_width: float, max_lines: int) -> list[str]:
    words = text.split()
    lines: list[str] = []
    current = ""
    for word in words:
        candidate = f"{current} {word}".strip()
        if draw.textlength(candidate, font=font) <= max_width or not current:
            current = candidate
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines[:max_lines]


def _draw_centered_lines(
    draw: ImageDraw.ImageDraw,
    lines: list[str],
    *,
    center_x: float,
    top: float,
    font,
    fill,
    spacing: float = 4.0,
) -> float:
    """Draw lines centered on ``center_x``; return the y below the last line."""
    y = top
    for line in lines:
        left, upper, right, lower = draw.textbbox((0, 0), line, font=font)
        draw.text((center_x - (right - left) / 2, y), line, font=font, fill=fill)
        y += (lower - upper) + spacing
    return y


def _mini_polaroid(photo: Image.Image, side: int) -> Image.Image:
    pad = max(1, int(side * 0.06))
    strip = max(1, int(side * 0.2))
    card = Image.new("RGBA", (side + 2 * pad, side + pad + strip), WHITE + (255,))
    card.paste(ImageOps.fit(photo.convert("RGB"), (side, side), Image.Resampling.LANCZOS), (pad, pad))
    return card


def _draw_polaroid_border(frame: Image.Image, photos: Sequence[Image.Image]) -> None:
    width, height = frame.size
    side = max(8, int(70 * width / 375))
    for photo, (fx, fy, angle) in zip(photos[:MAX_BORDER_PHOTOS], _BORDER_SLOTS):
        card = _mini_polaroid(photo, side).rotate(angle, expand=True, resample=Image.Resampling.BICUBIC)
        frame.alpha_composite(card, (int(fx * width - card.width / 2), int(fy * height - card.height / 2)))


class PillowSlideRenderer:
    """Renders static slide bitmaps with Pillow."""

    def render_title_card(
        self,
        *,
        title: str,
        subtitle: str | None,
        date_range: DateRange | None,
        photos: Sequence[Image.Image],
        size: tuple[int, int],
    ) -> Image.Image:
        width, height = size
        scale = width / 375
        frame = _vertical_gradient(size, _scaled(LAVENDER, 0.8), BLACK).convert("RGBA")
        _draw_polaroid_border(frame, photos)

        draw = ImageDraw.Draw(frame)
        base_size = 36 if len(title) > 20 else (44 if len(title) > 12 else 56)
        text_width = width - 100 * scale

        y = height * 0.38
        y = _draw_centered_lines(
            draw,
            _wrap(draw, title, _font(base_size * scale), text_width, 2),
            center_x=width / 2,
            top=y,
            font=_font(base_size * scale),
            fill=WHITE,
        )
        if subtitle:
            y = _draw_centered_lines(
                draw,
                _wrap(draw, subtitle, _font(22 * scale), text_width, 3),
                center_x=width / 2,
                top=y + 20 * scale,
                font=_font(22 * scale),
                fill=WHITE + (204,),
            )
        if date_range is not None:
            _draw_centered_lines(
                draw,
                [date_range.format()],
                center_x=width / 2,
                top=y + 24 * scale,
                font=_font(14 * scale),
                fill=LAVENDER_LIGHT,
            )
        return frame.convert("RGB")

    def render_end_card(
        self,
        *,
        item_count: int,
        title: str,
        photos: Sequence[Image.Image],
        size: tuple[int, int],
    ) -> Image.Image:
        width, height = size
        scale = width / 375
        frame = _vertical_gradient(size, BLACK, _scaled(LAVENDER, 0.8)).convert("RGBA")
        _draw_polaroid_border(frame, photos)

        draw = ImageDraw.Draw(frame)
        noun = "item" if item_count == 1 else "items"
        y = _draw_centered_lines(
            draw, ["The End!"], center_x=width / 2, top=height * 0.38, font=_font(48 * scale), fill=WHITE
        )
        y = _draw_centered_lines(
            draw,
            [f"{item_count} {noun} found"],
            center_x=width / 2,
            top=y + 20 * scale,
            font=_font(24 * scale),
            fill=WHITE + (204,),
        )
        _draw_centered_lines(
            draw,
            _wrap(draw, title, _font(20 * scale), width - 100 * scale, 2),
            center_x=width / 2,
            top=y + 28 * scale,
            font=_font(20 * scale),
            fill=ACCENT_PINK,
        )
        return frame.convert("RGB")

    def render_polaroid(
        self,
        *,
        image: Image.Image,
        caption: str,
        captured_at: datetime | None,
        rotation: float,
        size: tuple[int, int],
    ) -> Image.Image:
        width, height = size
        photo_size = int(width * 0.80)
        border = int(photo_size * 0.05)
        bottom = int(photo_size * 0.18)
        caption_font = _font(photo_size * 0.07)
        date_font = _font(photo_size * 0.05)

        card = Image.new("RGBA", (photo_size + 2 * border, photo_size + 2 * border + bottom), WHITE + (255,))
        card.paste(
            ImageOps.fit(image.convert("RGB"), (photo_size, photo_size), Image.Resampling.LANCZOS),
            (border, border),
        )
        draw = ImageDraw.Draw(card)
        y = _draw_centered_lines(
            draw,
            _wrap(draw, caption, caption_font, photo_size, 2),
            center_x=card.width / 2,
            top=photo_size + border * 2,
            font=caption_font,
            fill=BLACK,
        )
        if captured_at is not None:
            _draw_centered_lines(
                draw,
                [format_medium_date(captured_at)],
                center_x=card.width / 2,
                top=y,
                font=date_font,
                fill=GRAY,
            )

        # Pillow rotates counter-clockwise; positive tilt is clockwise
        card = card.rotate(-rotation, expand=True, resample=Image.Resampling.BICUBIC)
        frame = Image.new("RGBA", size, BLACK + (255,))
        frame.alpha_composite(card, ((width - card.width) // 2, (height - card.height) // 2))
        return frame.convert("RGB")

    def render_fullscreen(self, *, image: Image.Image, size: tuple[int, int]) -> Image.Image:
        """Aspect-fill the photo over the frame, cropping the overflow evenly."""
        return ImageOps.fit(image.convert("RGB"), size, Image.Resampling.LANCZOS, centering=(0.5, 0.5))

    def render_text_overlay(
        self,
        *,
        caption: str,
        captured_at: datetime | None,
        size: tuple[int, int],
    ) -> Image.Image:
        width, height = size
        overlay_height = int(height * 0.18)
        overlay = Image.new("RGBA", size, (0, 0, 0, 0))

        if overlay_height > 0:
            alpha = np.linspace(0.0, 0.85 * 255, overlay_height, dtype=np.float32)
            band = np.zeros((overlay_height, width, 4), dtype=np.uint8)
            band[..., 3] = alpha[:, None].astype(np.uint8)
            overlay.paste(Image.fromarray(band, "RGBA"), (0, height - overlay_height))

        draw = ImageDraw.Draw(overlay)
        padding = width * 0.05
        caption_font = _font(width * 0.055)
        caption_y = height - overlay_height * 0.6
        draw.text((padding, caption_y), caption, font=caption_font, fill=WHITE + (255,))

        if captured_at is not None:
            _, upper, _, lower = draw.textbbox((0, 0), caption or " ", font=caption_font)
            draw.text(
                (padding, caption_y + (lower - upper) + 4),
                format_medium_date(captured_at),
                font=_font(width * 0.035),
                fill=WHITE + (204,),
            )
        return overlay
