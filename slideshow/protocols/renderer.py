"""Protocol for static slide renderers."""

from datetime import datetime
from typing import Protocol, Sequence

from PIL import Image

from slideshow.models import DateRange


class ISlideRenderer(Protocol):
    """Interface for the static bitmap factories behind each slide.

    Every method returns an image of exactly ``size``. The pipeline does not
    depend on the visual design, only on the size contract.
    """

    def render_title_card(
        self,
        *,
        title: str,
        subtitle: str | None,
        date_range: DateRange | None,
        photos: Sequence[Image.Image],
        size: tuple[int, int],
    ) -> Image.Image:
        """Render the opening card."""
        ...

    def render_end_card(
        self,
        *,
        item_count: int,
        title: str,
        photos: Sequence[Image.Image],
        size: tuple[int, int],
    ) -> Image.Image:
        """Render the closing card."""
        ...

    def render_polaroid(
        self,
        *,
        image: Image.Image,
        caption: str,
        captured_at: datetime | None,
        rotation: float,
        size: tuple[int, int],
    ) -> Image.Image:
        """Render a static polaroid frame on black."""
        ...

    def render_fullscreen(self, *, image: Image.Image, size: tuple[int, int]) -> Image.Image:
        """Render the photo aspect-filled onto an opaque frame."""
        ...

    def render_text_overlay(
        self,
        *,
        caption: str,
        captured_at: datetime | None,
        size: tuple[int, int],
    ) -> Image.Image:
        """Render the transparent caption/date overlay for fullscreen slides."""
        ...
