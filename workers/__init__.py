"""Background execution helpers for slideshow generation."""

from workers.tasks import run_generation_sync, submit_generation

__all__ = ["run_generation_sync", "submit_generation"]
