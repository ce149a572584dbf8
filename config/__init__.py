"""Configuration module for slideshow generation."""

from config.logging_setup import configure_logging
from config.settings import CorruptSlidePolicy, Settings

__all__ = ["CorruptSlidePolicy", "Settings", "configure_logging"]
