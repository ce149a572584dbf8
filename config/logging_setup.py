"""Root logger configuration."""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config.settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: "Settings", *, force: bool = False) -> logging.Logger:
    """Configure the root logger once.

    Args:
        settings: Application settings (uses ``log_level``).
        force: Replace handlers installed by an earlier call.

    Returns:
        The root logger.
    """
    root = logging.getLogger()
    if getattr(root, "_slideshow_logging_configured", False) and not force:
        return root

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT, force=force)
    root._slideshow_logging_configured = True  # type: ignore[attr-defined]
    return root
