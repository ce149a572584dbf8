"""Protocol for the video encoder session interface."""

from enum import Enum
from fractions import Fraction
from pathlib import Path
from typing import Protocol

import numpy as np


class EncoderStatus(str, Enum):
    """Lifecycle status of an encoder session."""

    UNKNOWN = "unknown"
    WRITING = "writing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class IVideoEncoder(Protocol):
    """Interface for a single-use video encoder session.

    One session produces one output file. Frames are rgb24 arrays of the
    configured size, appended with strictly increasing presentation times.
    """

    @property
    def output_path(self) -> Path:
        """File the session writes to."""
        ...

    @property
    def status(self) -> EncoderStatus:
        """Current session status."""
        ...

    @property
    def error(self) -> str | None:
        """Encoder's own failure message, if any."""
        ...

    @property
    def is_ready_for_more_media_data(self) -> bool:
        """Whether append() can accept a frame without blocking."""
        ...

    def start_writing(self) -> None:
        """Allocate the output file and encoder process.

        Raises:
            SetupError: If the output cannot be created.
        """
        ...

    def start_session(self, at: Fraction = Fraction(0)) -> None:
        """Begin the timeline at source time ``at``."""
        ...

    def append(self, frame: np.ndarray, presentation_time: Fraction) -> bool:
        """Queue one frame.

        Args:
            frame: ``uint8`` array of shape (height, width, 3).
            presentation_time: Timestamp in seconds.

        Returns:
            True if the frame was accepted.
        """
        ...

    def mark_as_finished(self) -> None:
        """Signal that no more frames will be appended."""
        ...

    async def finish_writing(self) -> None:
        """Flush and close the output. Sets status to COMPLETED or FAILED."""
        ...

    async def cancel_writing(self) -> None:
        """Abort the session and delete any partial output.

        Must not block the event loop while the encoder winds down.
        """
        ...
