"""Cooperative cancellation for generation runs."""

import threading

from slideshow.exceptions import GenerationCancelledError


class CancellationToken:
    """Thread-safe flag a host sets to stop a run.

    The pipeline checks the token between frames and between blocks, so a
    host UI thread can cancel a run that executes on a worker event loop.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation."""
        self.reason = reason
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, *, frames_written: int = 0) -> None:
        """Raise GenerationCancelledError if cancellation was requested."""
        if self._event.is_set():
            message = f"Generation cancelled: {self.reason}" if self.reason else "Generation cancelled"
            raise GenerationCancelledError(message, frames_written=frames_written)
