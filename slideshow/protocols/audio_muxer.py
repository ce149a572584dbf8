"""Protocol for audio muxer interface."""

from pathlib import Path
from typing import Protocol


class IAudioMuxer(Protocol):
    """Interface for merging a looped audio track into a finished video."""

    async def mux(self, video_path: Path, audio_path: Path) -> Path:
        """Produce a new container with the audio looped to the video length.

        Args:
            video_path: Finished silent video.
            audio_path: Audio asset to loop or truncate.

        Returns:
            Path to the new video file.

        Raises:
            AudioMuxError: If the asset is unreadable or export fails.
        """
        ...
