from abc import ABC, abstractmethod
from typing import Callable, Optional

from sportsreels.video_pipeline.core.models import MediaFile


class CompressionProvider(ABC):
    """Abstract base class for video compression routines."""

    @abstractmethod
    async def compress(self, media: MediaFile, on_progress: Optional[Callable[[float], None]] = None) -> MediaFile:
        """
        Return a compressed copy of ``media``, or ``media`` itself when
        compression would not help. Never mutates the input.
        """
        pass
