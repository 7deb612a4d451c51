from loguru import logger
from typing import Any, Callable, Dict, Optional
from sportsreels.providers.base import CompressionProvider
from sportsreels.video_pipeline.core.models import MediaFile


class PassthroughCompressionProvider(CompressionProvider):
    """Returns the input unchanged. Used when no encoder is available."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    async def compress(self, media: MediaFile, on_progress: Optional[Callable[[float], None]] = None) -> MediaFile:
        logger.debug(f"Skipping compression for {media.filename} ({media.size} bytes)")
        if on_progress:
            on_progress(100.0)
        return media
