from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional


class AnalysisProvider(ABC):
    """Abstract base class for AI video analysis services."""

    @abstractmethod
    async def analyze(
        self,
        video_url: str,
        video_type: str,
        sport: str,
        metadata: Dict[str, Any],
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> Dict[str, Any]:
        """
        Analyze a stored video and return the raw, video-type-shaped result.

        Latency is unbounded; callers must not assume a timeout.
        """
        pass

    async def close(self):
        """Close the underlying client and cleanup."""
        pass
