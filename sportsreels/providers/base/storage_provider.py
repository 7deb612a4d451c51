from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

ProgressCallback = Callable[[float], None]


@dataclass
class StoredObject:
    """A binary held in object storage."""
    path: str
    url: str
    size: int
    last_modified: datetime


class StorageProvider(ABC):
    """Abstract base class for object storage providers."""

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str = "application/octet-stream",
                  on_progress: Optional[ProgressCallback] = None) -> str:
        """Write ``data`` under ``path`` and return its public URL."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Delete the object at ``path``. Returns False when nothing was there."""
        pass

    @abstractmethod
    async def list_objects(self, prefix: str = "") -> List[StoredObject]:
        """List stored objects whose path starts with ``prefix``."""
        pass

    @abstractmethod
    async def close(self):
        """Close the underlying client and cleanup."""
        pass
