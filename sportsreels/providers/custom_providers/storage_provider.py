import os
import aiofiles
from datetime import datetime, timezone
from pathlib import Path
from loguru import logger
from typing import Any, Dict, List, Optional
from sportsreels.providers.base import StorageProvider, StoredObject
from sportsreels.providers.base.storage_provider import ProgressCallback
from sportsreels.utils.error_handler import handle_exceptions, convert_exceptions
from sportsreels.utils.error_handler import ProviderException

CHUNK_SIZE = 1024 * 1024


class LocalStorageProvider(StorageProvider):
    """Local filesystem-based storage provider."""

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Local Storage Provider.

        Args:
            config: {
                        "base_path": str -> Root directory for local storage (default: ./local_storage)
                    }
        """
        self.config = config
        self.base_path = Path(config.get("base_path") or "./local_storage").resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalStorageProvider initialized at {self.base_path}")

    def _get_file_path(self, path: str) -> Path:
        """Return full path to an object, refusing paths that escape the storage root."""
        file_path = (self.base_path / path).resolve()
        if self.base_path not in file_path.parents:
            raise ProviderException(f"Invalid storage path: {path}")
        return file_path

    def _url_for(self, file_path: Path) -> str:
        # Proper file:// handling on Windows (e.g., file:///C:/path/to/file)
        if os.name == "nt":
            return f"file:///{file_path.as_posix()}"
        return file_path.as_uri()

    @handle_exceptions(retries=3, exceptions=(Exception,))
    @convert_exceptions({Exception: ProviderException})
    async def put(self, path: str, data: bytes, content_type: str = "application/octet-stream",
                  on_progress: Optional[ProgressCallback] = None) -> str:
        """Write bytes under the storage root in chunks, reporting progress."""
        dest_path = self._get_file_path(path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)

        total = len(data)
        written = 0
        async with aiofiles.open(dest_path, "wb") as dst:
            for offset in range(0, total, CHUNK_SIZE):
                chunk = data[offset:offset + CHUNK_SIZE]
                await dst.write(chunk)
                written += len(chunk)
                if on_progress:
                    on_progress(written * 100.0 / total)
        if on_progress and total == 0:
            on_progress(100.0)

        logger.info(f"Stored {total} bytes at {dest_path}")
        return self._url_for(dest_path)

    @convert_exceptions({Exception: ProviderException})
    async def delete(self, path: str) -> bool:
        file_path = self._get_file_path(path)
        if not file_path.exists():
            logger.debug(f"Nothing to delete at {file_path}")
            return False
        file_path.unlink()
        logger.info(f"Deleted {file_path}")
        return True

    @convert_exceptions({Exception: ProviderException})
    async def list_objects(self, prefix: str = "") -> List[StoredObject]:
        objects = []
        for file_path in sorted(self.base_path.rglob("*")):
            if not file_path.is_file():
                continue
            relative = file_path.relative_to(self.base_path).as_posix()
            if not relative.startswith(prefix):
                continue
            stat = file_path.stat()
            objects.append(StoredObject(
                path=relative,
                url=self._url_for(file_path),
                size=stat.st_size,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        return objects

    async def close(self):
        """No-op for local provider (for interface consistency)."""
        logger.debug("LocalStorageProvider closed (no-op).")
