import asyncio
import copy
import json
import uuid
import aiofiles
from pathlib import Path
from loguru import logger
from typing import Any, Dict, List, Optional
from sportsreels.providers.base import MetadataStore
from sportsreels.utils.error_handler import ProviderException
from sportsreels.exceptions import ResourceNotFoundException


class LocalMetadataStore(MetadataStore):
    """
    In-process table store.

    Rows live in memory; when ``path`` is configured every write is flushed
    to a JSON file and the file is loaded on first use.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.path = Path(config["path"]) if config.get("path") else None
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()
        self._load_lock = asyncio.Lock()
        self._loaded = self.path is None

    async def _ensure_loaded(self):
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            if self.path.exists():
                try:
                    async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                        self._tables = json.loads(await f.read() or "{}")
                    logger.info(f"Loaded metadata from {self.path}")
                except (OSError, json.JSONDecodeError) as e:
                    raise ProviderException(f"Failed to load metadata from {self.path}: {e}")
            self._loaded = True

    async def _flush(self):
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(self._tables, indent=2, default=str))

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self._tables.setdefault(table, {})

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            await self._ensure_loaded()
            row = copy.deepcopy(row)
            row_id = str(row.get("id") or uuid.uuid4())
            rows = self._table(table)
            if row_id in rows:
                raise ProviderException(f"Duplicate id '{row_id}' in table '{table}'", error_code="DUPLICATE_ID")
            row["id"] = row_id
            rows[row_id] = row
            await self._flush()
            logger.debug(f"Inserted row {row_id} into {table}")
            return copy.deepcopy(row)

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        await self._ensure_loaded()
        row = self._table(table).get(row_id)
        return copy.deepcopy(row) if row is not None else None

    async def update(self, table: str, row_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            await self._ensure_loaded()
            row = self._table(table).get(row_id)
            if row is None:
                raise ResourceNotFoundException(f"No row '{row_id}' in table '{table}'")
            row.update(copy.deepcopy(changes))
            row["id"] = row_id
            await self._flush()
            return copy.deepcopy(row)

    async def delete(self, table: str, row_id: str) -> bool:
        async with self._lock:
            await self._ensure_loaded()
            removed = self._table(table).pop(row_id, None)
            if removed is not None:
                await self._flush()
                logger.debug(f"Deleted row {row_id} from {table}")
            return removed is not None

    async def select(self, table: str, filters: Optional[Dict[str, Any]] = None,
                     order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        await self._ensure_loaded()
        filters = filters or {}
        rows = [
            row for row in self._table(table).values()
            if all(row.get(column) == value for column, value in filters.items())
        ]
        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            rows = present + missing
        return copy.deepcopy(rows)
