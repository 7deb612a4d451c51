from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sportsreels.exceptions import MultipleRecordsException


class MetadataStore(ABC):
    """
    Abstract table-oriented metadata store.

    Rows are plain dicts keyed by an opaque ``id``. Filters are equality
    matches on top-level columns. No transactions are assumed.
    """

    @abstractmethod
    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it as stored."""
        pass

    @abstractmethod
    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one row by id, or None."""
        pass

    @abstractmethod
    async def update(self, table: str, row_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Apply ``changes`` to one row and return the updated row."""
        pass

    @abstractmethod
    async def delete(self, table: str, row_id: str) -> bool:
        """Delete one row by id."""
        pass

    @abstractmethod
    async def select(self, table: str, filters: Optional[Dict[str, Any]] = None,
                     order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        """Rows matching every equality filter, optionally ordered by one column."""
        pass

    async def select_one(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        The single row matching ``filters``, or None.

        Raises:
            MultipleRecordsException: when more than one row matches
        """
        rows = await self.select(table, filters)
        if len(rows) > 1:
            raise MultipleRecordsException(
                f"Expected one row in '{table}' for {filters}, found {len(rows)}",
                count=len(rows),
                details={"table": table, "filters": filters},
            )
        return rows[0] if rows else None

    async def close(self):
        """Release resources held by the store."""
        pass
