"""
Cleanup for several VideoRecords sharing one (title, team) natural key.

Policy is most-recent-wins: the newest record survives and the rest are
deleted. Analysis data is never merged, so an older completed analysis is
lost with its record. Uploads carry idempotency keys, so this is a cleanup
tool for legacy or racing data rather than a correctness mechanism.
"""

from typing import List, Optional

from loguru import logger

from sportsreels.exceptions import ResourceNotFoundException
from sportsreels.providers.base import MetadataStore, StorageProvider
from sportsreels.video_pipeline.core.models import VideoRecord
from sportsreels.video_pipeline.ingestion.upload_pipeline import VIDEOS_TABLE


class DuplicateRecordResolver:

    def __init__(
        self,
        metadata_store: MetadataStore,
        storage: Optional[StorageProvider] = None,
        delete_binaries: bool = False,
    ):
        self.metadata_store = metadata_store
        self.storage = storage
        self.delete_binaries = delete_binaries

    async def find_records(self, title: str, team_id: str) -> List[VideoRecord]:
        """All records for the pair, newest first."""
        rows = await self.metadata_store.select(VIDEOS_TABLE, {"team_id": team_id, "title": title.strip()})
        records = [VideoRecord.from_row(row) for row in rows]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    async def resolve(self, title: str, team_id: str) -> VideoRecord:
        """
        Keep the most recently created record for (title, team) and delete the rest.

        Raises:
            ResourceNotFoundException: when no record matches
        """
        records = await self.find_records(title, team_id)
        if not records:
            raise ResourceNotFoundException(
                f"No video titled '{title}' for team {team_id}",
                details={"title": title, "team_id": team_id},
            )

        survivor, duplicates = records[0], records[1:]
        if duplicates:
            logger.warning(
                f"Found {len(records)} videos titled '{title}' for team {team_id}, "
                f"keeping {survivor.id} and deleting {len(duplicates)}"
            )
        for duplicate in duplicates:
            await self.metadata_store.delete(VIDEOS_TABLE, duplicate.id)
            logger.info(f"Deleted duplicate video record {duplicate.id} (created {duplicate.created_at.isoformat()})")
            if self.delete_binaries and self.storage and duplicate.storage_path and duplicate.url != survivor.url:
                await self.storage.delete(duplicate.storage_path)
        return survivor
