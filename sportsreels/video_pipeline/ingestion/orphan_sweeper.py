"""
Reconciliation sweep for binaries left behind by failed metadata writes.

An object is orphaned when no video record references its path or URL and
it is older than the grace period, which leaves in-flight uploads alone.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from loguru import logger

from sportsreels.providers.base import MetadataStore, StorageProvider, StoredObject
from sportsreels.video_pipeline.ingestion.upload_pipeline import VIDEOS_TABLE


async def find_orphaned_objects(
    storage: StorageProvider,
    metadata_store: MetadataStore,
    folder: str = "videos",
    grace_period: timedelta = timedelta(minutes=60),
    now: Optional[datetime] = None,
) -> List[StoredObject]:
    now = now or datetime.now(timezone.utc)
    rows = await metadata_store.select(VIDEOS_TABLE)
    known_paths = {row.get("storage_path") for row in rows if row.get("storage_path")}
    known_urls = {url for row in rows for url in (row.get("url"), row.get("compressed_url")) if url}

    prefix = f"{folder.strip('/')}/" if folder else ""
    orphans = []
    for obj in await storage.list_objects(prefix):
        if obj.path in known_paths or obj.url in known_urls:
            continue
        last_modified = obj.last_modified
        if last_modified.tzinfo is None:
            last_modified = last_modified.replace(tzinfo=timezone.utc)
        if now - last_modified < grace_period:
            continue
        orphans.append(obj)
    return orphans


async def sweep_orphaned_objects(
    storage: StorageProvider,
    metadata_store: MetadataStore,
    folder: str = "videos",
    grace_period: timedelta = timedelta(minutes=60),
    delete: bool = False,
    now: Optional[datetime] = None,
) -> List[StoredObject]:
    """Report orphaned binaries, and remove them only when ``delete`` is set."""
    orphans = await find_orphaned_objects(storage, metadata_store, folder, grace_period, now)
    logger.info(f"Found {len(orphans)} orphaned object(s) under '{folder}'")
    if delete:
        for obj in orphans:
            await storage.delete(obj.path)
            logger.info(f"Deleted orphaned object {obj.path} ({obj.size} bytes)")
    return orphans
