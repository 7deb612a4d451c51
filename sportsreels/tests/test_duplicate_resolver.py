from datetime import datetime, timedelta, timezone

import pytest

from sportsreels.exceptions import MultipleRecordsException, ResourceNotFoundException
from sportsreels.video_pipeline.core.models import VideoRecord, VideoType
from sportsreels.video_pipeline.ingestion.duplicate_resolver import DuplicateRecordResolver
from sportsreels.video_pipeline.ingestion.upload_pipeline import VIDEOS_TABLE
from sportsreels.video_pipeline.service import VideoAnalysisService

T1 = datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(hours=2)


async def _insert(store, record_id, created_at, title="Final", team_id="T1", path=None):
    record = VideoRecord(
        id=record_id,
        team_id=team_id,
        title=title,
        url=f"memory://bucket/{path or record_id}",
        storage_path=path or f"videos/{team_id}/{record_id}.mp4",
        video_type=VideoType.MATCH,
        created_at=created_at,
    )
    await store.insert(VIDEOS_TABLE, record.to_row())
    return record


async def test_newest_record_survives(store):
    await _insert(store, "old", T1)
    await _insert(store, "new", T2)

    survivor = await DuplicateRecordResolver(store).resolve("Final", "T1")

    assert survivor.id == "new"
    assert survivor.created_at == T2
    assert await store.get(VIDEOS_TABLE, "old") is None
    assert await store.get(VIDEOS_TABLE, "new") is not None


async def test_insertion_order_does_not_matter(store):
    await _insert(store, "new", T2)
    await _insert(store, "old", T1)

    survivor = await DuplicateRecordResolver(store).resolve("Final", "T1")

    assert survivor.id == "new"


async def test_other_teams_and_titles_are_untouched(store):
    await _insert(store, "a", T1)
    await _insert(store, "b", T2)
    await _insert(store, "other-team", T1, team_id="T2")
    await _insert(store, "other-title", T1, title="Semi Final")

    await DuplicateRecordResolver(store).resolve("Final", "T1")

    remaining = {row["id"] for row in await store.select(VIDEOS_TABLE)}
    assert remaining == {"b", "other-team", "other-title"}


async def test_single_record_is_returned_as_is(store):
    await _insert(store, "only", T1)
    survivor = await DuplicateRecordResolver(store).resolve("Final", "T1")
    assert survivor.id == "only"


async def test_no_match_raises(store):
    with pytest.raises(ResourceNotFoundException):
        await DuplicateRecordResolver(store).resolve("Final", "T1")


async def test_binaries_are_kept_unless_requested(store, storage):
    old = await _insert(store, "old", T1)
    await _insert(store, "new", T2)
    storage.objects[old.storage_path] = b"old"
    storage.modified[old.storage_path] = T1

    await DuplicateRecordResolver(store, storage).resolve("Final", "T1")
    assert old.storage_path in storage.objects


async def test_binaries_can_be_deleted_with_duplicates(store, storage):
    old = await _insert(store, "old", T1)
    await _insert(store, "new", T2)
    storage.objects[old.storage_path] = b"old"
    storage.modified[old.storage_path] = T1

    await DuplicateRecordResolver(store, storage, delete_binaries=True).resolve("Final", "T1")
    assert old.storage_path not in storage.objects


async def test_select_one_refuses_ambiguous_lookup(store):
    await _insert(store, "old", T1)
    await _insert(store, "new", T2)

    with pytest.raises(MultipleRecordsException) as exc_info:
        await store.select_one(VIDEOS_TABLE, {"team_id": "T1", "title": "Final"})
    assert exc_info.value.count == 2
    assert exc_info.value.error_code == "MULTIPLE_ROWS"


async def test_find_video_resolves_duplicates(store, storage, compressor, analyzer):
    await _insert(store, "old", T1)
    await _insert(store, "new", T2)
    service = VideoAnalysisService(storage=storage, metadata_store=store, compressor=compressor, analyzer=analyzer)

    found = await service.find_video("Final", "T1")

    assert found.id == "new"
    assert len(await store.select(VIDEOS_TABLE)) == 1


async def test_find_video_without_match_raises(store, storage, compressor, analyzer):
    service = VideoAnalysisService(storage=storage, metadata_store=store, compressor=compressor, analyzer=analyzer)
    with pytest.raises(ResourceNotFoundException):
        await service.find_video("Final", "T1")
