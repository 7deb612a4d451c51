from pathlib import Path

import pytest

from sportsreels.exceptions import ProviderException
from sportsreels.providers.custom_providers import LocalStorageProvider
from sportsreels.providers.custom_providers.storage_provider import CHUNK_SIZE


@pytest.fixture
def provider(tmp_path):
    return LocalStorageProvider({"base_path": str(tmp_path / "storage")})


async def test_put_writes_file_and_returns_file_url(provider):
    url = await provider.put("videos/T1/clip.mp4", b"frames", "video/mp4")

    stored = provider.base_path / "videos" / "T1" / "clip.mp4"
    assert stored.read_bytes() == b"frames"
    assert url.startswith("file://")
    assert url.endswith("videos/T1/clip.mp4")


async def test_put_reports_chunked_progress(provider):
    progress = []
    await provider.put("videos/T1/big.mp4", b"\x00" * (CHUNK_SIZE * 2 + 10), on_progress=progress.append)

    assert len(progress) == 3
    assert progress == sorted(progress)
    assert progress[-1] == 100.0


async def test_empty_put_still_completes(provider):
    progress = []
    await provider.put("videos/T1/empty.mp4", b"", on_progress=progress.append)
    assert progress == [100.0]


async def test_delete(provider):
    await provider.put("videos/T1/clip.mp4", b"frames")

    assert await provider.delete("videos/T1/clip.mp4") is True
    assert await provider.delete("videos/T1/clip.mp4") is False


async def test_paths_outside_root_are_refused(provider):
    with pytest.raises(ProviderException):
        await provider.delete("../outside.mp4")


async def test_list_objects_filters_by_prefix(provider):
    await provider.put("videos/T1/a.mp4", b"aa")
    await provider.put("videos/T2/b.mp4", b"bbb")
    await provider.put("thumbnails/T1/a.jpg", b"j")

    objects = await provider.list_objects("videos/")

    assert [o.path for o in objects] == ["videos/T1/a.mp4", "videos/T2/b.mp4"]
    assert objects[1].size == 3
    assert objects[0].last_modified.tzinfo is not None
    assert Path(provider.base_path / objects[0].path).exists()
