"""Tests for the local media store and orphan reconciliation."""

import asyncio
import os

import pytest
from sqlalchemy import select

from vidtube.db.models import OrphanedMedia
from vidtube.errors import OperationTimeout, bounded
from vidtube.media import (
    LocalMediaStore,
    MediaAsset,
    MediaStore,
    delete_media_best_effort,
    detect_resource_type,
    get_media_store,
    reconcile_orphaned_media,
)


class FlakyStore(MediaStore):
    """Delete fails until ``healthy`` is set."""

    def __init__(self):
        self.healthy = False

    async def _put(self, local_path, resource_type, large):
        return MediaAsset(url=f"https://flaky.example.com/{resource_type}", resource_type=resource_type)

    async def delete(self, url, resource_type=None):
        if not self.healthy:
            raise ConnectionError("media host unreachable")
        return True


@pytest.fixture
def local_store(test_settings):
    return LocalMediaStore(test_settings)


def test_detect_resource_type():
    assert detect_resource_type("clip.mp4") == "video"
    assert detect_resource_type("thumb.png") == "image"
    assert detect_resource_type("notes.bin") == "raw"


def test_get_media_store_local(test_settings):
    assert isinstance(get_media_store(test_settings), LocalMediaStore)


@pytest.mark.asyncio
async def test_local_upload_and_delete(local_store, tmp_path):
    source = tmp_path / "clip.mp4"
    source.write_bytes(b"frames")

    asset = await local_store.upload(str(source))

    assert asset.resource_type == "video"
    assert asset.url.startswith("http://testserver/media/video/")
    assert asset.url.endswith(".mp4")
    assert not source.exists()

    stored = local_store.base_path / asset.url[len("http://testserver/media/") :]
    assert stored.read_bytes() == b"frames"

    assert await local_store.delete(asset.url, "video") is True
    assert not stored.exists()
    assert await local_store.delete(asset.url, "video") is False


@pytest.mark.asyncio
async def test_local_upload_missing_file_returns_none(local_store, tmp_path):
    assert await local_store.upload(str(tmp_path / "missing.png"), "image") is None
    assert await local_store.upload("") is None


@pytest.mark.asyncio
async def test_local_delete_rejects_foreign_and_escaping_urls(local_store, tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_text("keep me")

    assert await local_store.delete("https://elsewhere.example.com/image/a.png") is False
    assert await local_store.delete("http://testserver/media/../secret.txt") is False
    assert outside.exists()


@pytest.mark.asyncio
async def test_best_effort_delete_records_orphan(db_session):
    store = FlakyStore()

    deleted = await delete_media_best_effort(
        db_session, store, "https://flaky.example.com/video/1", "video"
    )

    assert deleted is False
    orphans = (await db_session.execute(select(OrphanedMedia))).scalars().all()
    assert [(o.url, o.resource_type, o.attempts) for o in orphans] == [
        ("https://flaky.example.com/video/1", "video", 1)
    ]


@pytest.mark.asyncio
async def test_best_effort_delete_without_url(db_session):
    assert await delete_media_best_effort(db_session, FlakyStore(), None) is False
    assert (await db_session.execute(select(OrphanedMedia))).scalars().all() == []


@pytest.mark.asyncio
async def test_reconcile_retries_orphans(db_session):
    store = FlakyStore()
    await delete_media_best_effort(db_session, store, "https://flaky.example.com/image/1", "image")

    assert await reconcile_orphaned_media(db_session, store) == 0
    orphan = (await db_session.execute(select(OrphanedMedia))).scalar_one()
    assert orphan.attempts == 2

    store.healthy = True
    assert await reconcile_orphaned_media(db_session, store) == 1
    assert (await db_session.execute(select(OrphanedMedia))).scalars().all() == []


@pytest.mark.asyncio
async def test_bounded_times_out():
    with pytest.raises(OperationTimeout) as exc_info:
        await bounded(asyncio.sleep(1), 0.01, "waiting on the store")

    assert exc_info.value.message == "Timed out while waiting on the store"
    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_bounded_passes_result_through():
    async def answer():
        return 42

    assert await bounded(answer(), 1, "answering") == 42


def test_local_store_creates_base_dir(test_settings):
    LocalMediaStore(test_settings)

    assert os.path.isdir(test_settings.media_local_path)
