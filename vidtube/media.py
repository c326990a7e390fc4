"""Media storage abstraction for video and image assets (local or Google Cloud Storage)."""

import asyncio
import logging
import mimetypes
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.config import Settings
from vidtube.db.models import OrphanedMedia
from vidtube.errors import OperationTimeout, bounded

logger = logging.getLogger(__name__)


class MediaAsset(BaseModel):
    """An uploaded asset as reported by the media host."""

    url: str
    resource_type: str
    duration: float | None = None


class LocalFile(BaseModel):
    """A request file already spooled to local disk."""

    path: str
    content_type: str | None = None
    size: int = 0

    def discard(self) -> None:
        _discard_local(self.path)


def detect_resource_type(local_path: str) -> str:
    """Guess ``video``, ``image`` or ``raw`` from the file name."""
    mime, _ = mimetypes.guess_type(local_path)
    if mime and mime.startswith("video/"):
        return "video"
    if mime and mime.startswith("image/"):
        return "image"
    return "raw"


def _discard_local(local_path: str) -> None:
    try:
        os.unlink(local_path)
    except FileNotFoundError:
        pass


class MediaStore(ABC):
    """Abstract remote host for uploaded media.

    ``upload`` and ``upload_large`` always remove the local temporary file,
    whether the upload succeeded or not.
    """

    async def upload(self, local_path: str, resource_type: str = "auto") -> MediaAsset | None:
        """
        Upload a local file.

        Args:
            local_path: Path of the temporary file to upload
            resource_type: ``video``, ``image``, ``raw`` or ``auto`` to detect

        Returns:
            The stored asset, or None if the upload failed
        """
        return await self._upload_and_discard(local_path, resource_type, large=False)

    async def upload_large(self, local_path: str, resource_type: str) -> MediaAsset | None:
        """Upload a file in chunks; used above the configured size limit."""
        return await self._upload_and_discard(local_path, resource_type, large=True)

    async def _upload_and_discard(
        self, local_path: str, resource_type: str, large: bool
    ) -> MediaAsset | None:
        if not local_path:
            return None
        if resource_type == "auto":
            resource_type = detect_resource_type(local_path)
        try:
            return await self._put(local_path, resource_type, large)
        except Exception:
            logger.error(f"Upload failed for {local_path}", exc_info=True)
            return None
        finally:
            _discard_local(local_path)

    @abstractmethod
    async def _put(self, local_path: str, resource_type: str, large: bool) -> MediaAsset:
        """Store the file and describe the stored asset."""
        pass

    @abstractmethod
    async def delete(self, url: str, resource_type: str | None = None) -> bool:
        """
        Delete an asset by the URL returned from upload.

        Returns:
            True if deleted, False if not found or rejected
        """
        pass


class LocalMediaStore(MediaStore):
    """Local filesystem media store served under ``media_url_base``."""

    def __init__(self, settings: Settings):
        self.base_path = Path(settings.media_local_path)
        self.url_base = settings.media_url_base.rstrip("/")

        self.base_path.mkdir(parents=True, exist_ok=True)

    def _resolve(self, relative: str) -> Path:
        file_path = self.base_path / relative

        # Ensure we're not touching anything outside the media directory
        if not file_path.resolve().is_relative_to(self.base_path.resolve()):
            raise ValueError(f"Invalid media path: {relative}")
        return file_path

    async def _put(self, local_path: str, resource_type: str, large: bool) -> MediaAsset:
        suffix = Path(local_path).suffix
        relative = f"{resource_type}/{uuid.uuid4().hex}{suffix}"
        target = self._resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(Path(local_path).read_bytes())
        logger.info(f"Saved media to local storage: {target}")
        return MediaAsset(url=f"{self.url_base}/{relative}", resource_type=resource_type)

    async def delete(self, url: str, resource_type: str | None = None) -> bool:
        if not url or not url.startswith(f"{self.url_base}/"):
            return False
        try:
            file_path = self._resolve(url[len(self.url_base) + 1 :])
        except ValueError:
            logger.error(f"Attempted to delete media outside media directory: {url}")
            return False

        if file_path.exists():
            file_path.unlink()
            logger.info(f"Deleted media from local storage: {file_path}")
            return True

        return False


class GCSMediaStore(MediaStore):
    """Google Cloud Storage media store."""

    # Resumable upload chunk size; must be a multiple of 256 KiB
    CHUNK_SIZE = 32 * 1024 * 1024

    def __init__(self, settings: Settings):
        self.bucket_name = settings.gcs_bucket_name
        self.credentials_file = settings.gcs_credentials_file

        if not self.bucket_name:
            raise ValueError("GCS bucket name is required when using GCS media backend")

        # Lazy import to avoid requiring google-cloud-storage for local-only deployments
        try:
            from google.cloud import storage
        except ImportError:
            raise ImportError(
                "google-cloud-storage is required for GCS backend. "
                "Install with: pip install 'vidtube[gcs]'"
            )

        if self.credentials_file:
            self.client = storage.Client.from_service_account_json(self.credentials_file)
        else:
            # Use default credentials (from GOOGLE_APPLICATION_CREDENTIALS env var or metadata)
            self.client = storage.Client()

        self.bucket = self.client.bucket(self.bucket_name)
        self.url_prefix = f"https://storage.googleapis.com/{self.bucket_name}/"

    async def _put(self, local_path: str, resource_type: str, large: bool) -> MediaAsset:
        suffix = Path(local_path).suffix
        blob = self.bucket.blob(f"{resource_type}/{uuid.uuid4().hex}{suffix}")
        if large:
            blob.chunk_size = self.CHUNK_SIZE
        await asyncio.to_thread(blob.upload_from_filename, local_path)

        logger.info(f"Saved media to GCS: gs://{self.bucket_name}/{blob.name}")
        return MediaAsset(url=blob.public_url, resource_type=resource_type)

    async def delete(self, url: str, resource_type: str | None = None) -> bool:
        if not url or not url.startswith(self.url_prefix):
            logger.error(f"Invalid GCS media url: {url}")
            return False

        blob = self.bucket.blob(url[len(self.url_prefix) :])
        if await asyncio.to_thread(blob.exists):
            await asyncio.to_thread(blob.delete)
            logger.info(f"Deleted media from GCS: {url}")
            return True

        return False


def get_media_store(settings: Settings) -> MediaStore:
    """
    Factory function to get the configured media store.

    Args:
        settings: Application settings

    Returns:
        Configured media store instance
    """
    if settings.media_backend == "local":
        return LocalMediaStore(settings)
    elif settings.media_backend == "gcs":
        return GCSMediaStore(settings)
    else:
        raise ValueError(f"Unknown media backend: {settings.media_backend}")


async def _try_delete(
    store: MediaStore, url: str, resource_type: str | None, timeout: float
) -> bool:
    try:
        return await bounded(store.delete(url, resource_type), timeout, "deleting media")
    except OperationTimeout:
        logger.warning(f"Timed out deleting media {url}")
        return False
    except Exception:
        logger.warning(f"Error deleting media {url}", exc_info=True)
        return False


async def delete_media_best_effort(
    db: AsyncSession,
    store: MediaStore,
    url: str | None,
    resource_type: str | None = None,
    timeout: float = 120.0,
) -> bool:
    """Delete an asset without failing the caller.

    A failed delete is logged and recorded as an ``OrphanedMedia`` row so
    :func:`reconcile_orphaned_media` can retry it later.

    Returns:
        True if the asset was deleted
    """
    if not url:
        return False
    if await _try_delete(store, url, resource_type, timeout):
        return True

    logger.warning(
        f"Orphaned media asset: {url}",
        extra={"event": "media_orphaned", "media_url": url, "resource_type": resource_type},
    )
    db.add(OrphanedMedia(url=url, resource_type=resource_type))
    await db.commit()
    return False


async def reconcile_orphaned_media(
    db: AsyncSession, store: MediaStore, timeout: float = 120.0
) -> int:
    """Retry every recorded orphan delete.

    Returns:
        Number of assets deleted in this pass
    """
    result = await db.execute(select(OrphanedMedia).order_by(OrphanedMedia.created_at))
    reconciled = 0
    for orphan in result.scalars().all():
        if await _try_delete(store, orphan.url, orphan.resource_type, timeout):
            await db.delete(orphan)
            reconciled += 1
        else:
            orphan.attempts += 1
    await db.commit()
    logger.info(f"Reconciled {reconciled} orphaned media assets")
    return reconciled
