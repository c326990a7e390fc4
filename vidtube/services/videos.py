"""Video publishing, editing and listing."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.config import get_settings
from vidtube.db import crud
from vidtube.db.models import Video
from vidtube.errors import InvalidArgument, OperationTimeout, UploadFailed, bounded
from vidtube.media import LocalFile, MediaAsset, MediaStore, delete_media_best_effort
from vidtube.services.common import ensure_found, ensure_owner, require_text
from vidtube.views import VIDEO_VIEW, PageParams, compose_one, compose_page

logger = logging.getLogger(__name__)


def _check_content_type(upload: LocalFile, prefix: str, message: str) -> None:
    if not upload.content_type or not upload.content_type.startswith(prefix):
        raise InvalidArgument(message)


async def _upload_video_file(store: MediaStore, upload: LocalFile) -> MediaAsset | None:
    settings = get_settings()
    if upload.size > settings.large_file_limit_bytes:
        pending = store.upload_large(upload.path, "video")
    else:
        pending = store.upload(upload.path, "video")
    return await bounded(pending, settings.media_timeout_seconds, "uploading video")


async def _upload_thumbnail(store: MediaStore, upload: LocalFile) -> MediaAsset | None:
    settings = get_settings()
    return await bounded(
        store.upload(upload.path, "image"),
        settings.media_timeout_seconds,
        "uploading thumbnail",
    )


async def _remove_uploaded(db: AsyncSession, store: MediaStore, asset: MediaAsset) -> None:
    await delete_media_best_effort(
        db, store, asset.url, asset.resource_type, get_settings().media_timeout_seconds
    )


async def publish_video(
    db: AsyncSession,
    store: MediaStore,
    actor_id: str,
    title: str | None,
    description: str | None,
    video_file: LocalFile | None,
    thumbnail: LocalFile | None,
) -> dict[str, Any]:
    """Upload a video with its thumbnail and create the video document.

    If the thumbnail upload fails or times out, the already uploaded video
    asset is deleted before the error is raised.

    Raises:
        InvalidArgument: Missing title/description/files or wrong file types
        UploadFailed: The media store rejected either upload
        OperationTimeout: Either upload did not finish in time
    """
    try:
        require_text("Title and description are required", title, description)
        if video_file is None or thumbnail is None:
            raise InvalidArgument("Video file and thumbnail are required")
        _check_content_type(video_file, "video", "Invalid video file format")
        _check_content_type(thumbnail, "image", "Invalid thumbnail file format")
    except InvalidArgument:
        for upload in (video_file, thumbnail):
            if upload is not None:
                upload.discard()
        raise

    try:
        video_asset = await _upload_video_file(store, video_file)
    except OperationTimeout:
        thumbnail.discard()
        raise
    if video_asset is None:
        thumbnail.discard()
        raise UploadFailed("Error while uploading video")

    try:
        thumbnail_asset = await _upload_thumbnail(store, thumbnail)
    except OperationTimeout:
        await _remove_uploaded(db, store, video_asset)
        raise
    if thumbnail_asset is None:
        await _remove_uploaded(db, store, video_asset)
        raise UploadFailed("Error while uploading thumbnail")

    video = await crud.insert(
        db,
        Video(
            video_file=video_asset.url,
            thumbnail=thumbnail_asset.url,
            title=title,
            description=description,
            duration=video_asset.duration or 0.0,
            owner=actor_id,
        ),
    )
    logger.info(f"Published video {video.id} for {actor_id}")
    return await compose_one(db, video.id, VIDEO_VIEW)


async def list_videos(
    db: AsyncSession, owner_id: str | None, params: PageParams
) -> dict[str, Any]:
    """One page of a channel's videos with the owner inlined."""
    if not owner_id:
        raise InvalidArgument("User id is required")
    return await compose_page(db, VIDEO_VIEW, {"owner": owner_id}, params)


async def get_video(db: AsyncSession, video_id: str) -> dict[str, Any]:
    return ensure_found(await compose_one(db, video_id, VIDEO_VIEW), "Video not found")


async def update_video(
    db: AsyncSession,
    store: MediaStore,
    actor_id: str,
    video_id: str,
    title: str | None,
    description: str | None,
    thumbnail: LocalFile | None = None,
) -> dict[str, Any]:
    """Change title and description, optionally replacing the thumbnail.

    The old thumbnail is deleted only after the new one uploaded.
    """
    try:
        video = ensure_found(await crud.get_video_by_id(db, video_id), "Video not found")
        ensure_owner(video, actor_id, "You are unauthorized to update this video")
        require_text("Title and description are required", title, description)
        if thumbnail is not None:
            _check_content_type(thumbnail, "image", "Invalid thumbnail file format")
    except Exception:
        if thumbnail is not None:
            thumbnail.discard()
        raise

    values: dict[str, Any] = {"title": title, "description": description}
    if thumbnail is not None:
        asset = await _upload_thumbnail(store, thumbnail)
        if asset is None:
            raise UploadFailed("Error while uploading thumbnail")
        await delete_media_best_effort(
            db, store, video.thumbnail, "image", get_settings().media_timeout_seconds
        )
        values["thumbnail"] = asset.url

    await crud.update(db, video, **values)
    return await compose_one(db, video.id, VIDEO_VIEW)


async def delete_video(
    db: AsyncSession, store: MediaStore, actor_id: str, video_id: str
) -> dict[str, Any]:
    """Delete a video and, best effort, its media assets."""
    video = ensure_found(await crud.get_video_by_id(db, video_id), "Video not found")
    ensure_owner(video, actor_id, "You are unauthorized to delete this video")

    deleted = crud.as_document(video)
    timeout = get_settings().media_timeout_seconds
    await delete_media_best_effort(db, store, video.thumbnail, "image", timeout)
    await delete_media_best_effort(db, store, video.video_file, "video", timeout)
    await crud.delete_by_id(db, Video, video_id)
    logger.info(f"Deleted video {video_id}")
    return deleted


async def toggle_publish_status(
    db: AsyncSession, actor_id: str, video_id: str
) -> dict[str, Any]:
    video = ensure_found(await crud.get_video_by_id(db, video_id), "Video not found")
    ensure_owner(video, actor_id, "You are unauthorized to update this video")
    await crud.update(db, video, is_published=not video.is_published)
    return crud.as_document(video)
