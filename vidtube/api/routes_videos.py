"""Video endpoints for the VidTube API."""

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.dependencies import (
    envelope,
    get_media,
    require_actor,
    spool_upload,
    store_call,
)
from vidtube.config import get_settings
from vidtube.db.session import get_session
from vidtube.media import MediaStore
from vidtube.services import videos
from vidtube.views import PageParams

router = APIRouter(prefix="/api/v1/videos", tags=["videos"])
limiter = Limiter(key_func=get_remote_address)


@router.get("")
@limiter.limit("120/minute")
async def list_videos(
    request: Request,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_type: str | None = Query(default=None, alias="sortType"),
    user_id: str | None = Query(default=None, alias="userId"),
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """
    List a channel's videos, paginated and optionally sorted.

    Query Parameters:
        - page, limit: Page window (1-based)
        - sortBy, sortType: Column name and ``asc``/``desc``
        - userId: Channel whose videos are listed (required)
    """
    settings = get_settings()
    params = PageParams.parse(
        page,
        limit,
        sort_by,
        sort_type,
        default_limit=settings.page_size_default,
        max_limit=settings.page_size_max,
    )
    result = await store_call(videos.list_videos(db, user_id, params), "listing videos")
    return envelope(result, "Videos fetched successfully")


@router.post("", status_code=201)
@limiter.limit("10/minute")
async def publish_video(
    request: Request,
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    video_file: UploadFile | None = File(default=None, alias="videoFile"),
    thumbnail: UploadFile | None = File(default=None),
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
    store: MediaStore = Depends(get_media),
):
    """
    Upload a video and its thumbnail and publish it.

    Rate limit: 10 requests per minute per IP.
    """
    video = await videos.publish_video(
        db,
        store,
        actor_id,
        title,
        description,
        await spool_upload(video_file),
        await spool_upload(thumbnail),
    )
    return envelope(video, "Video Published Successfully", 201)


@router.get("/{video_id}")
@limiter.limit("120/minute")
async def get_video(
    request: Request,
    video_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """Get one video with its owner inlined."""
    video = await store_call(videos.get_video(db, video_id), "fetching video")
    return envelope(video, "Video fetched successfully")


@router.patch("/{video_id}")
@limiter.limit("30/minute")
async def update_video(
    request: Request,
    video_id: str,
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    thumbnail: UploadFile | None = File(default=None),
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
    store: MediaStore = Depends(get_media),
):
    """Update title and description, optionally replacing the thumbnail."""
    video = await videos.update_video(
        db, store, actor_id, video_id, title, description, await spool_upload(thumbnail)
    )
    return envelope(video, "Video Updated Successfully")


@router.delete("/{video_id}")
@limiter.limit("30/minute")
async def delete_video(
    request: Request,
    video_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
    store: MediaStore = Depends(get_media),
):
    """Delete a video and its media."""
    deleted = await videos.delete_video(db, store, actor_id, video_id)
    return envelope(deleted, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}")
@limiter.limit("30/minute")
async def toggle_publish_status(
    request: Request,
    video_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """Flip a video between published and unpublished."""
    video = await store_call(
        videos.toggle_publish_status(db, actor_id, video_id), "toggling publish status"
    )
    return envelope(video, f"Publish status toggled to {video['is_published']}")
