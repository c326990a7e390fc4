"""Comment endpoints for the VidTube API."""

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.dependencies import envelope, require_actor, store_call
from vidtube.config import get_settings
from vidtube.db.session import get_session
from vidtube.services import comments
from vidtube.views import PageParams

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])
limiter = Limiter(key_func=get_remote_address)


class CommentRequest(BaseModel):
    """Request model for adding or editing a comment."""

    content: str | None = None


@router.get("/{video_id}")
@limiter.limit("120/minute")
async def get_video_comments(
    request: Request,
    video_id: str,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """One page of a video's comments with owner and video inlined."""
    settings = get_settings()
    params = PageParams.parse(
        page,
        limit,
        default_limit=settings.page_size_default,
        max_limit=settings.page_size_max,
    )
    result = await store_call(
        comments.list_video_comments(db, video_id, params), "listing comments"
    )
    return envelope(result, "Comments fetched successfully")


@router.post("/{video_id}", status_code=201)
@limiter.limit("30/minute")
async def add_comment(
    request: Request,
    video_id: str,
    body: CommentRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """Comment on a published video."""
    comment = await store_call(
        comments.add_comment(db, actor_id, video_id, body.content), "adding comment"
    )
    return envelope(comment, "Comment added successfully", 201)


@router.patch("/c/{comment_id}")
@limiter.limit("30/minute")
async def update_comment(
    request: Request,
    comment_id: str,
    body: CommentRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    comment = await store_call(
        comments.update_comment(db, actor_id, comment_id, body.content),
        "updating comment",
    )
    return envelope(comment, "Comment Updated Successfully")


@router.delete("/c/{comment_id}")
@limiter.limit("30/minute")
async def delete_comment(
    request: Request,
    comment_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    deleted = await store_call(
        comments.delete_comment(db, actor_id, comment_id), "deleting comment"
    )
    return envelope(deleted, "Comment Deleted Successfully")
