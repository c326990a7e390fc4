"""Like endpoints for the VidTube API.

Liking and unliking both answer 200; the envelope's ``data.state`` says which
transition happened.
"""

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.dependencies import envelope, require_actor, store_call
from vidtube.db.models import LikeKind
from vidtube.db.session import get_session
from vidtube.relations import LikeTarget, ToggleResult, toggle_like
from vidtube.views import list_liked_videos

router = APIRouter(prefix="/api/v1/likes", tags=["likes"])
limiter = Limiter(key_func=get_remote_address)


def _like_response(result: ToggleResult) -> dict:
    message = "Like added successfully" if result.added else "Like removed successfully"
    return envelope({"state": result.state.value, "like": result.edge}, message)


async def _toggle(db: AsyncSession, actor_id: str, kind: LikeKind, target_id: str) -> dict:
    result = await store_call(
        toggle_like(db, actor_id, LikeTarget(kind, target_id)), "toggling like"
    )
    return _like_response(result)


@router.post("/toggle/v/{video_id}")
@limiter.limit("60/minute")
async def toggle_video_like(
    request: Request,
    video_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    return await _toggle(db, actor_id, LikeKind.VIDEO, video_id)


@router.post("/toggle/c/{comment_id}")
@limiter.limit("60/minute")
async def toggle_comment_like(
    request: Request,
    comment_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    return await _toggle(db, actor_id, LikeKind.COMMENT, comment_id)


@router.post("/toggle/t/{tweet_id}")
@limiter.limit("60/minute")
async def toggle_tweet_like(
    request: Request,
    tweet_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    return await _toggle(db, actor_id, LikeKind.TWEET, tweet_id)


@router.get("/videos")
@limiter.limit("120/minute")
async def get_liked_videos(
    request: Request,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """Videos the current user liked, each with its total ``number_of_likes``."""
    liked = await store_call(list_liked_videos(db, liked_by=actor_id), "listing liked videos")
    return envelope(liked, "Liked videos fetched successfully")
