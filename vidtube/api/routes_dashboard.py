"""Channel dashboard endpoints for the VidTube API."""

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.dependencies import envelope, require_actor, store_call
from vidtube.db.session import get_session
from vidtube.stats import get_channel_stats
from vidtube.views import list_channel_videos

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])
limiter = Limiter(key_func=get_remote_address)


@router.get("/stats")
@limiter.limit("60/minute")
async def channel_stats(
    request: Request,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """
    Totals for the current user's channel.

    Returns:
        total_videos, total_video_views, total_number_of_subscribers,
        total_video_likes, total_comment_likes and tweet_likes, zero if absent
    """
    stats = await store_call(get_channel_stats(db, actor_id), "computing channel stats")
    return envelope(stats.model_dump(), "Channel Stats fetched successfully")


@router.get("/videos")
@limiter.limit("60/minute")
async def channel_videos(
    request: Request,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """Every video of the current user's channel with the owner inlined."""
    result = await store_call(list_channel_videos(db, actor_id), "listing channel videos")
    return envelope(result, "Videos of a channel fetched successfully")
