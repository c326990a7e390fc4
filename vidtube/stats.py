"""Channel dashboard summary merged from independent counting passes."""

from typing import Any

from pydantic import BaseModel
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.models import Comment, Like, LikeKind, Subscription, Tweet, Video


class ChannelStats(BaseModel):
    """Totals for one channel. Every field is present and defaults to 0."""

    total_videos: int = 0
    total_video_views: int = 0
    total_number_of_subscribers: int = 0
    total_video_likes: int = 0
    total_comment_likes: int = 0
    tweet_likes: int = 0


async def _video_totals(db: AsyncSession, owner_id: str) -> dict[str, int]:
    row = (
        await db.execute(
            select(
                func.count(Video.id).label("videos"),
                func.sum(Video.views).label("views"),
            ).where(Video.owner == owner_id)
        )
    ).one()
    # SUM over zero rows is NULL
    return {"videos": row.videos or 0, "views": row.views or 0}


async def _subscriber_total(db: AsyncSession, owner_id: str) -> int:
    result = await db.execute(
        select(func.count(Subscription.id)).where(Subscription.channel == owner_id)
    )
    return result.scalar_one() or 0


async def _like_buckets(db: AsyncSession, owner_id: str) -> list[dict[str, Any]]:
    """Group likes by which owner-matched target they resolved to.

    Each target table is left-joined with the owner match inside the join
    condition, so a like on someone else's document resolves to NULL on every
    side. A bucket only carries the ``*_likes`` key whose side matched.
    """
    stmt = (
        select(
            Video.owner.label("video"),
            Comment.owner.label("comment"),
            Tweet.owner.label("tweet"),
            func.count(Like.id).label("likes"),
        )
        .select_from(Like)
        .outerjoin(
            Video,
            and_(
                Like.target_kind == LikeKind.VIDEO,
                Like.target_id == Video.id,
                Video.owner == owner_id,
            ),
        )
        .outerjoin(
            Comment,
            and_(
                Like.target_kind == LikeKind.COMMENT,
                Like.target_id == Comment.id,
                Comment.owner == owner_id,
            ),
        )
        .outerjoin(
            Tweet,
            and_(
                Like.target_kind == LikeKind.TWEET,
                Like.target_id == Tweet.id,
                Tweet.owner == owner_id,
            ),
        )
        .group_by(Video.owner, Comment.owner, Tweet.owner)
    )

    buckets = []
    for row in (await db.execute(stmt)).all():
        bucket: dict[str, Any] = {}
        if row.video is not None:
            bucket["video_likes"] = row.likes
        if row.comment is not None:
            bucket["comment_likes"] = row.likes
        if row.tweet is not None:
            bucket["tweet_likes"] = row.likes
        buckets.append(bucket)
    return buckets


def merge_buckets(buckets: list[dict[str, Any]]) -> dict[str, Any]:
    """Merge partial-key buckets into one dict; later keys win."""
    merged: dict[str, Any] = {}
    for bucket in buckets:
        merged.update(bucket)
    return merged


async def get_channel_stats(db: AsyncSession, owner_id: str) -> ChannelStats:
    """Compute the dashboard summary for ``owner_id``.

    A channel with no videos, subscribers or likes gets all zeros.
    """
    videos = await _video_totals(db, owner_id)
    subscribers = await _subscriber_total(db, owner_id)
    likes = merge_buckets(await _like_buckets(db, owner_id))

    return ChannelStats(
        total_videos=videos["videos"],
        total_video_views=videos["views"],
        total_number_of_subscribers=subscribers,
        total_video_likes=likes.get("video_likes", 0),
        total_comment_likes=likes.get("comment_likes", 0),
        tweet_likes=likes.get("tweet_likes", 0),
    )
