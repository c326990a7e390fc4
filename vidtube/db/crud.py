"""CRUD utilities for database operations."""

import enum
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.models import (
    Base,
    Comment,
    Playlist,
    PlaylistVideo,
    Tweet,
    Video,
)

ModelT = TypeVar("ModelT", bound=Base)


def as_document(obj: Base | None, fields: tuple[str, ...] | None = None) -> dict[str, Any] | None:
    """Convert a model instance into a plain document.

    Args:
        obj: Model instance, or None for a dangling reference
        fields: Optional projection; only these columns are copied

    Returns:
        Dict keyed by column name, datetimes as ISO strings, or None
    """
    if obj is None:
        return None
    names = fields or tuple(c.key for c in obj.__table__.columns)
    doc: dict[str, Any] = {}
    for name in names:
        value = getattr(obj, name)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, enum.Enum):
            value = value.value
        doc[name] = value
    return doc


async def get_by_id(db: AsyncSession, model: type[ModelT], doc_id: str) -> ModelT | None:
    """Point lookup of any document by its primary key."""
    result = await db.execute(select(model).where(model.id == doc_id))
    return result.scalar_one_or_none()


async def get_many_by_ids(
    db: AsyncSession, model: type[ModelT], ids: set[str]
) -> dict[str, ModelT]:
    """Batch lookup keyed by id; missing ids are simply absent."""
    if not ids:
        return {}
    result = await db.execute(select(model).where(model.id.in_(ids)))
    return {row.id: row for row in result.scalars().all()}


async def get_video_by_id(db: AsyncSession, video_id: str) -> Video | None:
    return await get_by_id(db, Video, video_id)


async def get_comment_by_id(db: AsyncSession, comment_id: str) -> Comment | None:
    return await get_by_id(db, Comment, comment_id)


async def get_tweet_by_id(db: AsyncSession, tweet_id: str) -> Tweet | None:
    return await get_by_id(db, Tweet, tweet_id)


async def get_playlist_by_id(db: AsyncSession, playlist_id: str) -> Playlist | None:
    return await get_by_id(db, Playlist, playlist_id)


async def insert(db: AsyncSession, obj: ModelT) -> ModelT:
    """Insert a new document and return it refreshed."""
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def update(db: AsyncSession, obj: ModelT, **values: Any) -> ModelT:
    """Apply column updates to a loaded document and persist them."""
    for key, value in values.items():
        setattr(obj, key, value)
    await db.commit()
    await db.refresh(obj)
    return obj


async def delete_by_id(db: AsyncSession, model: type[Base], doc_id: str) -> bool:
    """Delete a document by id.

    Returns:
        True if a row was removed, False if it was already gone
    """
    result = await db.execute(delete(model).where(model.id == doc_id))
    await db.commit()
    return result.rowcount > 0


async def get_playlist_entries(
    db: AsyncSession, playlist_ids: set[str]
) -> dict[str, list[PlaylistVideo]]:
    """Membership rows for each playlist, ordered by position."""
    entries: dict[str, list[PlaylistVideo]] = {pid: [] for pid in playlist_ids}
    if not playlist_ids:
        return entries
    result = await db.execute(
        select(PlaylistVideo)
        .where(PlaylistVideo.playlist_id.in_(playlist_ids))
        .order_by(PlaylistVideo.playlist_id, PlaylistVideo.position)
    )
    for entry in result.scalars().all():
        entries[entry.playlist_id].append(entry)
    return entries
