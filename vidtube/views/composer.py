"""Read views that re-assemble joined documents from normalized rows.

A view is described declaratively by a :class:`ViewShape`: the base model, the
ordered id sequences stored beside it, and a tree of :class:`JoinSpec` entries.
:func:`compose_rows` walks that tree one level at a time, batch-loading every
referenced document per level. Joins are left outer: a reference that does not
resolve becomes ``None`` instead of dropping the parent document.

Nothing here writes to the store.
"""

import copy
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db import crud
from vidtube.db.models import (
    Base,
    Comment,
    Like,
    LikeKind,
    Playlist,
    Subscription,
    Tweet,
    User,
    Video,
)

# Fields of a user that may appear inside any composed view
USER_PUBLIC_FIELDS = ("id", "username", "full_name", "email", "avatar")

Document = dict[str, Any]
SequenceLoader = Callable[[AsyncSession, set[str]], Awaitable[dict[str, list[str]]]]


@dataclass(frozen=True)
class JoinSpec:
    """Inline the document referenced by ``local_field``.

    The field may hold a single id or a list of ids; a list is expanded
    element by element so the result keeps the original positions.
    """

    local_field: str
    target: type[Base]
    projection: tuple[str, ...] | None = None
    joins: tuple["JoinSpec", ...] = ()


@dataclass(frozen=True)
class ViewShape:
    """Base model plus the joins and id sequences that make up a view."""

    model: type[Base]
    joins: tuple[JoinSpec, ...] = ()
    sequences: tuple[tuple[str, SequenceLoader], ...] = ()


async def _playlist_video_ids(db: AsyncSession, playlist_ids: set[str]) -> dict[str, list[str]]:
    entries = await crud.get_playlist_entries(db, playlist_ids)
    return {pid: [e.video_id for e in rows] for pid, rows in entries.items()}


OWNER_JOIN = JoinSpec("owner", User, USER_PUBLIC_FIELDS)
VIDEO_WITH_OWNER_JOIN = JoinSpec("video", Video, joins=(OWNER_JOIN,))

VIDEO_VIEW = ViewShape(Video, joins=(OWNER_JOIN,))
TWEET_VIEW = ViewShape(Tweet, joins=(OWNER_JOIN,))
COMMENT_VIEW = ViewShape(Comment, joins=(OWNER_JOIN, VIDEO_WITH_OWNER_JOIN))
PLAYLIST_VIEW = ViewShape(
    Playlist,
    joins=(OWNER_JOIN, JoinSpec("videos", Video, joins=(OWNER_JOIN,))),
    sequences=(("videos", _playlist_video_ids),),
)


def _references(docs: Sequence[Document], field: str) -> set[str]:
    refs: set[str] = set()
    for doc in docs:
        value = doc.get(field)
        if isinstance(value, list):
            refs.update(v for v in value if v is not None)
        elif value is not None:
            refs.add(value)
    return refs


def _resolve(joined: dict[str, Document], ref: str | None) -> Document | None:
    if ref is None or ref not in joined:
        return None
    # Each parent gets its own copy, nested joins included
    return copy.deepcopy(joined[ref])


async def apply_joins(
    db: AsyncSession, docs: Sequence[Document], joins: Sequence[JoinSpec]
) -> None:
    """Inline every join of ``joins`` into ``docs`` in place."""
    for spec in joins:
        found = await crud.get_many_by_ids(db, spec.target, _references(docs, spec.local_field))
        joined = {
            ref: crud.as_document(row, spec.projection) for ref, row in found.items()
        }
        if spec.joins:
            await apply_joins(db, list(joined.values()), spec.joins)

        for doc in docs:
            value = doc.get(spec.local_field)
            if isinstance(value, list):
                doc[spec.local_field] = [_resolve(joined, ref) for ref in value]
            else:
                doc[spec.local_field] = _resolve(joined, value)


async def compose_rows(
    db: AsyncSession, rows: Sequence[Base], shape: ViewShape
) -> list[Document]:
    """Turn already-loaded base rows into composed documents, keeping row order."""
    docs = [crud.as_document(row) for row in rows]
    ids = {doc["id"] for doc in docs}
    for field, loader in shape.sequences:
        sequences = await loader(db, ids)
        for doc in docs:
            doc[field] = list(sequences.get(doc["id"], []))
    await apply_joins(db, docs, shape.joins)
    return docs


def base_query(shape: ViewShape, match: dict[str, Any]):
    """Select statement for the base rows of ``shape`` filtered by ``match``."""
    return select(shape.model).filter_by(**match)


async def compose_view(
    db: AsyncSession, match: dict[str, Any], shape: ViewShape
) -> list[Document]:
    """Compose every document of ``shape`` whose columns equal ``match``.

    Args:
        db: Database session
        match: Mapping of column name to required value
        shape: The view to build

    Returns:
        Composed documents in creation order; empty list if nothing matched
    """
    model = shape.model
    result = await db.execute(
        base_query(shape, match).order_by(model.created_at, model.id)
    )
    return await compose_rows(db, list(result.scalars().all()), shape)


async def compose_one(
    db: AsyncSession, doc_id: str, shape: ViewShape
) -> Document | None:
    """Compose a single document by id, or None if it does not exist."""
    docs = await compose_view(db, {"id": doc_id}, shape)
    return docs[0] if docs else None


async def get_video_view(db: AsyncSession, video_id: str) -> Document | None:
    return await compose_one(db, video_id, VIDEO_VIEW)


async def list_channel_videos(db: AsyncSession, owner_id: str) -> list[Document]:
    """All videos of a channel with the owner inlined."""
    return await compose_view(db, {"owner": owner_id}, VIDEO_VIEW)


async def list_liked_videos(
    db: AsyncSession, liked_by: str | None = None
) -> list[Document]:
    """Videos that have at least one like, each with ``number_of_likes``.

    Args:
        db: Database session
        liked_by: If given, only videos this user liked; counts stay global

    Returns:
        Video documents with the owner inlined, most liked first. Likes that
        point at a video which no longer exists are skipped.
    """
    number_of_likes = func.count(Like.id).label("number_of_likes")
    stmt = (
        select(Like.target_id, number_of_likes)
        .where(Like.target_kind == LikeKind.VIDEO)
        .group_by(Like.target_id)
        .order_by(number_of_likes.desc(), Like.target_id)
    )
    if liked_by is not None:
        liked = select(Like.target_id).where(
            Like.target_kind == LikeKind.VIDEO, Like.liked_by == liked_by
        )
        stmt = stmt.where(Like.target_id.in_(liked))

    groups = (await db.execute(stmt)).all()
    videos = await crud.get_many_by_ids(db, Video, {g.target_id for g in groups})

    docs: list[Document] = []
    for target_id, count in groups:
        video = videos.get(target_id)
        if video is None:
            continue
        doc = crud.as_document(video)
        doc["number_of_likes"] = count
        docs.append(doc)
    await apply_joins(db, docs, (OWNER_JOIN,))
    return docs


async def _subscription_users(
    db: AsyncSession, match_field: str, value: str, user_field: str
) -> list[Document]:
    result = await db.execute(
        select(getattr(Subscription, user_field))
        .where(getattr(Subscription, match_field) == value)
        .order_by(Subscription.created_at, Subscription.id)
    )
    user_ids = list(result.scalars().all())
    users = await crud.get_many_by_ids(db, User, set(user_ids))
    return [
        crud.as_document(users[uid], USER_PUBLIC_FIELDS)
        for uid in user_ids
        if uid in users
    ]


async def get_channel_subscribers(db: AsyncSession, channel_id: str) -> Document:
    """Public profiles of everyone subscribed to ``channel_id``."""
    subscribers = await _subscription_users(db, "channel", channel_id, "subscriber")
    return {
        "subscribers": subscribers,
        "number_of_subscribers": len(subscribers),
    }


async def get_subscribed_channels(db: AsyncSession, subscriber_id: str) -> Document:
    """Public profiles of every channel ``subscriber_id`` follows."""
    channels = await _subscription_users(db, "subscriber", subscriber_id, "channel")
    return {
        "channels": channels,
        "number_of_channels_subscribed_to": len(channels),
    }
