"""Playlists and their ordered video membership."""

import logging
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db import crud
from vidtube.db.models import Playlist, PlaylistVideo
from vidtube.errors import InvalidArgument
from vidtube.services.common import ensure_found, ensure_owner, require_text
from vidtube.views import PLAYLIST_VIEW, compose_one, compose_view

logger = logging.getLogger(__name__)

ALREADY_IN_PLAYLIST = "Video is already a part of the playlist"


async def _owned_playlist(db: AsyncSession, actor_id: str, playlist_id: str) -> Playlist:
    playlist = ensure_found(
        await crud.get_playlist_by_id(db, playlist_id), "Playlist not found"
    )
    ensure_owner(playlist, actor_id, "You are unauthorized to edit the playlist")
    return playlist


async def create_playlist(
    db: AsyncSession, actor_id: str, name: str | None, description: str | None
) -> dict[str, Any]:
    require_text("Name and description are required", name, description)
    playlist = await crud.insert(
        db, Playlist(name=name, description=description, owner=actor_id)
    )
    return await compose_one(db, playlist.id, PLAYLIST_VIEW)


async def list_user_playlists(db: AsyncSession, user_id: str) -> list[dict[str, Any]]:
    return await compose_view(db, {"owner": user_id}, PLAYLIST_VIEW)


async def get_playlist(db: AsyncSession, playlist_id: str) -> dict[str, Any]:
    return ensure_found(
        await compose_one(db, playlist_id, PLAYLIST_VIEW), "Playlist not found"
    )


async def add_video_to_playlist(
    db: AsyncSession, actor_id: str, playlist_id: str, video_id: str
) -> dict[str, Any]:
    """Append a video to the end of a playlist.

    Raises:
        NotFound: Playlist or video does not exist
        Forbidden: The actor does not own the playlist
        InvalidArgument: The video is already in the playlist
    """
    await _owned_playlist(db, actor_id, playlist_id)
    ensure_found(await crud.get_video_by_id(db, video_id), "Video not found")

    entries = (await crud.get_playlist_entries(db, {playlist_id}))[playlist_id]
    if any(entry.video_id == video_id for entry in entries):
        raise InvalidArgument(ALREADY_IN_PLAYLIST)

    last = (
        await db.execute(
            select(func.max(PlaylistVideo.position)).where(
                PlaylistVideo.playlist_id == playlist_id
            )
        )
    ).scalar_one()
    db.add(
        PlaylistVideo(
            playlist_id=playlist_id,
            video_id=video_id,
            position=0 if last is None else last + 1,
        )
    )
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with an identical add
        await db.rollback()
        raise InvalidArgument(ALREADY_IN_PLAYLIST) from None

    logger.info(f"Added video {video_id} to playlist {playlist_id}")
    return await compose_one(db, playlist_id, PLAYLIST_VIEW)


async def remove_video_from_playlist(
    db: AsyncSession, actor_id: str, playlist_id: str, video_id: str
) -> dict[str, Any]:
    """Remove a video; the remaining videos keep their relative order.

    The video itself need not exist any more, so ids left behind by deleted
    videos can still be removed.

    Raises:
        InvalidArgument: The video is not in the playlist
    """
    await _owned_playlist(db, actor_id, playlist_id)

    result = await db.execute(
        delete(PlaylistVideo).where(
            PlaylistVideo.playlist_id == playlist_id,
            PlaylistVideo.video_id == video_id,
        )
    )
    await db.commit()
    if result.rowcount == 0:
        raise InvalidArgument("Video is not in the playlist")

    logger.info(f"Removed video {video_id} from playlist {playlist_id}")
    return await compose_one(db, playlist_id, PLAYLIST_VIEW)


async def update_playlist(
    db: AsyncSession,
    actor_id: str,
    playlist_id: str,
    name: str | None,
    description: str | None,
) -> dict[str, Any]:
    playlist = await _owned_playlist(db, actor_id, playlist_id)
    require_text("Name and description are required", name, description)

    await crud.update(db, playlist, name=name, description=description)
    return await compose_one(db, playlist_id, PLAYLIST_VIEW)


async def delete_playlist(db: AsyncSession, actor_id: str, playlist_id: str) -> dict[str, Any]:
    playlist = await _owned_playlist(db, actor_id, playlist_id)

    deleted = crud.as_document(playlist)
    await db.execute(delete(PlaylistVideo).where(PlaylistVideo.playlist_id == playlist_id))
    await crud.delete_by_id(db, Playlist, playlist_id)
    return deleted
