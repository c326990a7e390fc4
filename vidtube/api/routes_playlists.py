"""Playlist endpoints for the VidTube API."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.dependencies import envelope, require_actor, store_call
from vidtube.db.session import get_session
from vidtube.services import playlists

router = APIRouter(prefix="/api/v1/playlist", tags=["playlists"])
limiter = Limiter(key_func=get_remote_address)


class PlaylistRequest(BaseModel):
    """Request model for creating or renaming a playlist."""

    name: str | None = None
    description: str | None = None


@router.post("", status_code=201)
@limiter.limit("30/minute")
async def create_playlist(
    request: Request,
    body: PlaylistRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    playlist = await store_call(
        playlists.create_playlist(db, actor_id, body.name, body.description),
        "creating playlist",
    )
    return envelope(playlist, "Playlist created successfully", 201)


@router.get("/user/{user_id}")
@limiter.limit("120/minute")
async def get_user_playlists(
    request: Request,
    user_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    result = await store_call(playlists.list_user_playlists(db, user_id), "listing playlists")
    return envelope(result, "Playlist fetched successfully")


@router.get("/{playlist_id}")
@limiter.limit("120/minute")
async def get_playlist(
    request: Request,
    playlist_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    playlist = await store_call(playlists.get_playlist(db, playlist_id), "fetching playlist")
    return envelope(playlist, "Playlist fetched successfully")


@router.patch("/add/{video_id}/{playlist_id}")
@limiter.limit("60/minute")
async def add_video_to_playlist(
    request: Request,
    video_id: str,
    playlist_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    playlist = await store_call(
        playlists.add_video_to_playlist(db, actor_id, playlist_id, video_id),
        "adding video to playlist",
    )
    return envelope(playlist, "Video Added To Playlist")


@router.patch("/remove/{video_id}/{playlist_id}")
@limiter.limit("60/minute")
async def remove_video_from_playlist(
    request: Request,
    video_id: str,
    playlist_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    playlist = await store_call(
        playlists.remove_video_from_playlist(db, actor_id, playlist_id, video_id),
        "removing video from playlist",
    )
    return envelope(playlist, "Video removed from playlist")


@router.patch("/{playlist_id}")
@limiter.limit("30/minute")
async def update_playlist(
    request: Request,
    playlist_id: str,
    body: PlaylistRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    playlist = await store_call(
        playlists.update_playlist(db, actor_id, playlist_id, body.name, body.description),
        "updating playlist",
    )
    return envelope(playlist, "Playlist updated successfully")


@router.delete("/{playlist_id}")
@limiter.limit("30/minute")
async def delete_playlist(
    request: Request,
    playlist_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    deleted = await store_call(
        playlists.delete_playlist(db, actor_id, playlist_id), "deleting playlist"
    )
    return envelope(deleted, "Playlist deleted successfully")
