"""Database module for VidTube."""

from vidtube.db.models import (
    Base,
    Comment,
    Like,
    LikeKind,
    OrphanedMedia,
    Playlist,
    PlaylistVideo,
    Subscription,
    Tweet,
    User,
    Video,
)
from vidtube.db.session import (
    dispose_engine,
    get_engine,
    get_session,
    get_sessionmaker,
    init_models,
)

__all__ = [
    "Base",
    "Comment",
    "Like",
    "LikeKind",
    "OrphanedMedia",
    "Playlist",
    "PlaylistVideo",
    "Subscription",
    "Tweet",
    "User",
    "Video",
    "dispose_engine",
    "get_session",
    "get_engine",
    "get_sessionmaker",
    "init_models",
]
