"""SQLAlchemy models for VidTube.

References between documents (owners, comment videos, like targets, playlist
members) are plain indexed string columns rather than foreign keys, so a
dangling reference survives and read views resolve it to ``None``.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def uid() -> str:
    """Generate a UUID string for primary keys."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )


class User(TimestampMixin, Base):
    """Account owned by the identity provider; only read here."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    username: Mapped[str] = mapped_column(String, unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, index=True)
    avatar: Mapped[str | None] = mapped_column(String, nullable=True)
    cover_image: Mapped[str | None] = mapped_column(String, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String, nullable=True)
    refresh_token: Mapped[str | None] = mapped_column(String, nullable=True)


class Video(TimestampMixin, Base):
    """Uploaded video with its media references."""

    __tablename__ = "videos"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    video_file: Mapped[str] = mapped_column(String)
    thumbnail: Mapped[str] = mapped_column(String)
    title: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text)
    duration: Mapped[float] = mapped_column(Float, default=0.0)
    views: Mapped[int] = mapped_column(Integer, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True)
    owner: Mapped[str] = mapped_column(String, index=True)


class Comment(TimestampMixin, Base):
    """Comment left on a video."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    content: Mapped[str] = mapped_column(Text)
    video: Mapped[str] = mapped_column(String, index=True)
    owner: Mapped[str] = mapped_column(String, index=True)


class Tweet(TimestampMixin, Base):
    """Short text post on a channel."""

    __tablename__ = "tweets"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    content: Mapped[str] = mapped_column(Text)
    owner: Mapped[str] = mapped_column(String, index=True)


class Playlist(TimestampMixin, Base):
    """Named, ordered collection of videos."""

    __tablename__ = "playlists"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    name: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text)
    owner: Mapped[str] = mapped_column(String, index=True)


class PlaylistVideo(Base):
    """One position in a playlist's ordered video sequence."""

    __tablename__ = "playlist_videos"
    __table_args__ = (
        # A video appears at most once per playlist
        UniqueConstraint("playlist_id", "video_id", name="uq_playlist_video"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    playlist_id: Mapped[str] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"), index=True
    )
    video_id: Mapped[str] = mapped_column(String, index=True)
    position: Mapped[int] = mapped_column(Integer)


class LikeKind(str, enum.Enum):
    """Which kind of document a like points at."""

    VIDEO = "video"
    COMMENT = "comment"
    TWEET = "tweet"


class Like(TimestampMixin, Base):
    """Edge between a user and the video, comment or tweet they liked."""

    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("target_kind", "target_id", "liked_by", name="uq_like_edge"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    target_kind: Mapped[LikeKind] = mapped_column(
        Enum(LikeKind, native_enum=False, values_callable=lambda e: [m.value for m in e])
    )
    target_id: Mapped[str] = mapped_column(String, index=True)
    liked_by: Mapped[str] = mapped_column(String, index=True)


class Subscription(TimestampMixin, Base):
    """Edge between a subscriber and the channel (user) they follow."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber", "channel", name="uq_subscription_edge"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    subscriber: Mapped[str] = mapped_column(String, index=True)
    channel: Mapped[str] = mapped_column(String, index=True)


class OrphanedMedia(Base):
    """Media asset whose best-effort delete failed and awaits reconciliation."""

    __tablename__ = "orphaned_media"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=uid)
    url: Mapped[str] = mapped_column(String, index=True)
    resource_type: Mapped[str | None] = mapped_column(String, nullable=True)
    attempts: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
