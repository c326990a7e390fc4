"""Composed read views and pagination."""

from .composer import (
    COMMENT_VIEW,
    PLAYLIST_VIEW,
    TWEET_VIEW,
    USER_PUBLIC_FIELDS,
    VIDEO_VIEW,
    JoinSpec,
    ViewShape,
    compose_one,
    compose_rows,
    compose_view,
    get_channel_subscribers,
    get_subscribed_channels,
    get_video_view,
    list_channel_videos,
    list_liked_videos,
)
from .pagination import PageParams, compose_page, paginate

__all__ = [
    "COMMENT_VIEW",
    "PLAYLIST_VIEW",
    "TWEET_VIEW",
    "USER_PUBLIC_FIELDS",
    "VIDEO_VIEW",
    "JoinSpec",
    "PageParams",
    "ViewShape",
    "compose_one",
    "compose_page",
    "compose_rows",
    "compose_view",
    "get_channel_subscribers",
    "get_subscribed_channels",
    "get_video_view",
    "list_channel_videos",
    "list_liked_videos",
    "paginate",
]
