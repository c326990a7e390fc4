"""API routers for VidTube."""

from vidtube.api.routes_comments import router as comments_router
from vidtube.api.routes_dashboard import router as dashboard_router
from vidtube.api.routes_health import router as health_router
from vidtube.api.routes_likes import router as likes_router
from vidtube.api.routes_playlists import router as playlists_router
from vidtube.api.routes_subscriptions import router as subscriptions_router
from vidtube.api.routes_tweets import router as tweets_router
from vidtube.api.routes_videos import router as videos_router

__all__ = [
    "comments_router",
    "dashboard_router",
    "health_router",
    "likes_router",
    "playlists_router",
    "subscriptions_router",
    "tweets_router",
    "videos_router",
]
