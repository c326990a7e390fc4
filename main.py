"""VidTube API server."""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from vidtube.api import (
    comments_router,
    dashboard_router,
    health_router,
    likes_router,
    playlists_router,
    subscriptions_router,
    tweets_router,
    videos_router,
)
from vidtube.api.handlers import install_error_handlers
from vidtube.config import get_settings
from vidtube.db.session import dispose_engine, init_models
from vidtube.logging import setup_logging

logger = logging.getLogger("vidtube.access")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every API response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One log line per request with status and latency."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={"event": "request", "duration_ms": round(elapsed_ms, 1)},
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_models()
    logger.info("VidTube API started")
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    """Build the application: middleware, error envelope, routers, media."""
    settings = get_settings()

    app = FastAPI(
        title="VidTube",
        description="Video platform backend with composed read views and toggle relations",
        version="1.0.0",
        lifespan=lifespan,
    )

    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    install_error_handlers(app)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    for router in (
        health_router,
        videos_router,
        comments_router,
        tweets_router,
        playlists_router,
        likes_router,
        subscriptions_router,
        dashboard_router,
    ):
        app.include_router(router)

    # The local backend serves uploaded assets itself
    if settings.media_backend == "local":
        media_dir = Path(settings.media_local_path)
        media_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/media", StaticFiles(directory=str(media_dir)), name="media")

    return app


app = create_app()


def main():
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.env == "dev")


if __name__ == "__main__":
    main()
