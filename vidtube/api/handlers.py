"""Exception handlers rendering every failure as the response envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidtube.api.dependencies import envelope
from vidtube.errors import ApiError

logger = logging.getLogger(__name__)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render a service error as the response envelope."""
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(None, exc.message, exc.status_code),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework errors (401, unknown routes) in the same envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(None, str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
