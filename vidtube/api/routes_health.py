"""Health check endpoints for the VidTube API."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.session import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def health_check():
    """Liveness: the process is up."""
    return {"ok": True}


@router.get("/readyz")
async def readiness_check(db: AsyncSession = Depends(get_session)):
    """
    Readiness: the document store answers a trivial query.

    Returns:
        ``{"ok": true}``, or 503 with ``{"ok": false}`` if the store is unreachable
    """
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.error("Readiness check failed", exc_info=True)
        return JSONResponse(status_code=503, content={"ok": False})
    return {"ok": True}
