"""FastAPI dependencies for API routers."""

import time
import uuid
from collections.abc import Awaitable
from pathlib import Path
from typing import Annotated, Any, TypeVar

from fastapi import Cookie, HTTPException, UploadFile
from jose import JWTError, jwt

from vidtube.config import get_settings
from vidtube.errors import bounded
from vidtube.media import LocalFile, MediaStore, get_media_store

T = TypeVar("T")

SESSION_COOKIE = "vidtube_sess"

_media_store: MediaStore | None = None


def _create_session_token(user_id: str) -> str:
    """Create a signed session token for ``user_id`` (used by tests and tooling)."""
    settings = get_settings()
    payload = {
        "sub": user_id,
        "iat": int(time.time()),
        "exp": int(time.time()) + 86400 * 7,  # 7 days
    }
    return jwt.encode(payload, settings.app_secret_key, algorithm="HS256")


def _verify_session_token(token: str) -> str | None:
    """Verify a session token and return the user ID, or None if invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.app_secret_key, algorithms=["HS256"])
        return payload.get("sub")
    except JWTError:
        return None


async def require_actor(
    session_cookie: Annotated[str | None, Cookie(alias=SESSION_COOKIE)] = None,
) -> str:
    """
    FastAPI dependency resolving the acting user's id.

    The session is issued by the identity provider; only its signature is
    checked here.

    Raises:
        HTTPException: 401 if session is missing or invalid
    """
    if not session_cookie:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = _verify_session_token(session_cookie)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid session")

    return user_id


def get_media() -> MediaStore:
    """Dependency returning the process-wide media store."""
    global _media_store

    if _media_store is None:
        _media_store = get_media_store(get_settings())

    return _media_store


async def store_call(awaitable: Awaitable[T], what: str) -> T:
    """Bound a store-only service call by the configured store timeout."""
    return await bounded(awaitable, get_settings().store_timeout_seconds, what)


async def spool_upload(upload: UploadFile | None) -> LocalFile | None:
    """Write a request file to the upload temp dir for the media store."""
    if upload is None or not upload.filename:
        return None
    tmp_dir = Path(get_settings().upload_tmp_dir)
    tmp_dir.mkdir(parents=True, exist_ok=True)
    path = tmp_dir / f"{uuid.uuid4().hex}{Path(upload.filename).suffix}"
    data = await upload.read()
    path.write_bytes(data)
    return LocalFile(path=str(path), content_type=upload.content_type, size=len(data))


def envelope(data: Any, message: str, status: int = 200) -> dict[str, Any]:
    """The fixed ``{status, data, message}`` response body."""
    return {"status": status, "data": data, "message": message}
