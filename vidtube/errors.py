"""Error taxonomy shared by services and the HTTP layer."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class ApiError(Exception):
    """Base class for errors surfaced to the caller.

    Each subclass carries a stable ``kind`` and the HTTP status the request
    layer maps it to. The message is shown to the caller verbatim.
    """

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(ApiError):
    kind = "invalid_argument"
    status_code = 400


class Forbidden(ApiError):
    kind = "forbidden"
    status_code = 403


class NotFound(ApiError):
    kind = "not_found"
    status_code = 404


class Conflict(ApiError):
    kind = "conflict"
    status_code = 409


class UploadFailed(ApiError):
    kind = "upload_failed"
    status_code = 500


class OperationTimeout(ApiError):
    kind = "timeout"
    status_code = 504


async def bounded(awaitable: Awaitable[T], seconds: float, what: str) -> T:
    """Await ``awaitable`` for at most ``seconds``.

    Raises:
        OperationTimeout: If the call did not finish in time. Not retried.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        raise OperationTimeout(f"Timed out while {what}") from None
