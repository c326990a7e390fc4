"""Guards shared by the resource services."""

from typing import TypeVar

from vidtube.errors import Forbidden, InvalidArgument, NotFound

T = TypeVar("T")


def ensure_found(obj: T | None, message: str) -> T:
    if obj is None:
        raise NotFound(message)
    return obj


def ensure_owner(obj, actor_id: str, message: str) -> None:
    """Only the owner may change a document; the real owner is never echoed."""
    if obj.owner != actor_id:
        raise Forbidden(message)


def require_text(message: str, *values: str | None) -> None:
    if any(value is None or not value.strip() for value in values):
        raise InvalidArgument(message)
