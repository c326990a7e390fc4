"""At-most-one edge maintenance for likes and subscriptions.

An edge row binds an actor to a target. :class:`ToggleRelation` flips it
between absent and present and reports which way it went. The unique
constraints on the edge tables make the flip safe under concurrent requests:
a conditional delete (checked by rowcount) either removes the edge or falls
through to an insert, and an insert that loses a race to another request is
resolved as a no-op instead of surfacing the constraint violation.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db import crud
from vidtube.db.models import Base, Comment, Like, LikeKind, Subscription, Tweet, Video
from vidtube.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


class ToggleState(str, enum.Enum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class ToggleResult:
    """Which transition happened and the edge it happened to."""

    state: ToggleState
    edge: dict[str, Any]

    @property
    def added(self) -> bool:
        return self.state is ToggleState.ADDED


class ToggleRelation:
    """Toggle service for one edge table.

    Args:
        model: Edge model carrying a unique constraint over its key columns
        actor_field: Column holding the acting user
    """

    def __init__(self, model: type[Base], actor_field: str):
        self.model = model
        self.actor_field = actor_field

    def _conditions(self, actor_id: str, target: dict[str, Any]) -> list:
        columns = {self.actor_field: actor_id, **target}
        return [getattr(self.model, name) == value for name, value in columns.items()]

    async def find(self, db: AsyncSession, actor_id: str, target: dict[str, Any]):
        """Current edge for (actor, target), or None."""
        result = await db.execute(
            select(self.model).where(*self._conditions(actor_id, target))
        )
        return result.scalar_one_or_none()

    async def _remove(self, db: AsyncSession, actor_id: str, target: dict[str, Any]):
        existing = await self.find(db, actor_id, target)
        if existing is None:
            return None
        snapshot = crud.as_document(existing)
        result = await db.execute(delete(self.model).where(self.model.id == existing.id))
        await db.commit()
        # Zero rows means a concurrent toggle removed it first
        return snapshot if result.rowcount > 0 else None

    async def _add(self, db: AsyncSession, actor_id: str, target: dict[str, Any]):
        edge = self.model(**{self.actor_field: actor_id, **target})
        db.add(edge)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            existing = await self.find(db, actor_id, target)
            if existing is None:
                # The winning insert was already toggled away again
                raise Conflict("Edge changed concurrently, retry the request") from None
            logger.info(
                f"Concurrent {self.model.__tablename__} insert for actor {actor_id} "
                "resolved to existing edge"
            )
            return crud.as_document(existing)
        await db.refresh(edge)
        return crud.as_document(edge)

    async def toggle(
        self, db: AsyncSession, actor_id: str, target: dict[str, Any]
    ) -> ToggleResult:
        """Flip the edge between ``actor_id`` and ``target``.

        Args:
            db: Database session
            actor_id: The acting user
            target: Column values identifying the target side of the edge

        Returns:
            ToggleResult with REMOVED and the deleted row if the edge existed,
            otherwise ADDED and the created row
        """
        removed = await self._remove(db, actor_id, target)
        if removed is not None:
            logger.info(f"Removed {self.model.__tablename__} edge {removed['id']}")
            return ToggleResult(ToggleState.REMOVED, removed)

        added = await self._add(db, actor_id, target)
        logger.info(f"Added {self.model.__tablename__} edge {added['id']}")
        return ToggleResult(ToggleState.ADDED, added)


LIKES = ToggleRelation(Like, "liked_by")
SUBSCRIPTIONS = ToggleRelation(Subscription, "subscriber")

_LIKE_TARGETS: dict[LikeKind, tuple[type[Base], str]] = {
    LikeKind.VIDEO: (Video, "Video not found"),
    LikeKind.COMMENT: (Comment, "Comment not found"),
    LikeKind.TWEET: (Tweet, "Tweet not found"),
}


@dataclass(frozen=True)
class LikeTarget:
    """The one document a like points at."""

    kind: LikeKind
    target_id: str


async def toggle_like(db: AsyncSession, actor_id: str, target: LikeTarget) -> ToggleResult:
    """Like or unlike a video, comment or tweet.

    Raises:
        NotFound: If the target document does not exist
    """
    model, missing = _LIKE_TARGETS[target.kind]
    if await crud.get_by_id(db, model, target.target_id) is None:
        raise NotFound(missing)
    return await LIKES.toggle(
        db, actor_id, {"target_kind": target.kind, "target_id": target.target_id}
    )


async def toggle_subscription(
    db: AsyncSession, actor_id: str, channel_id: str
) -> ToggleResult:
    """Subscribe to or unsubscribe from a channel.

    The channel is not looked up; any user id is accepted as a channel.
    """
    return await SUBSCRIPTIONS.toggle(db, actor_id, {"channel": channel_id})
