"""Comments on videos."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db import crud
from vidtube.db.models import Comment
from vidtube.errors import InvalidArgument
from vidtube.services.common import ensure_found, ensure_owner, require_text
from vidtube.views import COMMENT_VIEW, PageParams, compose_one, compose_page


async def list_video_comments(
    db: AsyncSession, video_id: str, params: PageParams
) -> dict[str, Any]:
    """One page of a video's comments, owner and video inlined."""
    return await compose_page(db, COMMENT_VIEW, {"video": video_id}, params)


async def add_comment(
    db: AsyncSession, actor_id: str, video_id: str, content: str | None
) -> dict[str, Any]:
    """Comment on a published video.

    Raises:
        NotFound: The video does not exist
        InvalidArgument: The video is unpublished or the content is empty
    """
    video = ensure_found(await crud.get_video_by_id(db, video_id), "Video not found")
    if not video.is_published:
        raise InvalidArgument("Cannot add comment to an unpublished video")
    require_text("Comment is required", content)

    comment = await crud.insert(
        db, Comment(content=content, video=video_id, owner=actor_id)
    )
    return await compose_one(db, comment.id, COMMENT_VIEW)


async def update_comment(
    db: AsyncSession, actor_id: str, comment_id: str, content: str | None
) -> dict[str, Any]:
    comment = ensure_found(
        await crud.get_comment_by_id(db, comment_id), "Comment not found"
    )
    ensure_owner(comment, actor_id, "You are unauthorized to update this comment")
    require_text("Comment is required", content)

    await crud.update(db, comment, content=content)
    return await compose_one(db, comment.id, COMMENT_VIEW)


async def delete_comment(db: AsyncSession, actor_id: str, comment_id: str) -> dict[str, Any]:
    comment = ensure_found(
        await crud.get_comment_by_id(db, comment_id), "Comment not found"
    )
    ensure_owner(comment, actor_id, "You are unauthorized to delete this comment")

    deleted = crud.as_document(comment)
    await crud.delete_by_id(db, Comment, comment_id)
    return deleted
