"""Channel tweets."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db import crud
from vidtube.db.models import Tweet
from vidtube.services.common import ensure_found, ensure_owner, require_text
from vidtube.views import TWEET_VIEW, compose_one, compose_view


async def create_tweet(db: AsyncSession, actor_id: str, content: str | None) -> dict[str, Any]:
    require_text("Content is required", content)
    tweet = await crud.insert(db, Tweet(content=content, owner=actor_id))
    return await compose_one(db, tweet.id, TWEET_VIEW)


async def list_user_tweets(db: AsyncSession, user_id: str) -> list[dict[str, Any]]:
    return await compose_view(db, {"owner": user_id}, TWEET_VIEW)


async def update_tweet(
    db: AsyncSession, actor_id: str, tweet_id: str, content: str | None
) -> dict[str, Any]:
    tweet = ensure_found(await crud.get_tweet_by_id(db, tweet_id), "Tweet not found")
    ensure_owner(tweet, actor_id, "You are unauthorized to update this tweet")
    require_text("Content is required", content)

    await crud.update(db, tweet, content=content)
    return await compose_one(db, tweet.id, TWEET_VIEW)


async def delete_tweet(db: AsyncSession, actor_id: str, tweet_id: str) -> dict[str, Any]:
    tweet = ensure_found(await crud.get_tweet_by_id(db, tweet_id), "Tweet not found")
    ensure_owner(tweet, actor_id, "You are unauthorized to delete this tweet")

    deleted = crud.as_document(tweet)
    await crud.delete_by_id(db, Tweet, tweet_id)
    return deleted
