"""Tweet endpoints for the VidTube API."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.dependencies import envelope, require_actor, store_call
from vidtube.db.session import get_session
from vidtube.services import tweets

router = APIRouter(prefix="/api/v1/tweets", tags=["tweets"])
limiter = Limiter(key_func=get_remote_address)


class TweetRequest(BaseModel):
    """Request model for creating or editing a tweet."""

    content: str | None = None


@router.post("", status_code=201)
@limiter.limit("30/minute")
async def create_tweet(
    request: Request,
    body: TweetRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    tweet = await store_call(tweets.create_tweet(db, actor_id, body.content), "creating tweet")
    return envelope(tweet, "Tweet created successfully", 201)


@router.get("/user/{user_id}")
@limiter.limit("120/minute")
async def get_user_tweets(
    request: Request,
    user_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    result = await store_call(tweets.list_user_tweets(db, user_id), "listing tweets")
    return envelope(result, "Tweets fetched successfully")


@router.patch("/{tweet_id}")
@limiter.limit("30/minute")
async def update_tweet(
    request: Request,
    tweet_id: str,
    body: TweetRequest,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    tweet = await store_call(
        tweets.update_tweet(db, actor_id, tweet_id, body.content), "updating tweet"
    )
    return envelope(tweet, "Tweet updated successfully")


@router.delete("/{tweet_id}")
@limiter.limit("30/minute")
async def delete_tweet(
    request: Request,
    tweet_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    deleted = await store_call(tweets.delete_tweet(db, actor_id, tweet_id), "deleting tweet")
    return envelope(deleted, "Tweet deleted successfully")
