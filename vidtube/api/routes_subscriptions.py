"""Subscription endpoints for the VidTube API."""

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.dependencies import envelope, require_actor, store_call
from vidtube.db.session import get_session
from vidtube.relations import toggle_subscription
from vidtube.views import get_channel_subscribers, get_subscribed_channels

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])
limiter = Limiter(key_func=get_remote_address)


@router.post("/c/{channel_id}")
@limiter.limit("60/minute")
async def toggle_channel_subscription(
    request: Request,
    channel_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """
    Subscribe to a channel, or unsubscribe if already subscribed.

    Returns:
        Envelope whose data holds ``state`` (added/removed) and the edge
    """
    result = await store_call(
        toggle_subscription(db, actor_id, channel_id), "toggling subscription"
    )
    message = "User Subscribed" if result.added else "User Unsubscribed"
    return envelope({"state": result.state.value, "subscription": result.edge}, message)


@router.get("/c/{channel_id}")
@limiter.limit("120/minute")
async def get_user_channel_subscribers(
    request: Request,
    channel_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """Public profiles of a channel's subscribers and their count."""
    result = await store_call(
        get_channel_subscribers(db, channel_id), "listing channel subscribers"
    )
    return envelope(result, "Subscriber List for channel Fetched Successfully")


@router.get("/u/{subscriber_id}")
@limiter.limit("120/minute")
async def get_channels_subscribed_to(
    request: Request,
    subscriber_id: str,
    actor_id: str = Depends(require_actor),
    db: AsyncSession = Depends(get_session),
):
    """Public profiles of the channels a user follows and their count."""
    result = await store_call(
        get_subscribed_channels(db, subscriber_id), "listing subscribed channels"
    )
    return envelope(result, "Channels Subscribed To Fetched Successfully")
