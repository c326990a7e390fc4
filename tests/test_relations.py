"""Tests for like and subscription toggles."""

import pytest
from sqlalchemy import func, select

from tests.conftest import make_comment, make_tweet, make_video
from vidtube.db.models import Like, LikeKind, Subscription
from vidtube.errors import NotFound
from vidtube.relations import (
    LIKES,
    SUBSCRIPTIONS,
    LikeTarget,
    ToggleState,
    toggle_like,
    toggle_subscription,
)


async def _count(db, model) -> int:
    return (await db.execute(select(func.count(model.id)))).scalar_one()


@pytest.mark.asyncio
async def test_like_toggle_round_trip(db_session, alice, bob):
    video = await make_video(db_session, bob.id)
    target = LikeTarget(LikeKind.VIDEO, video.id)

    first = await toggle_like(db_session, alice.id, target)
    assert first.state is ToggleState.ADDED
    assert first.added
    assert first.edge["target_id"] == video.id
    assert first.edge["target_kind"] == "video"
    assert first.edge["liked_by"] == alice.id
    assert await _count(db_session, Like) == 1

    second = await toggle_like(db_session, alice.id, target)
    assert second.state is ToggleState.REMOVED
    assert second.edge["id"] == first.edge["id"]
    assert await _count(db_session, Like) == 0


@pytest.mark.asyncio
async def test_likes_of_different_kinds_are_separate_edges(db_session, alice, bob):
    video = await make_video(db_session, bob.id)
    comment = await make_comment(db_session, bob.id, video.id)
    tweet = await make_tweet(db_session, bob.id)

    for kind, target_id in (
        (LikeKind.VIDEO, video.id),
        (LikeKind.COMMENT, comment.id),
        (LikeKind.TWEET, tweet.id),
    ):
        result = await toggle_like(db_session, alice.id, LikeTarget(kind, target_id))
        assert result.added

    assert await _count(db_session, Like) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind,message",
    [
        (LikeKind.VIDEO, "Video not found"),
        (LikeKind.COMMENT, "Comment not found"),
        (LikeKind.TWEET, "Tweet not found"),
    ],
)
async def test_like_missing_target(db_session, alice, kind, message):
    with pytest.raises(NotFound) as exc_info:
        await toggle_like(db_session, alice.id, LikeTarget(kind, "does-not-exist"))

    assert exc_info.value.message == message
    assert await _count(db_session, Like) == 0


@pytest.mark.asyncio
async def test_subscription_toggle_round_trip(db_session, alice, bob):
    first = await toggle_subscription(db_session, alice.id, bob.id)
    assert first.state is ToggleState.ADDED
    assert first.edge["subscriber"] == alice.id
    assert first.edge["channel"] == bob.id

    second = await toggle_subscription(db_session, alice.id, bob.id)
    assert second.state is ToggleState.REMOVED
    assert await _count(db_session, Subscription) == 0


@pytest.mark.asyncio
async def test_subscription_to_unknown_channel_is_accepted(db_session, alice):
    result = await toggle_subscription(db_session, alice.id, "no-such-user")

    assert result.added
    assert result.edge["channel"] == "no-such-user"


@pytest.mark.asyncio
async def test_concurrent_add_resolves_to_existing_edge(db_session, alice, bob, monkeypatch):
    """An insert that loses the race reports ADDED with the winner's edge."""
    winner = await toggle_subscription(db_session, alice.id, bob.id)

    async def stale_remove(db, actor_id, target):
        # This request saw no edge before the other one committed
        return None

    monkeypatch.setattr(SUBSCRIPTIONS, "_remove", stale_remove)
    result = await toggle_subscription(db_session, alice.id, bob.id)

    assert result.state is ToggleState.ADDED
    assert result.edge["id"] == winner.edge["id"]
    assert await _count(db_session, Subscription) == 1


@pytest.mark.asyncio
async def test_find_returns_current_edge(db_session, alice, bob):
    video = await make_video(db_session, bob.id)
    target = {"target_kind": LikeKind.VIDEO, "target_id": video.id}

    assert await LIKES.find(db_session, alice.id, target) is None
    await LIKES.toggle(db_session, alice.id, target)

    edge = await LIKES.find(db_session, alice.id, target)
    assert edge is not None
    assert edge.liked_by == alice.id
