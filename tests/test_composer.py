"""Tests for composed read views."""

import pytest

from tests.conftest import make_comment, make_playlist, make_tweet, make_user, make_video
from vidtube.db import crud
from vidtube.db.models import LikeKind, PlaylistVideo, Video
from vidtube.relations import LikeTarget, toggle_like, toggle_subscription
from vidtube.views import (
    COMMENT_VIEW,
    PLAYLIST_VIEW,
    TWEET_VIEW,
    USER_PUBLIC_FIELDS,
    compose_one,
    compose_view,
    get_channel_subscribers,
    get_subscribed_channels,
    get_video_view,
    list_channel_videos,
    list_liked_videos,
)


@pytest.mark.asyncio
async def test_comment_view_inlines_owner_and_video(db_session, alice, bob):
    video = await make_video(db_session, bob.id, title="Cooking")
    comment = await make_comment(db_session, alice.id, video.id, "Tasty")

    doc = await compose_one(db_session, comment.id, COMMENT_VIEW)

    assert doc["content"] == "Tasty"
    assert set(doc["owner"]) == set(USER_PUBLIC_FIELDS)
    assert doc["owner"]["username"] == "alice"
    assert doc["video"]["title"] == "Cooking"
    assert doc["video"]["owner"]["username"] == "bob"
    assert "password_hash" not in doc["video"]["owner"]
    assert "refresh_token" not in doc["owner"]


@pytest.mark.asyncio
async def test_shared_owner_is_inlined_as_independent_copies(db_session, alice):
    video = await make_video(db_session, alice.id)
    await make_comment(db_session, alice.id, video.id, "first")
    await make_comment(db_session, alice.id, video.id, "second")

    docs = await compose_view(db_session, {"video": video.id}, COMMENT_VIEW)

    assert [d["content"] for d in docs] == ["first", "second"]
    docs[0]["owner"]["username"] = "changed"
    assert docs[1]["owner"]["username"] == "alice"


@pytest.mark.asyncio
async def test_dangling_owner_becomes_none(db_session):
    tweet = await make_tweet(db_session, "ghost-user", "Still here")

    doc = await compose_one(db_session, tweet.id, TWEET_VIEW)

    assert doc["content"] == "Still here"
    assert doc["owner"] is None


@pytest.mark.asyncio
async def test_comment_on_deleted_video_keeps_comment(db_session, alice, bob):
    video = await make_video(db_session, bob.id)
    comment = await make_comment(db_session, alice.id, video.id)
    await crud.delete_by_id(db_session, Video, video.id)

    doc = await compose_one(db_session, comment.id, COMMENT_VIEW)

    assert doc["id"] == comment.id
    assert doc["video"] is None


@pytest.mark.asyncio
async def test_compose_one_missing_document(db_session):
    assert await get_video_view(db_session, "nope") is None


@pytest.mark.asyncio
async def test_compose_view_no_match_is_empty(db_session, alice):
    assert await compose_view(db_session, {"owner": alice.id}, TWEET_VIEW) == []


@pytest.mark.asyncio
async def test_playlist_view_keeps_positions(db_session, alice, bob):
    first = await make_video(db_session, bob.id, title="first")
    second = await make_video(db_session, alice.id, title="second")
    gone = await make_video(db_session, bob.id, title="gone")
    playlist = await make_playlist(db_session, alice.id)

    # Positions deliberately differ from insertion order
    for video, position in ((second, 1), (first, 0), (gone, 2)):
        db_session.add(
            PlaylistVideo(playlist_id=playlist.id, video_id=video.id, position=position)
        )
    await db_session.commit()
    await crud.delete_by_id(db_session, Video, gone.id)

    doc = await compose_one(db_session, playlist.id, PLAYLIST_VIEW)

    assert doc["owner"]["username"] == "alice"
    assert len(doc["videos"]) == 3
    assert doc["videos"][0]["title"] == "first"
    assert doc["videos"][0]["owner"]["username"] == "bob"
    assert doc["videos"][1]["title"] == "second"
    assert doc["videos"][1]["owner"]["username"] == "alice"
    assert doc["videos"][2] is None


@pytest.mark.asyncio
async def test_empty_playlist_has_empty_video_list(db_session, alice):
    playlist = await make_playlist(db_session, alice.id)

    doc = await compose_one(db_session, playlist.id, PLAYLIST_VIEW)

    assert doc["videos"] == []


@pytest.mark.asyncio
async def test_channel_videos_in_creation_order(db_session, alice, bob):
    await make_video(db_session, alice.id, title="one")
    await make_video(db_session, bob.id, title="other channel")
    await make_video(db_session, alice.id, title="two")

    docs = await list_channel_videos(db_session, alice.id)

    assert [d["title"] for d in docs] == ["one", "two"]
    assert all(d["owner"]["id"] == alice.id for d in docs)


@pytest.mark.asyncio
async def test_liked_videos_counts_and_order(db_session, alice, bob, carol):
    popular = await make_video(db_session, bob.id, title="popular")
    niche = await make_video(db_session, bob.id, title="niche")
    await make_video(db_session, bob.id, title="unliked")

    await toggle_like(db_session, alice.id, LikeTarget(LikeKind.VIDEO, popular.id))
    await toggle_like(db_session, carol.id, LikeTarget(LikeKind.VIDEO, popular.id))
    await toggle_like(db_session, alice.id, LikeTarget(LikeKind.VIDEO, niche.id))

    docs = await list_liked_videos(db_session)

    assert [(d["title"], d["number_of_likes"]) for d in docs] == [
        ("popular", 2),
        ("niche", 1),
    ]
    assert docs[0]["owner"]["username"] == "bob"


@pytest.mark.asyncio
async def test_liked_videos_for_one_user(db_session, alice, bob, carol):
    popular = await make_video(db_session, bob.id, title="popular")
    niche = await make_video(db_session, bob.id, title="niche")
    await toggle_like(db_session, alice.id, LikeTarget(LikeKind.VIDEO, popular.id))
    await toggle_like(db_session, carol.id, LikeTarget(LikeKind.VIDEO, popular.id))
    await toggle_like(db_session, alice.id, LikeTarget(LikeKind.VIDEO, niche.id))

    docs = await list_liked_videos(db_session, liked_by=carol.id)

    assert [(d["title"], d["number_of_likes"]) for d in docs] == [("popular", 2)]


@pytest.mark.asyncio
async def test_unliked_video_drops_out(db_session, alice, bob):
    video = await make_video(db_session, bob.id)
    target = LikeTarget(LikeKind.VIDEO, video.id)
    await toggle_like(db_session, alice.id, target)
    assert len(await list_liked_videos(db_session)) == 1

    await toggle_like(db_session, alice.id, target)

    assert await list_liked_videos(db_session) == []


@pytest.mark.asyncio
async def test_liked_videos_ignore_comment_likes(db_session, alice, bob):
    video = await make_video(db_session, bob.id)
    comment = await make_comment(db_session, bob.id, video.id)
    await toggle_like(db_session, alice.id, LikeTarget(LikeKind.COMMENT, comment.id))

    assert await list_liked_videos(db_session) == []


@pytest.mark.asyncio
async def test_channel_subscribers(db_session, alice, bob, carol):
    await toggle_subscription(db_session, alice.id, bob.id)
    await toggle_subscription(db_session, carol.id, bob.id)

    result = await get_channel_subscribers(db_session, bob.id)

    assert result["number_of_subscribers"] == 2
    assert [u["username"] for u in result["subscribers"]] == ["alice", "carol"]
    assert set(result["subscribers"][0]) == set(USER_PUBLIC_FIELDS)


@pytest.mark.asyncio
async def test_subscribed_channels(db_session, alice, bob, carol):
    await toggle_subscription(db_session, alice.id, bob.id)
    await toggle_subscription(db_session, alice.id, carol.id)
    await toggle_subscription(db_session, alice.id, "deleted-channel")

    result = await get_subscribed_channels(db_session, alice.id)

    assert result["number_of_channels_subscribed_to"] == 2
    assert [u["username"] for u in result["channels"]] == ["bob", "carol"]


@pytest.mark.asyncio
async def test_channel_without_subscribers(db_session):
    dave = await make_user(db_session, "dave")

    result = await get_channel_subscribers(db_session, dave.id)

    assert result == {"subscribers": [], "number_of_subscribers": 0}


@pytest.mark.asyncio
async def test_playlists_sharing_a_video_get_separate_copies(db_session, alice, bob):
    video = await make_video(db_session, bob.id)
    first = await make_playlist(db_session, alice.id, "First")
    second = await make_playlist(db_session, alice.id, "Second")
    for playlist in (first, second):
        db_session.add(PlaylistVideo(playlist_id=playlist.id, video_id=video.id, position=0))
    await db_session.commit()

    docs = await compose_view(db_session, {"owner": alice.id}, PLAYLIST_VIEW)

    docs[0]["videos"][0]["owner"]["username"] = "changed"
    docs[0]["videos"][0]["title"] = "changed"
    assert docs[1]["videos"][0]["owner"]["username"] == "bob"
    assert docs[1]["videos"][0]["title"] == "A video"
