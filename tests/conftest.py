"""Shared fixtures: test settings, an in-memory database and seeded users."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from vidtube import config
from vidtube.config import Settings
from vidtube.db import crud
from vidtube.db.models import Base, Comment, Playlist, Tweet, User, Video


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    """Install settings pointing media and uploads at a temp dir."""
    settings = Settings(
        app_secret_key="test-secret-key",
        media_local_path=str(tmp_path / "media"),
        media_url_base="http://testserver/media",
        upload_tmp_dir=str(tmp_path / "uploads"),
        large_file_limit_bytes=1024,
    )
    monkeypatch.setattr(config, "_settings", settings)
    return settings


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(db_engine):
    """Session maker bound to the test database."""
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(test_db):
    """Create a database session for testing."""
    async with test_db() as session:
        yield session


async def make_user(db: AsyncSession, username: str) -> User:
    return await crud.insert(
        db,
        User(
            username=username,
            full_name=f"{username.title()} Example",
            email=f"{username}@example.com",
            avatar=f"https://cdn.example.com/{username}.png",
            password_hash="$2b$12$not-a-real-hash",
            refresh_token="secret-refresh-token",
        ),
    )


async def make_video(db: AsyncSession, owner: str, **values) -> Video:
    fields = {
        "video_file": "http://testserver/media/video/v.mp4",
        "thumbnail": "http://testserver/media/image/t.png",
        "title": "A video",
        "description": "About things",
        "duration": 12.5,
        "views": 0,
        "is_published": True,
    }
    fields.update(values)
    return await crud.insert(db, Video(owner=owner, **fields))


async def make_comment(db: AsyncSession, owner: str, video: str, content: str = "Nice") -> Comment:
    return await crud.insert(db, Comment(owner=owner, video=video, content=content))


async def make_tweet(db: AsyncSession, owner: str, content: str = "Hello") -> Tweet:
    return await crud.insert(db, Tweet(owner=owner, content=content))


async def make_playlist(db: AsyncSession, owner: str, name: str = "Favourites") -> Playlist:
    return await crud.insert(
        db, Playlist(owner=owner, name=name, description="Things I like")
    )


@pytest_asyncio.fixture
async def alice(db_session):
    return await make_user(db_session, "alice")


@pytest_asyncio.fixture
async def bob(db_session):
    return await make_user(db_session, "bob")


@pytest_asyncio.fixture
async def carol(db_session):
    return await make_user(db_session, "carol")
