"""Shared test fixtures."""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from movie_match.api.app import app
from movie_match.api.deps import get_context
from movie_match.candidates.filters import load_genre_stems
from movie_match.config.settings import Settings
from movie_match.context import AppContext
from movie_match.events.bus import RoomEventBus
from movie_match.models.base import Base
from movie_match.models.room import Room

from helpers import make_movie, seed

GENRE_STEMS_PATH = (
    Path(__file__).resolve().parents[1] / "src" / "movie_match" / "config" / "genre_stems.yaml"
)


@pytest.fixture
def genre_stems() -> dict[str, tuple[str, ...]]:
    """Load the real genre stem table."""
    return load_genre_stems(GENRE_STEMS_PATH)


@pytest.fixture
async def test_engine():
    """Create an async SQLite in-memory engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def file_engine(tmp_path: Path):
    """File-backed SQLite engine; each session gets its own connection.

    Used where operations genuinely run concurrently.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'movie_match.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture
async def ctx(test_session_factory, genre_stems) -> AppContext:
    """Application context wired to the in-memory database."""
    return AppContext(
        session_factory=test_session_factory,
        events=RoomEventBus(),
        settings=Settings(),
        genre_stems=genre_stems,
    )


@pytest.fixture
async def file_ctx(file_engine, genre_stems) -> AppContext:
    """Application context wired to the file-backed database."""
    return AppContext(
        session_factory=async_sessionmaker(file_engine, expire_on_commit=False),
        events=RoomEventBus(),
        settings=Settings(),
        genre_stems=genre_stems,
    )


@pytest.fixture
async def api_client(ctx):
    """Async HTTP client hitting the FastAPI app with the test context."""
    app.dependency_overrides[get_context] = lambda: ctx
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def abc_room(ctx) -> Room:
    """Room ABC123 with both participants and the two-movie scenario catalog.

    - M1 "Comedy, Drama", rated "75%"
    - M2 "Horror", rated "90%"
    """
    room = Room(id="ABC123", user1_id="alice", user2_id="bob", status="active")
    await seed(
        ctx,
        make_movie("M1", "Laugh Track", genres="Comedy, Drama", rt_rating="75%", release_date="2001"),
        make_movie("M2", "Night Terror", genres="Horror", rt_rating="90%", release_date="2003"),
        room,
    )
    return room
