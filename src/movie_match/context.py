"""Application context passed explicitly to every service operation."""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from movie_match.candidates.filters import load_genre_stems
from movie_match.config.settings import Settings, get_settings
from movie_match.db.engine import create_engine
from movie_match.db.session import create_session_factory
from movie_match.events.bus import RoomEventBus


@dataclass
class AppContext:
    """Everything a service call needs: storage, event stream and config."""

    session_factory: async_sessionmaker[AsyncSession]
    events: RoomEventBus = field(default_factory=RoomEventBus)
    settings: Settings = field(default_factory=get_settings)
    genre_stems: dict[str, tuple[str, ...]] = field(default_factory=dict)
    engine: AsyncEngine | None = None

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def build_context(settings: Settings | None = None) -> AppContext:
    """Create the engine, session factory, event bus and stem table."""
    settings = settings or get_settings()
    engine = create_engine(settings)
    return AppContext(
        session_factory=create_session_factory(engine),
        events=RoomEventBus(),
        settings=settings,
        genre_stems=load_genre_stems(settings.genre_stems_path),
        engine=engine,
    )
