from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine as sa_create_async_engine

from movie_match.config.settings import Settings


def create_engine(settings: Settings, echo: bool = False) -> AsyncEngine:
    """Build the async engine for ``settings.database_url``.

    The engine is owned by whoever builds the application context; there is
    no module-level instance.
    """
    return sa_create_async_engine(settings.database_url, echo=echo, pool_pre_ping=True)
