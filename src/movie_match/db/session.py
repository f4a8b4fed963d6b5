from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to ``engine``.

    Sessions do not expire on commit so ORM rows can be handed back to
    callers after the transaction closes.
    """
    return async_sessionmaker(engine, expire_on_commit=False)
