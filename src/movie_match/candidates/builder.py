"""Candidate list materialization.

A room's candidate list is built once from the whole catalog: normalize,
filter, shuffle, then persist with positions ``0..n-1``. Later reads reuse
the stored order until new filters invalidate it.
"""

from __future__ import annotations

import random

import sqlalchemy as sa
import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from movie_match.candidates.filters import FilterCriteria, apply_filters
from movie_match.candidates.shuffle import fisher_yates_shuffle
from movie_match.catalog.normalizer import MovieRecord, movie_to_record
from movie_match.context import AppContext
from movie_match.errors import RoomNotFoundError
from movie_match.models.movie import Movie
from movie_match.models.room import Room
from movie_match.models.room_movie import RoomMovie
from movie_match.models.swipe import Swipe

logger = structlog.get_logger()


async def load_candidate_list(session: AsyncSession, room_id: str) -> list[MovieRecord]:
    """Return the stored candidate list for a room in position order."""
    stmt = (
        sa.select(Movie)
        .join(RoomMovie, RoomMovie.movie_id == Movie.id)
        .where(RoomMovie.room_id == room_id)
        .order_by(RoomMovie.position)
    )
    result = await session.execute(stmt)
    return [movie_to_record(m) for m in result.scalars().all()]


async def load_catalog(session: AsyncSession, page_size: int = 1000) -> list[Movie]:
    """Load every catalog movie, one page of ``page_size`` rows at a time.

    Pages are concatenated in id order before any filtering happens.
    """
    total = (await session.execute(sa.select(sa.func.count()).select_from(Movie))).scalar_one()

    movies: list[Movie] = []
    for offset in range(0, total, page_size):
        stmt = sa.select(Movie).order_by(Movie.id).offset(offset).limit(page_size)
        page = (await session.execute(stmt)).scalars().all()
        movies.extend(page)
        logger.debug("catalog_page_loaded", offset=offset, rows=len(page))

    logger.info("catalog_loaded", total=total, loaded=len(movies))
    return movies


async def clear_candidate_list(ctx: AppContext, room_id: str) -> int:
    """Delete a room's candidate list. Returns the number of entries removed."""
    async with ctx.session_factory() as session, session.begin():
        result = await session.execute(sa.delete(RoomMovie).where(RoomMovie.room_id == room_id))
    return result.rowcount or 0


async def _insert_entries(
    session: AsyncSession,
    room_id: str,
    movie_ids: list[str],
    batch_size: int,
) -> None:
    for start in range(0, len(movie_ids), batch_size):
        batch = [
            {"room_id": room_id, "movie_id": movie_id, "position": start + offset}
            for offset, movie_id in enumerate(movie_ids[start : start + batch_size])
        ]
        await session.execute(sa.insert(RoomMovie), batch)


async def build_candidate_list(
    ctx: AppContext,
    room_id: str,
    rng: random.Random | None = None,
) -> list[MovieRecord]:
    """Return the room's candidate list, materializing it if absent.

    Steps:
        1. Reuse a stored, non-empty list as-is (no re-filtering)
        2. Load the room's criteria and the full catalog
        3. Filter, then Fisher-Yates shuffle
        4. In one transaction: lock the room row, re-check for a stored
           list, clear leftovers and insert entries in batches

    A builder that waited on the room row finds the other participant's
    list in step 4 and returns it, so both participants get the same
    order. The ``(room_id, position)`` constraint backs this up.

    Args:
        ctx: Application context.
        room_id: Room code.
        rng: Optional random source for a reproducible shuffle.

    Returns:
        The ordered candidate movies (possibly empty).

    Raises:
        RoomNotFoundError: If the room does not exist.
    """
    log = logger.bind(room_id=room_id)

    async with ctx.session_factory() as session:
        existing = await load_candidate_list(session, room_id)
        if existing:
            log.debug("candidate_list_reused", count=len(existing))
            return existing

        room = await session.get(Room, room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        criteria = FilterCriteria.model_validate(room.filters or {})
        movies = await load_catalog(session, ctx.settings.catalog_page_size)

    records = [movie_to_record(m) for m in movies]
    kept, stats = apply_filters(records, criteria, ctx.genre_stems)
    log.info("candidate_filters_applied", total=stats.total, **stats.stages)

    shuffled = fisher_yates_shuffle(kept, rng)

    try:
        async with ctx.session_factory() as session, session.begin():
            # Write to the room row first: concurrent builders queue here
            await session.execute(
                sa.update(Room)
                .where(Room.id == room_id)
                .values(updated_at=sa.func.now())
                .execution_options(synchronize_session=False)
            )
            stored = await load_candidate_list(session, room_id)
            if stored:
                log.info("candidate_list_built_concurrently", count=len(stored))
                return stored

            await session.execute(sa.delete(RoomMovie).where(RoomMovie.room_id == room_id))
            await _insert_entries(
                session,
                room_id,
                [r.id for r in shuffled],
                ctx.settings.candidate_insert_batch_size,
            )
    except IntegrityError:
        log.info("candidate_list_built_concurrently")
        async with ctx.session_factory() as session:
            return await load_candidate_list(session, room_id)

    log.info("candidate_list_built", count=len(shuffled))
    return shuffled


async def load_candidate_page(
    ctx: AppContext,
    room_id: str,
    participant_id: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[MovieRecord], int]:
    """Slice of the candidate list for incremental delivery.

    ``offset`` and ``limit`` index the stored order, so pages stay stable
    while the participant swipes. When ``participant_id`` is given, movies
    that participant already swiped are dropped from the slice.

    Returns:
        Tuple of (movies in the slice, length of the whole list).
    """
    candidates = await build_candidate_list(ctx, room_id)
    page = candidates[offset : offset + limit]

    if participant_id is not None:
        async with ctx.session_factory() as session:
            stmt = sa.select(Swipe.movie_id).where(
                Swipe.room_id == room_id, Swipe.user_id == participant_id
            )
            swiped = set((await session.execute(stmt)).scalars().all())
        page = [c for c in page if c.id not in swiped]

    return page, len(candidates)
