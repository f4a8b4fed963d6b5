"""Match detection: both participants liked the same movie.

The ``(room_id, movie_id)`` unique constraint on ``matches`` is the only
guard against duplicates. When two likes race, both callers see two likes
and both try to insert; the loser's ``IntegrityError`` means the match
already exists and it stays quiet, so clients are notified exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass

import sqlalchemy as sa
import structlog
from sqlalchemy.exc import IntegrityError

from movie_match.catalog.normalizer import MovieRecord, movie_to_record
from movie_match.context import AppContext
from movie_match.events.types import MatchCreated
from movie_match.models.match import Match
from movie_match.models.movie import Movie
from movie_match.models.swipe import Swipe

logger = structlog.get_logger()

REQUIRED_LIKES = 2


@dataclass
class MatchResult:
    match: Match
    created: bool


async def count_likes(ctx: AppContext, room_id: str, movie_id: str) -> int:
    """Number of distinct participants whose live swipe on the movie is a like."""
    stmt = sa.select(sa.func.count(sa.distinct(Swipe.user_id))).where(
        Swipe.room_id == room_id,
        Swipe.movie_id == movie_id,
        Swipe.direction == "like",
    )
    async with ctx.session_factory() as session:
        return (await session.execute(stmt)).scalar_one()


async def _load_match(ctx: AppContext, room_id: str, movie_id: str) -> Match | None:
    stmt = sa.select(Match).where(Match.room_id == room_id, Match.movie_id == movie_id)
    async with ctx.session_factory() as session:
        return (await session.execute(stmt)).scalar_one_or_none()


async def detect_match(ctx: AppContext, room_id: str, movie_id: str) -> MatchResult | None:
    """Record a match if both participants like ``movie_id``.

    Only the call that inserts the row publishes :class:`MatchCreated`.

    Returns:
        ``None`` if fewer than two participants like the movie, otherwise
        the match and whether this call created it.
    """
    log = logger.bind(room_id=room_id, movie_id=movie_id)

    likes = await count_likes(ctx, room_id, movie_id)
    if likes < REQUIRED_LIKES:
        log.debug("match_not_yet", likes=likes)
        return None

    async with ctx.session_factory() as session:
        match = Match(room_id=room_id, movie_id=movie_id)
        session.add(match)
        try:
            await session.flush()
            await session.refresh(match)
            await session.commit()
        except IntegrityError:
            # Unique constraint violation = concurrent detection already recorded it
            await session.rollback()
            log.debug("match_already_recorded")
            existing = None
        else:
            existing = match

    if existing is None:
        existing = await _load_match(ctx, room_id, movie_id)
        if existing is None:
            return None
        return MatchResult(match=existing, created=False)

    log.info("match_created", match_id=existing.id)
    ctx.events.publish(
        MatchCreated(
            room_id=room_id,
            movie_id=movie_id,
            match_id=existing.id,
            created_at=existing.created_at,
        )
    )
    return MatchResult(match=existing, created=True)


async def list_matches(ctx: AppContext, room_id: str) -> list[MovieRecord]:
    """Movies matched in a room, oldest match first."""
    stmt = (
        sa.select(Movie)
        .join(Match, Match.movie_id == Movie.id)
        .where(Match.room_id == room_id)
        .order_by(Match.created_at, Match.id)
    )
    async with ctx.session_factory() as session:
        movies = (await session.execute(stmt)).scalars().all()
    return [movie_to_record(m) for m in movies]
