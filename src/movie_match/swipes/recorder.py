"""Swipe recording.

A participant has at most one live swipe per movie in a room; a new vote
replaces the old one through a single ``INSERT ... ON CONFLICT DO UPDATE``.
Every like triggers match detection.
"""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import SQLAlchemyError

from movie_match.context import AppContext
from movie_match.db.upsert import upsert_stmt
from movie_match.errors import MovieNotFoundError, NotRoomMemberError, RoomNotFoundError
from movie_match.matches.detector import MatchResult, detect_match
from movie_match.models.movie import Movie
from movie_match.models.room import Room
from movie_match.models.swipe import Swipe
from movie_match.rooms.service import normalize_room_code

logger = structlog.get_logger()


class SwipeDirection(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"


@dataclass
class SwipeResult:
    room_id: str
    participant_id: str
    movie_id: str
    direction: SwipeDirection
    match: MatchResult | None = None

    @property
    def matched(self) -> bool:
        return self.match is not None


async def record_swipe(
    ctx: AppContext,
    room_id: str,
    participant_id: str,
    movie_id: str,
    direction: SwipeDirection | str,
) -> SwipeResult:
    """Record (or replace) a participant's vote on a movie.

    The movie is not checked against the room's candidate list. On a like,
    match detection runs after the vote is committed; a detection failure is
    logged and the vote stays recorded.

    Raises:
        RoomNotFoundError: If the room does not exist.
        NotRoomMemberError: If the participant is not in the room.
        MovieNotFoundError: If the movie is not in the catalog.
        SQLAlchemyError: If the vote itself cannot be stored.
    """
    direction = SwipeDirection(direction)
    room_id = normalize_room_code(room_id)
    log = logger.bind(room_id=room_id, participant_id=participant_id, movie_id=movie_id)

    async with ctx.session_factory() as session, session.begin():
        room = await session.get(Room, room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        if not room.has_participant(participant_id):
            raise NotRoomMemberError(room_id, participant_id)
        if await session.get(Movie, movie_id) is None:
            raise MovieNotFoundError(movie_id)

        now = dt.datetime.now(dt.UTC).replace(tzinfo=None)
        stmt = upsert_stmt(
            session,
            Swipe.__table__,
            values={
                "room_id": room_id,
                "user_id": participant_id,
                "movie_id": movie_id,
                "direction": direction.value,
                "created_at": now,
                "updated_at": now,
            },
            conflict_columns=("room_id", "user_id", "movie_id"),
            update_columns=("direction", "updated_at"),
        )
        await session.execute(stmt)

    log.info("swipe_recorded", direction=direction.value)
    result = SwipeResult(
        room_id=room_id,
        participant_id=participant_id,
        movie_id=movie_id,
        direction=direction,
    )

    if direction is SwipeDirection.LIKE:
        try:
            result.match = await detect_match(ctx, room_id, movie_id)
        except SQLAlchemyError:
            log.error("match_detection_failed", exc_info=True)

    return result
