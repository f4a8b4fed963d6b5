"""Room lifecycle: creation with a short unique code, joining, filters, status."""

from __future__ import annotations

import random
import string

import sqlalchemy as sa
import structlog
from sqlalchemy.exc import IntegrityError

from movie_match.candidates.filters import FilterCriteria
from movie_match.context import AppContext
from movie_match.errors import RoomCodeAllocationError, RoomFullError, RoomNotFoundError
from movie_match.events.types import FiltersChanged
from movie_match.models.room import Room
from movie_match.models.room_movie import RoomMovie

logger = structlog.get_logger()

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits

_system_random = random.SystemRandom()


def generate_room_code(rng: random.Random | None = None, length: int = 6) -> str:
    """Random code of uppercase letters and digits, e.g. ``"ABC123"``."""
    rng = rng or _system_random
    return "".join(rng.choices(ROOM_CODE_ALPHABET, k=length))


def normalize_room_code(code: str) -> str:
    return code.strip().upper()


async def create_room(
    ctx: AppContext,
    participant_id: str,
    rng: random.Random | None = None,
) -> Room:
    """Create an active room owned by ``participant_id``.

    A code collision violates the primary key; a fresh code is tried up to
    ``room_code_attempts`` times. Any other storage error propagates.

    Raises:
        RoomCodeAllocationError: If every attempt collided.
    """
    attempts = ctx.settings.room_code_attempts
    for attempt in range(1, attempts + 1):
        code = generate_room_code(rng, ctx.settings.room_code_length)
        try:
            async with ctx.session_factory() as session, session.begin():
                room = Room(id=code, user1_id=participant_id, status="active", filters_version=0)
                session.add(room)
                await session.flush()
                await session.refresh(room)
        except IntegrityError:
            logger.warning("room_code_collision", room_id=code, attempt=attempt)
            continue

        logger.info("room_created", room_id=code, participant_id=participant_id)
        return room

    raise RoomCodeAllocationError(attempts)


async def get_room(ctx: AppContext, code: str) -> Room:
    """Look up a room by code (case-insensitive).

    Raises:
        RoomNotFoundError: If no room has that code.
    """
    code = normalize_room_code(code)
    async with ctx.session_factory() as session:
        room = await session.get(Room, code)
    if room is None:
        raise RoomNotFoundError(code)
    return room


async def join_room(ctx: AppContext, code: str, participant_id: str) -> bool:
    """Admit ``participant_id`` to the room's second slot.

    Rejoining a room one already occupies succeeds without changes. The
    slot is claimed with a conditional update, so two simultaneous joiners
    cannot both take it.

    Returns:
        ``True`` once the participant is in the room.

    Raises:
        RoomNotFoundError: If no room has that code.
        RoomFullError: If the second slot belongs to someone else.
    """
    code = normalize_room_code(code)
    log = logger.bind(room_id=code, participant_id=participant_id)

    async with ctx.session_factory() as session, session.begin():
        room = await session.get(Room, code)
        if room is None:
            raise RoomNotFoundError(code)
        if room.has_participant(participant_id):
            log.debug("room_rejoined")
            return True
        if room.user2_id is not None:
            raise RoomFullError(code)

        result = await session.execute(
            sa.update(Room)
            .where(Room.id == code, Room.user2_id.is_(None))
            .values(user2_id=participant_id, updated_at=sa.func.now())
            .execution_options(synchronize_session=False)
        )
        claimed = result.rowcount == 1

    if claimed:
        log.info("room_joined")
        return True

    # Another joiner won the slot between our read and the update
    async with ctx.session_factory() as session:
        room = await session.get(Room, code)
    if room is not None and room.has_participant(participant_id):
        return True
    raise RoomFullError(code)


async def apply_filters(ctx: AppContext, code: str, criteria: FilterCriteria) -> Room:
    """Store new criteria, invalidate the candidate list and notify the room.

    The filters, the version bump and the candidate-list delete commit
    together; the ``FiltersChanged`` event is published afterwards.

    Raises:
        RoomNotFoundError: If no room has that code.
    """
    code = normalize_room_code(code)
    async with ctx.session_factory() as session, session.begin():
        room = await session.get(Room, code)
        if room is None:
            raise RoomNotFoundError(code)
        room.filters = criteria.model_dump()
        room.filters_version = (room.filters_version or 0) + 1
        removed = await session.execute(sa.delete(RoomMovie).where(RoomMovie.room_id == code))
        await session.flush()
        await session.refresh(room)

    logger.info(
        "room_filters_applied",
        room_id=code,
        version=room.filters_version,
        invalidated=removed.rowcount or 0,
    )
    ctx.events.publish(FiltersChanged(room_id=code, version=room.filters_version, filters=room.filters))
    return room


async def complete_room(ctx: AppContext, code: str) -> Room:
    """Mark a room as completed. Idempotent."""
    code = normalize_room_code(code)
    async with ctx.session_factory() as session, session.begin():
        room = await session.get(Room, code)
        if room is None:
            raise RoomNotFoundError(code)
        if room.status != "completed":
            room.status = "completed"
            await session.flush()
        await session.refresh(room)

    logger.info("room_completed", room_id=code)
    return room
