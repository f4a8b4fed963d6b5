"""API routes for rooms: lifecycle, filters, candidates, swipes and matches."""

from __future__ import annotations

import math

from fastapi import APIRouter, Depends, Query

from movie_match.api.deps import get_context
from movie_match.api.schemas import (
    JoinRoomResponse,
    MatchSchema,
    MovieSchema,
    PaginatedResponse,
    ParticipantRequest,
    RoomSchema,
    SwipeRequest,
    SwipeResponse,
)
from movie_match.candidates.builder import load_candidate_page
from movie_match.candidates.filters import FilterCriteria
from movie_match.context import AppContext
from movie_match.matches.detector import list_matches
from movie_match.rooms.service import (
    apply_filters,
    complete_room,
    create_room,
    get_room,
    join_room,
)
from movie_match.swipes.recorder import record_swipe

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.post("", response_model=RoomSchema, status_code=201)
async def create(
    request: ParticipantRequest,
    ctx: AppContext = Depends(get_context),
) -> RoomSchema:
    """Create a room and take its first slot."""
    room = await create_room(ctx, request.participant_id)
    return RoomSchema.model_validate(room)


@router.get("/{code}", response_model=RoomSchema)
async def detail(code: str, ctx: AppContext = Depends(get_context)) -> RoomSchema:
    room = await get_room(ctx, code)
    return RoomSchema.model_validate(room)


@router.post("/{code}/join", response_model=JoinRoomResponse)
async def join(
    code: str,
    request: ParticipantRequest,
    ctx: AppContext = Depends(get_context),
) -> JoinRoomResponse:
    """Take the second slot, or confirm membership when rejoining."""
    joined = await join_room(ctx, code, request.participant_id)
    room = await get_room(ctx, code)
    return JoinRoomResponse(joined=joined, room=RoomSchema.model_validate(room))


@router.put("/{code}/filters", response_model=RoomSchema)
async def update_filters(
    code: str,
    criteria: FilterCriteria,
    ctx: AppContext = Depends(get_context),
) -> RoomSchema:
    """Replace the room's filters; the candidate list is rebuilt on next read."""
    room = await apply_filters(ctx, code, criteria)
    return RoomSchema.model_validate(room)


@router.post("/{code}/complete", response_model=RoomSchema)
async def complete(code: str, ctx: AppContext = Depends(get_context)) -> RoomSchema:
    room = await complete_room(ctx, code)
    return RoomSchema.model_validate(room)


@router.get("/{code}/candidates", response_model=PaginatedResponse[MovieSchema])
async def candidates(
    code: str,
    ctx: AppContext = Depends(get_context),
    participant_id: str | None = None,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
) -> PaginatedResponse[MovieSchema]:
    """Page through the room's shuffled candidate list.

    With ``participant_id``, movies that participant already swiped are skipped.
    """
    room = await get_room(ctx, code)
    movies, total = await load_candidate_page(
        ctx,
        room.id,
        participant_id=participant_id,
        offset=(page - 1) * size,
        limit=size,
    )
    items = [MovieSchema.model_validate(m) for m in movies]
    pages = math.ceil(total / size) if total > 0 else 1
    return PaginatedResponse(items=items, total=total, page=page, size=size, pages=pages)


@router.post("/{code}/swipes", response_model=SwipeResponse)
async def swipe(
    code: str,
    request: SwipeRequest,
    ctx: AppContext = Depends(get_context),
) -> SwipeResponse:
    room = await get_room(ctx, code)
    result = await record_swipe(
        ctx, room.id, request.participant_id, request.movie_id, request.direction
    )
    match = MatchSchema.model_validate(result.match.match) if result.match else None
    return SwipeResponse(
        movie_id=result.movie_id,
        direction=result.direction,
        matched=result.matched,
        match=match,
    )


@router.get("/{code}/matches", response_model=list[MovieSchema])
async def matches(code: str, ctx: AppContext = Depends(get_context)) -> list[MovieSchema]:
    """Movies both participants liked, oldest match first."""
    room = await get_room(ctx, code)
    return [MovieSchema.model_validate(m) for m in await list_matches(ctx, room.id)]
