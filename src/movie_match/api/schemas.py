"""Pydantic request/response schemas for the movie-match API."""

from __future__ import annotations

import datetime as dt
from typing import Annotated, Generic, TypeVar

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from movie_match.swipes.recorder import SwipeDirection


def _coerce_to_str(v: object) -> str | None:
    """Coerce datetimes to ISO strings for schema output."""
    if v is None:
        return None
    if isinstance(v, (dt.date, dt.datetime)):
        return v.isoformat()
    return str(v)


OptDateStr = Annotated[str | None, BeforeValidator(_coerce_to_str)]

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    size: int
    pages: int


# --- Movies ---


class MovieSchema(BaseModel):
    """Normalized movie as shown on a swipe card."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    overview: str | None = None
    poster_path: str | None = None
    year: int | None = None
    genres: list[str] = []
    rating: float | None = None
    imdb_rating: str | None = None
    mpaa_rating: str | None = None
    runtime: int | None = None
    streaming_services: list[str] = []


class AddMovieResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    message: str
    movie_id: str | None = None
    duplicate: bool = False
    can_add_to_playlist: bool = False
    already_in_playlist: bool = False


# --- Rooms ---


class ParticipantRequest(BaseModel):
    participant_id: str = Field(min_length=1)


class RoomSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str = Field(validation_alias=AliasChoices("code", "id"))
    user1_id: str
    user2_id: str | None = None
    status: str
    filters: dict | None = None
    filters_version: int = 0
    created_at: OptDateStr = None


class JoinRoomResponse(BaseModel):
    joined: bool
    room: RoomSchema


# --- Swipes & matches ---


class SwipeRequest(BaseModel):
    participant_id: str = Field(min_length=1)
    movie_id: str = Field(min_length=1)
    direction: SwipeDirection


class MatchSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_id: str
    movie_id: str
    created_at: OptDateStr = None


class SwipeResponse(BaseModel):
    movie_id: str
    direction: SwipeDirection
    matched: bool
    match: MatchSchema | None = None
