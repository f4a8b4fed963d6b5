"""Typed room events pushed to connected clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar


@dataclass(frozen=True)
class MatchCreated:
    """Both participants liked ``movie_id``."""

    type: ClassVar[str] = "match_created"

    room_id: str
    movie_id: str
    match_id: int
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "room_id": self.room_id,
            "movie_id": self.movie_id,
            "match_id": self.match_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class FiltersChanged:
    """New filter criteria were applied; clients reload the candidate list."""

    type: ClassVar[str] = "filters_changed"

    room_id: str
    version: int
    filters: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "room_id": self.room_id,
            "version": self.version,
            "filters": self.filters,
        }


RoomEvent = MatchCreated | FiltersChanged
