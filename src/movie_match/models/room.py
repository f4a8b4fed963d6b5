from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from movie_match.models.base import Base


class Room(Base):
    """A pairing context for two participants, addressed by a short code."""

    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(sa.String(16), primary_key=True)
    user1_id: Mapped[str] = mapped_column(sa.String)
    user2_id: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    status: Mapped[str] = mapped_column(sa.String, default="active")  # "active" or "completed"
    filters: Mapped[dict | None] = mapped_column(sa.JSON, nullable=True)
    filters_version: Mapped[int] = mapped_column(sa.Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime,
        server_default=sa.text("CURRENT_TIMESTAMP"),
        onupdate=sa.func.now(),
    )

    __table_args__ = (
        sa.CheckConstraint("status IN ('active', 'completed')", name="valid_room_status"),
    )

    @property
    def participants(self) -> tuple[str, ...]:
        return tuple(p for p in (self.user1_id, self.user2_id) if p is not None)

    def has_participant(self, participant_id: str) -> bool:
        return participant_id in self.participants
