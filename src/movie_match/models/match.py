from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from movie_match.models.base import Base


class Match(Base):
    """A movie both participants of a room liked. At most one per (room, movie)."""

    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(
        sa.String(16), sa.ForeignKey("rooms.id", ondelete="CASCADE"), index=True
    )
    movie_id: Mapped[str] = mapped_column(
        sa.String, sa.ForeignKey("movies.id", ondelete="CASCADE")
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        sa.UniqueConstraint("room_id", "movie_id", name="uq_match_room_movie"),
    )
