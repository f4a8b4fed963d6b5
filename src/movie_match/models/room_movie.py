from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from movie_match.models.base import Base


class RoomMovie(Base):
    """One entry of a room's materialized candidate list."""

    __tablename__ = "room_movies"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(
        sa.String(16), sa.ForeignKey("rooms.id", ondelete="CASCADE"), index=True
    )
    movie_id: Mapped[str] = mapped_column(
        sa.String, sa.ForeignKey("movies.id", ondelete="CASCADE")
    )
    position: Mapped[int] = mapped_column(sa.Integer)

    __table_args__ = (
        sa.UniqueConstraint("room_id", "position", name="uq_room_movie_position"),
        sa.UniqueConstraint("room_id", "movie_id", name="uq_room_movie_movie"),
    )
