from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from movie_match.models.base import Base


class Swipe(Base):
    """The live like/dislike decision of one participant for one movie in a room."""

    __tablename__ = "swipes"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(
        sa.String(16), sa.ForeignKey("rooms.id", ondelete="CASCADE")
    )
    user_id: Mapped[str] = mapped_column(sa.String)
    movie_id: Mapped[str] = mapped_column(
        sa.String, sa.ForeignKey("movies.id", ondelete="CASCADE")
    )
    direction: Mapped[str] = mapped_column(sa.String)  # "like" or "dislike"
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        sa.UniqueConstraint("room_id", "user_id", "movie_id", name="uq_swipe_room_user_movie"),
        sa.CheckConstraint("direction IN ('like', 'dislike')", name="valid_swipe_direction"),
        sa.Index("ix_swipes_room_movie", "room_id", "movie_id"),
    )
