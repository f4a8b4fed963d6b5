"""Catalog movie model.

Several columns keep the encodings the catalog was loaded with:
``release_date`` may be a year, a ``YYYY-MM-DD`` string or a number,
``genres`` a list or a comma-separated string, and ``rt_rating`` a
percentage string or a 0-100 / 0-10 number. They are stored as JSON and
normalized at read time by :mod:`movie_match.catalog.normalizer`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from movie_match.models.base import Base


class Movie(Base):
    __tablename__ = "movies"

    id: Mapped[str] = mapped_column(sa.String, primary_key=True)
    title: Mapped[str] = mapped_column(sa.String, index=True)
    overview: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    poster_path: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    release_date: Mapped[Any] = mapped_column(sa.JSON, nullable=True)
    genres: Mapped[Any] = mapped_column(sa.JSON, nullable=True)
    rt_rating: Mapped[Any] = mapped_column(sa.JSON, nullable=True)
    imdb_rating: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    metascore: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    mpaa_rating: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    runtime: Mapped[Any] = mapped_column(sa.JSON, nullable=True)
    streaming_services: Mapped[Any] = mapped_column(sa.JSON, nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )
