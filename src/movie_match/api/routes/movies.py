"""API routes for browsing and maintaining the movie catalog."""

from __future__ import annotations

import math

import sqlalchemy as sa
from fastapi import APIRouter, Depends, Query

from movie_match.api.deps import get_context
from movie_match.api.schemas import AddMovieResponse, MovieSchema, PaginatedResponse
from movie_match.catalog.ingestion import add_movie, add_to_playlist
from movie_match.catalog.json_loader import MovieIn
from movie_match.catalog.normalizer import movie_to_record
from movie_match.context import AppContext
from movie_match.models.movie import Movie

router = APIRouter(prefix="/api/movies", tags=["movies"])


@router.get("", response_model=PaginatedResponse[MovieSchema])
async def list_movies(
    ctx: AppContext = Depends(get_context),
    q: str | None = None,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
) -> PaginatedResponse[MovieSchema]:
    """Paginated catalog listing with optional title search."""
    stmt = sa.select(Movie)
    if q:
        stmt = stmt.where(Movie.title.ilike(f"%{q}%"))
    stmt = stmt.order_by(Movie.title, Movie.id)

    async with ctx.session_factory() as session:
        count_stmt = sa.select(sa.func.count()).select_from(stmt.subquery())
        total = (await session.execute(count_stmt)).scalar_one()

        stmt = stmt.offset((page - 1) * size).limit(size)
        movies = (await session.execute(stmt)).scalars().all()

    items = [MovieSchema.model_validate(movie_to_record(m)) for m in movies]
    pages = math.ceil(total / size) if total > 0 else 1
    return PaginatedResponse(items=items, total=total, page=page, size=size, pages=pages)


@router.post("", response_model=AddMovieResponse)
async def create_movie(
    movie: MovieIn,
    ctx: AppContext = Depends(get_context),
    add_to_playlist_flag: bool = Query(default=False, alias="add_to_playlist"),
) -> AddMovieResponse:
    """Add a movie by hand. Duplicates are reported, not inserted."""
    result = await add_movie(ctx, movie, to_playlist=add_to_playlist_flag)
    return AddMovieResponse.model_validate(result)


@router.post("/{movie_id}/playlist", response_model=AddMovieResponse)
async def tag_playlist(movie_id: str, ctx: AppContext = Depends(get_context)) -> AddMovieResponse:
    result = await add_to_playlist(ctx, movie_id)
    return AddMovieResponse.model_validate(result)
