"""Catalog maintenance: manual additions, playlist tagging, bulk import, refresh.

The swipe core never writes to ``movies``; everything that does lives here.
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
from pathlib import Path

import sqlalchemy as sa
import structlog
from sqlalchemy.exc import IntegrityError

from movie_match.catalog.json_loader import MovieIn, load_catalog_file
from movie_match.catalog.normalizer import normalize_genres, parse_year
from movie_match.context import AppContext
from movie_match.db.upsert import insert_ignore_stmt
from movie_match.errors import MovieNotFoundError
from movie_match.models.movie import Movie

logger = structlog.get_logger()

PLAYLIST_GENRE = "Playlist"

IMPORT_BATCH_SIZE = 500


@dataclass
class AddMovieResult:
    success: bool
    message: str
    movie_id: str | None = None
    duplicate: bool = False
    can_add_to_playlist: bool = False
    already_in_playlist: bool = False


@dataclass
class ImportStats:
    inserted: int = 0
    skipped: int = 0


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC).replace(tzinfo=None)


def _movie_row(payload: MovieIn) -> dict:
    return {
        "id": payload.id,
        "title": payload.title,
        "overview": payload.overview,
        "poster_path": payload.poster_path,
        "release_date": payload.release_date,
        "genres": payload.genres,
        "rt_rating": payload.rt_rating,
        "imdb_rating": payload.imdb_rating,
        "metascore": payload.metascore,
        "mpaa_rating": payload.mpaa_rating,
        "runtime": payload.runtime,
        "streaming_services": payload.streaming_services,
    }


async def add_to_playlist(ctx: AppContext, movie_id: str) -> AddMovieResult:
    """Tag a movie with the ``Playlist`` pseudo-genre.

    Genres are rewritten as a normalized list. Tagging twice is a no-op.

    Raises:
        MovieNotFoundError: If the movie does not exist.
    """
    async with ctx.session_factory() as session, session.begin():
        movie = await session.get(Movie, movie_id)
        if movie is None:
            raise MovieNotFoundError(movie_id)

        genres = list(normalize_genres(movie.genres))
        if PLAYLIST_GENRE.lower() in (g.lower() for g in genres):
            logger.debug("playlist_already_tagged", movie_id=movie_id)
            return AddMovieResult(
                success=True,
                message="Movie is already in the playlist",
                movie_id=movie_id,
                already_in_playlist=True,
            )

        movie.genres = genres + [PLAYLIST_GENRE]
        movie.last_updated = _utcnow()

    logger.info("playlist_tagged", movie_id=movie_id)
    return AddMovieResult(success=True, message="Movie added to the playlist", movie_id=movie_id)


async def _find_by_title(ctx: AppContext, title: str, release_date) -> Movie | None:
    """Case-insensitive exact title lookup; the release year breaks ties."""
    stmt = (
        sa.select(Movie)
        .where(sa.func.lower(Movie.title) == title.strip().lower())
        .order_by(Movie.id)
    )
    async with ctx.session_factory() as session:
        candidates = (await session.execute(stmt)).scalars().all()

    if not candidates:
        return None
    year = parse_year(release_date)
    if len(candidates) > 1 and year is not None:
        for movie in candidates:
            if parse_year(movie.release_date) == year:
                return movie
    return candidates[0]


async def add_movie(ctx: AppContext, payload: MovieIn, to_playlist: bool = False) -> AddMovieResult:
    """Add a single movie by hand, refusing duplicates.

    A duplicate is an existing row with the same id, or failing that with
    the same title (case-insensitive). With ``to_playlist`` the
    duplicate is tagged into the playlist instead of being reported.
    New rows store ``release_date`` as an integer year.
    """
    log = logger.bind(movie_id=payload.id, title=payload.title)

    async with ctx.session_factory() as session:
        existing = await session.get(Movie, payload.id)

    if existing is not None:
        if to_playlist:
            return await add_to_playlist(ctx, existing.id)
        log.info("movie_duplicate_id")
        return AddMovieResult(
            success=False,
            message=f"A movie with id {payload.id} already exists",
            movie_id=existing.id,
            duplicate=True,
            can_add_to_playlist=True,
        )

    same_title = await _find_by_title(ctx, payload.title, payload.release_date)
    if same_title is not None:
        if to_playlist:
            return await add_to_playlist(ctx, same_title.id)
        year = parse_year(same_title.release_date)
        log.info("movie_duplicate_title", existing_id=same_title.id)
        return AddMovieResult(
            success=False,
            message=f'A movie "{same_title.title}" ({year or "unknown year"}) already exists',
            movie_id=same_title.id,
            duplicate=True,
            can_add_to_playlist=True,
        )

    row = _movie_row(payload)
    row["release_date"] = parse_year(payload.release_date)
    async with ctx.session_factory() as session:
        session.add(Movie(**row))
        try:
            await session.commit()
        except IntegrityError:
            # Concurrent add of the same id
            await session.rollback()
            log.info("movie_duplicate_id")
            return AddMovieResult(
                success=False,
                message=f"A movie with id {payload.id} already exists",
                movie_id=payload.id,
                duplicate=True,
                can_add_to_playlist=True,
            )

    log.info("movie_added")
    if to_playlist:
        await add_to_playlist(ctx, payload.id)
        return AddMovieResult(
            success=True, message="Movie added to the catalog and playlist", movie_id=payload.id
        )
    return AddMovieResult(success=True, message="Movie added to the catalog", movie_id=payload.id)


async def import_catalog(ctx: AppContext, path: Path) -> ImportStats:
    """Bulk-load a JSON catalog file. Ids already in the catalog are skipped.

    Raises:
        ValueError: If the file is not valid JSON or fails validation.
    """
    movies = load_catalog_file(path)

    rows: list[dict] = []
    seen: set[str] = set()
    for movie in movies:
        if movie.id in seen:
            continue
        seen.add(movie.id)
        rows.append(_movie_row(movie))

    stats = ImportStats(skipped=len(movies) - len(rows))
    async with ctx.session_factory() as session, session.begin():
        for start in range(0, len(rows), IMPORT_BATCH_SIZE):
            batch = rows[start : start + IMPORT_BATCH_SIZE]
            result = await session.execute(
                insert_ignore_stmt(session, Movie.__table__, batch, conflict_columns=("id",))
            )
            inserted = max(result.rowcount or 0, 0)
            stats.inserted += inserted
            stats.skipped += len(batch) - inserted

    logger.info(
        "catalog_imported",
        path=str(path),
        inserted=stats.inserted,
        skipped=stats.skipped,
    )
    return stats


async def refresh_stale_movies(
    ctx: AppContext,
    max_age: dt.timedelta = dt.timedelta(days=1),
    limit: int = 50,
) -> list[str]:
    """Touch ``last_updated`` on the oldest rows not updated within ``max_age``.

    Returns:
        Ids of the refreshed movies, oldest first.
    """
    now = _utcnow()
    cutoff = now - max_age
    async with ctx.session_factory() as session, session.begin():
        stmt = (
            sa.select(Movie.id)
            .where(Movie.last_updated < cutoff)
            .order_by(Movie.last_updated.asc(), Movie.id)
            .limit(limit)
        )
        movie_ids = list((await session.execute(stmt)).scalars().all())
        if movie_ids:
            await session.execute(
                sa.update(Movie).where(Movie.id.in_(movie_ids)).values(last_updated=now)
            )

    logger.info("stale_movies_refreshed", count=len(movie_ids), cutoff=cutoff.isoformat())
    return movie_ids
