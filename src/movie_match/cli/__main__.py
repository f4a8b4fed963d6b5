"""CLI entry point: python -m movie_match.cli <command>"""

import argparse
import asyncio
import datetime as dt
import sys
from pathlib import Path

import structlog

from movie_match.candidates.filters import FilterCriteria, explain_exclusion
from movie_match.catalog.ingestion import add_to_playlist, import_catalog, refresh_stale_movies
from movie_match.catalog.normalizer import movie_to_record
from movie_match.config.settings import get_settings
from movie_match.context import AppContext, build_context
from movie_match.errors import MovieNotFoundError
from movie_match.logging_config import configure_logging
from movie_match.models.movie import Movie
from movie_match.rooms.service import get_room


async def run_import(ctx: AppContext, path: Path) -> None:
    stats = await import_catalog(ctx, path)
    print(f"Imported {stats.inserted} movies ({stats.skipped} skipped)")


async def run_playlist(ctx: AppContext, movie_id: str) -> None:
    result = await add_to_playlist(ctx, movie_id)
    print(result.message)


async def run_refresh_stale(ctx: AppContext, max_age_hours: float, limit: int) -> None:
    movie_ids = await refresh_stale_movies(ctx, dt.timedelta(hours=max_age_hours), limit)
    print(f"Refreshed {len(movie_ids)} movies")


async def run_explain(ctx: AppContext, code: str, movie_id: str) -> list[str]:
    """Print why a movie is or is not offered in a room."""
    log = structlog.get_logger()
    room = await get_room(ctx, code)
    async with ctx.session_factory() as session:
        movie = await session.get(Movie, movie_id)
    if movie is None:
        raise MovieNotFoundError(movie_id)

    record = movie_to_record(movie)
    criteria = FilterCriteria.model_validate(room.filters or {})
    failed = explain_exclusion(record, criteria, ctx.genre_stems)
    log.info("movie_explained", room_id=room.id, movie_id=movie_id, failed=failed)

    print(f"{record.title} ({record.year or 'unknown year'})")
    print(f"  genres:    {', '.join(record.genres) or '-'}")
    print(f"  rating:    {record.rating if record.rating is not None else '-'}")
    print(f"  mpaa:      {record.mpaa_rating or '-'}")
    print(f"  streaming: {', '.join(record.streaming_services) or '-'}")
    if failed:
        print(f"Excluded from room {room.id} by: {', '.join(failed)}")
    else:
        print(f"Included in room {room.id}")
    return failed


async def _run(args: argparse.Namespace) -> None:
    ctx = build_context(get_settings())
    try:
        if args.command == "import":
            await run_import(ctx, Path(args.path))
        elif args.command == "playlist":
            await run_playlist(ctx, args.movie_id)
        elif args.command == "refresh-stale":
            await run_refresh_stale(ctx, args.max_age_hours, args.limit)
        elif args.command == "explain":
            await run_explain(ctx, args.room_code, args.movie_id)
    finally:
        await ctx.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="movie_match.cli",
        description="Movie Match catalog and room maintenance",
    )
    subparsers = parser.add_subparsers(dest="command")

    import_parser = subparsers.add_parser("import", help="Import movies from a JSON catalog file")
    import_parser.add_argument("path", help="JSON file: a list of movies or {\"movies\": [...]}")

    playlist_parser = subparsers.add_parser("playlist", help="Tag a movie with the Playlist genre")
    playlist_parser.add_argument("movie_id")

    refresh_parser = subparsers.add_parser(
        "refresh-stale", help="Touch last_updated on the oldest stale movies"
    )
    refresh_parser.add_argument(
        "--max-age-hours",
        type=float,
        default=24.0,
        help="Rows older than this are stale (default: 24)",
    )
    refresh_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum rows to refresh (default: 50)",
    )

    explain_parser = subparsers.add_parser(
        "explain", help="Show which filters exclude a movie from a room"
    )
    explain_parser.add_argument("room_code")
    explain_parser.add_argument("movie_id")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
