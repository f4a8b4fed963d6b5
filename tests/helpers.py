"""Row builders shared by the test modules."""

from movie_match.context import AppContext
from movie_match.models.movie import Movie


def make_movie(movie_id: str, title: str | None = None, **fields) -> Movie:
    """Create a catalog Movie with raw field encodings."""
    return Movie(id=movie_id, title=title or f"Movie {movie_id}", **fields)


async def seed(context: AppContext, *rows) -> None:
    """Insert ORM rows in one transaction."""
    async with context.session_factory() as session:
        async with session.begin():
            session.add_all(rows)
