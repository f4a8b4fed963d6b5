"""Filter criteria and the per-movie predicates applied to the catalog.

Predicates run in a fixed order (year, genre, rating, MPAA, streaming) and
a movie is kept only if it passes every enabled one. All of them consume
:class:`~movie_match.catalog.normalizer.MovieRecord`, never raw rows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from movie_match.catalog.normalizer import MovieRecord


class FilterCriteria(BaseModel):
    """Constraints a room places on its candidate list.

    Empty lists and ``None`` bounds mean "no restriction". A ``min_rating``
    of 0 is treated as disabled.
    """

    genres: list[str] = []
    year_start: int | None = None
    year_end: int | None = None
    min_rating: float | None = Field(None, ge=0, le=10)
    mpaa_ratings: list[str] = []
    streaming_services: list[str] = []

    @field_validator("genres", "streaming_services")
    @classmethod
    def _strip_names(cls, v: list[str]) -> list[str]:
        return [name.strip() for name in v if name and name.strip()]

    @field_validator("mpaa_ratings")
    @classmethod
    def _upper_ratings(cls, v: list[str]) -> list[str]:
        return [r.strip().upper() for r in v if r and r.strip()]

    @model_validator(mode="after")
    def _check_year_range(self) -> FilterCriteria:
        if (
            self.year_start is not None
            and self.year_end is not None
            and self.year_start > self.year_end
        ):
            raise ValueError("year_start must not be after year_end")
        return self

    @property
    def rating_enabled(self) -> bool:
        return bool(self.min_rating)


def load_genre_stems(config_path: Path) -> dict[str, tuple[str, ...]]:
    """Load the selected-genre -> accepted-stems table from YAML.

    Args:
        config_path: Path to the genre_stems.yaml file.

    Returns:
        Lowercased genre -> tuple of lowercased stems. Empty dict if the
        file doesn't exist or has no ``genre_stems`` section.
    """
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not raw or "genre_stems" not in raw:
        return {}

    return {
        genre.lower(): tuple(stem.lower() for stem in stems)
        for genre, stems in raw["genre_stems"].items()
        if stems
    }


def genre_matches(
    movie_genre: str,
    selected_genre: str,
    stems: dict[str, tuple[str, ...]],
) -> bool:
    """Loose genre comparison.

    Matches on case-insensitive equality, on the movie genre containing the
    selected one ("Science Fiction" for "fiction"), or on a configured stem
    ("Animated" for "animation").
    """
    movie_key = movie_genre.lower()
    selected_key = selected_genre.lower()
    if movie_key == selected_key or selected_key in movie_key:
        return True
    return any(stem in movie_key for stem in stems.get(selected_key, ()))


def passes_year(record: MovieRecord, criteria: FilterCriteria) -> bool:
    if criteria.year_start is None and criteria.year_end is None:
        return True
    if record.year is None:
        return False
    if criteria.year_start is not None and record.year < criteria.year_start:
        return False
    if criteria.year_end is not None and record.year > criteria.year_end:
        return False
    return True


def passes_genre(
    record: MovieRecord,
    criteria: FilterCriteria,
    stems: dict[str, tuple[str, ...]],
) -> bool:
    if not criteria.genres:
        return True
    return any(
        genre_matches(movie_genre, selected, stems)
        for movie_genre in record.genres
        for selected in criteria.genres
    )


def passes_rating(record: MovieRecord, criteria: FilterCriteria) -> bool:
    if not criteria.rating_enabled:
        return True
    if record.rating is None:
        return False
    return record.rating >= criteria.min_rating


def passes_mpaa(record: MovieRecord, criteria: FilterCriteria) -> bool:
    # Unrated movies are not excluded
    if not criteria.mpaa_ratings or not record.mpaa_rating:
        return True
    return record.mpaa_rating.upper() in criteria.mpaa_ratings


def passes_streaming(record: MovieRecord, criteria: FilterCriteria) -> bool:
    # Movies without provider data are not excluded
    if not criteria.streaming_services or not record.streaming_services:
        return True
    wanted = {s.lower() for s in criteria.streaming_services}
    return any(s.lower() in wanted for s in record.streaming_services)


@dataclass
class FilterStats:
    """Survivor counts after each filter stage."""

    total: int = 0
    stages: dict[str, int] = field(default_factory=dict)

    @property
    def kept(self) -> int:
        return list(self.stages.values())[-1] if self.stages else self.total


def _stages(
    criteria: FilterCriteria,
    stems: dict[str, tuple[str, ...]],
) -> list[tuple[str, Callable[[MovieRecord], bool]]]:
    return [
        ("year", lambda r: passes_year(r, criteria)),
        ("genre", lambda r: passes_genre(r, criteria, stems)),
        ("rating", lambda r: passes_rating(r, criteria)),
        ("mpaa", lambda r: passes_mpaa(r, criteria)),
        ("streaming", lambda r: passes_streaming(r, criteria)),
    ]


def apply_filters(
    records: Iterable[MovieRecord],
    criteria: FilterCriteria,
    stems: dict[str, tuple[str, ...]],
) -> tuple[list[MovieRecord], FilterStats]:
    """Keep the records that pass every enabled filter, in input order.

    Args:
        records: Normalized catalog movies.
        criteria: The room's filter criteria.
        stems: Genre stem table from :func:`load_genre_stems`.

    Returns:
        Tuple of (surviving records, per-stage survivor counts).
    """
    survivors = list(records)
    stats = FilterStats(total=len(survivors))
    for name, predicate in _stages(criteria, stems):
        survivors = [r for r in survivors if predicate(r)]
        stats.stages[name] = len(survivors)
    return survivors, stats


def explain_exclusion(
    record: MovieRecord,
    criteria: FilterCriteria,
    stems: dict[str, tuple[str, ...]],
) -> list[str]:
    """Name every filter stage ``record`` fails. Empty means it is kept."""
    return [name for name, predicate in _stages(criteria, stems) if not predicate(record)]
