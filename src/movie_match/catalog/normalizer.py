"""Catalog field normalization.

Catalog rows arrive with inconsistent encodings (the same field may be a
number in one row and a formatted string in the next). Everything the
filters look at is converted here, once, into a :class:`MovieRecord` so
that no predicate has to sniff raw formats.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass
from typing import Any

from movie_match.models.movie import Movie

_FOUR_DIGITS = re.compile(r"\b(\d{4})\b")
_INTEGER = re.compile(r"\d+")


@dataclass(frozen=True)
class MovieRecord:
    """Canonical, typed view of a catalog movie."""

    id: str
    title: str
    overview: str | None = None
    poster_path: str | None = None
    year: int | None = None
    genres: tuple[str, ...] = ()
    rating: float | None = None
    imdb_rating: str | None = None
    mpaa_rating: str | None = None
    runtime: int | None = None
    streaming_services: tuple[str, ...] = ()


def parse_year(value: Any) -> int | None:
    """Extract a release year from any of the catalog's date encodings.

    Handles ``1999``, ``1999.0``, ``"1999"``, ``"1999-03-31"`` and free
    text containing a four-digit year such as ``"March 31, 1999"``.

    Args:
        value: Raw ``release_date`` value.

    Returns:
        The year, or ``None`` when no year can be recovered.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return int(value)

    text = str(value).strip()
    if not text:
        return None

    if "-" in text:
        head = text.split("-", 1)[0].strip()
        if head.isdigit():
            return int(head)

    if len(text) == 4 and text.isdigit():
        return int(text)

    found = _FOUR_DIGITS.search(text)
    return int(found.group(1)) if found else None


def normalize_genres(value: Any) -> tuple[str, ...]:
    """Turn a raw genre field into a tuple of trimmed genre names.

    Accepts a list, a JSON array string, a comma-separated string or a
    single genre string. Empty entries are dropped and duplicates (compared
    case-insensitively) keep their first spelling.
    """
    if value is None:
        return ()

    items: list[Any]
    if isinstance(value, (list, tuple)):
        items = list(value)
    else:
        text = str(value).strip()
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                return normalize_genres(parsed)
            text = text.strip("[]")
        items = text.split(",") if "," in text else [text]

    genres: list[str] = []
    seen: set[str] = set()
    for item in items:
        if item is None:
            continue
        name = str(item).strip().strip("\"'").strip()
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        genres.append(name)
    return tuple(genres)


def normalize_rating(value: Any) -> float | None:
    """Normalize a critic rating to the 0-10 scale.

    ``"86%"``, ``86`` and ``8.6`` all yield ``8.6``. Percentages are divided
    by ten, and so is any plain number above 10 and up to 100.

    Returns:
        The rating on a 0-10 scale, or ``None`` when the value is missing,
        unparseable or outside 0-100.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            if "%" in text:
                rating = float(text.replace("%", "").strip()) / 10
            else:
                rating = float(text)
        except ValueError:
            return None
    else:
        try:
            rating = float(value)
        except (TypeError, ValueError):
            return None

    # Above 100 is corrupt data, not a perfect score; as unrated it fails any minimum rating
    if math.isnan(rating) or rating < 0 or rating > 100:
        return None
    if rating > 10:
        rating = rating / 10
    return rating


def parse_runtime(value: Any) -> int | None:
    """Minutes from ``142``, ``"142"`` or ``"142 min"``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if isinstance(value, float) and math.isnan(value) else int(value)
    found = _INTEGER.search(str(value))
    return int(found.group()) if found else None


def normalize_streaming_services(value: Any) -> tuple[str, ...]:
    """Provider names from a dict keyed by provider, a list, or a comma string.

    Dict entries with a falsy value (e.g. ``{"netflix": false}``) are skipped.
    List entries may be plain names or objects with a ``name``/``provider`` key.
    """
    if not value:
        return ()

    names: list[str] = []
    if isinstance(value, dict):
        names = [str(k) for k, v in value.items() if v]
    elif isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, dict):
                name = item.get("name") or item.get("provider")
                if name:
                    names.append(str(name))
            elif item:
                names.append(str(item))
    else:
        names = str(value).split(",")

    result: list[str] = []
    for name in names:
        name = name.strip()
        if name and name.lower() not in (r.lower() for r in result):
            result.append(name)
    return tuple(result)


def movie_to_record(movie: Movie) -> MovieRecord:
    """Build the canonical record for a catalog row."""
    mpaa = (movie.mpaa_rating or "").strip() or None
    return MovieRecord(
        id=movie.id,
        title=movie.title,
        overview=movie.overview,
        poster_path=movie.poster_path,
        year=parse_year(movie.release_date),
        genres=normalize_genres(movie.genres),
        rating=normalize_rating(movie.rt_rating),
        imdb_rating=movie.imdb_rating,
        mpaa_rating=mpaa,
        runtime=parse_runtime(movie.runtime),
        streaming_services=normalize_streaming_services(movie.streaming_services),
    )
