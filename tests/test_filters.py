"""Tests for filter criteria and catalog predicates."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from movie_match.candidates.filters import (
    FilterCriteria,
    apply_filters,
    explain_exclusion,
    genre_matches,
    load_genre_stems,
    passes_genre,
    passes_mpaa,
    passes_rating,
    passes_streaming,
    passes_year,
)
from movie_match.catalog.normalizer import MovieRecord


def _record(movie_id: str = "m", **fields) -> MovieRecord:
    return MovieRecord(id=movie_id, title=f"Movie {movie_id}", **fields)


class TestFilterCriteria:
    def test_defaults_are_unrestricted(self):
        criteria = FilterCriteria()
        assert criteria.genres == []
        assert criteria.year_start is None
        assert not criteria.rating_enabled

    def test_year_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            FilterCriteria(year_start=2010, year_end=2000)

    def test_rating_bounds(self):
        with pytest.raises(ValidationError):
            FilterCriteria(min_rating=11)

    def test_zero_rating_is_disabled(self):
        assert not FilterCriteria(min_rating=0).rating_enabled

    def test_mpaa_uppercased(self):
        assert FilterCriteria(mpaa_ratings=["pg-13", " r "]).mpaa_ratings == ["PG-13", "R"]

    def test_round_trips_through_room_json(self):
        criteria = FilterCriteria(genres=["Comedy"], year_start=1980, min_rating=7.0)
        assert FilterCriteria.model_validate(criteria.model_dump()) == criteria


def test_load_genre_stems(genre_stems):
    """The shipped stem table covers the loosely spelled genres."""
    assert genre_stems["animation"] == ("animat",)
    assert set(genre_stems["family"]) == {"famil", "child"}
    assert "fantasy" in genre_stems
    assert "adventure" in genre_stems


def test_load_genre_stems_missing_file(tmp_path: Path):
    assert load_genre_stems(tmp_path / "missing.yaml") == {}


class TestGenreMatching:
    def test_exact_case_insensitive(self, genre_stems):
        assert genre_matches("comedy", "Comedy", genre_stems)

    def test_substring(self, genre_stems):
        assert genre_matches("Science Fiction", "fiction", genre_stems)
        assert genre_matches("Romantic Comedy", "Comedy", genre_stems)

    def test_stems(self, genre_stems):
        assert genre_matches("Animated", "Animation", genre_stems)
        assert genre_matches("Children's", "Family", genre_stems)
        assert genre_matches("Fantastic", "Fantasy", genre_stems)
        assert genre_matches("Adventures", "Adventure", genre_stems)

    def test_no_match(self, genre_stems):
        assert not genre_matches("Horror", "Comedy", genre_stems)
        assert not genre_matches("Animated", "Animation", {})

    def test_passes_genre_any_of_any(self, genre_stems):
        criteria = FilterCriteria(genres=["Comedy", "Western"])
        assert passes_genre(_record(genres=("Drama", "Comedy")), criteria, genre_stems)
        assert not passes_genre(_record(genres=("Horror",)), criteria, genre_stems)
        assert not passes_genre(_record(genres=()), criteria, genre_stems)

    def test_no_selected_genres_passes_everything(self, genre_stems):
        assert passes_genre(_record(genres=()), FilterCriteria(), genre_stems)


class TestYear:
    def test_inclusive_bounds(self):
        criteria = FilterCriteria(year_start=1990, year_end=2000)
        assert passes_year(_record(year=1990), criteria)
        assert passes_year(_record(year=2000), criteria)
        assert not passes_year(_record(year=1989), criteria)
        assert not passes_year(_record(year=2001), criteria)

    def test_open_ended(self):
        assert passes_year(_record(year=2024), FilterCriteria(year_start=1980))
        assert not passes_year(_record(year=1970), FilterCriteria(year_start=1980))
        assert passes_year(_record(year=1970), FilterCriteria(year_end=1980))

    def test_missing_year_only_excluded_when_bounded(self):
        assert passes_year(_record(year=None), FilterCriteria())
        assert not passes_year(_record(year=None), FilterCriteria(year_start=1980))


class TestRating:
    def test_threshold_inclusive(self):
        criteria = FilterCriteria(min_rating=7.0)
        assert passes_rating(_record(rating=7.0), criteria)
        assert passes_rating(_record(rating=9.1), criteria)
        assert not passes_rating(_record(rating=6.9), criteria)

    def test_unrated_excluded_only_when_enabled(self):
        assert not passes_rating(_record(rating=None), FilterCriteria(min_rating=5))
        assert passes_rating(_record(rating=None), FilterCriteria())
        assert passes_rating(_record(rating=None), FilterCriteria(min_rating=0))


class TestMpaa:
    def test_accepted_set(self):
        criteria = FilterCriteria(mpaa_ratings=["PG", "PG-13"])
        assert passes_mpaa(_record(mpaa_rating="PG-13"), criteria)
        assert passes_mpaa(_record(mpaa_rating="pg"), criteria)
        assert not passes_mpaa(_record(mpaa_rating="R"), criteria)

    def test_unrated_movie_passes(self):
        assert passes_mpaa(_record(mpaa_rating=None), FilterCriteria(mpaa_ratings=["G"]))

    def test_empty_set_passes_everything(self):
        assert passes_mpaa(_record(mpaa_rating="NC-17"), FilterCriteria())


class TestStreaming:
    def test_any_accepted_provider(self):
        criteria = FilterCriteria(streaming_services=["Netflix"])
        assert passes_streaming(_record(streaming_services=("netflix", "hulu")), criteria)
        assert not passes_streaming(_record(streaming_services=("hulu",)), criteria)

    def test_movie_without_provider_data_passes(self):
        criteria = FilterCriteria(streaming_services=["Netflix"])
        assert passes_streaming(_record(streaming_services=()), criteria)


def test_apply_filters_keeps_order_and_counts_stages(genre_stems):
    records = [
        _record("a", year=1995, genres=("Comedy",), rating=8.0, mpaa_rating="PG"),
        _record("b", year=1975, genres=("Comedy",), rating=8.0, mpaa_rating="PG"),
        _record("c", year=1999, genres=("Horror",), rating=9.0, mpaa_rating="R"),
        _record("d", year=2005, genres=("Comedy",), rating=6.0, mpaa_rating="PG"),
        _record("e", year=2010, genres=("Comedy",), rating=7.5, mpaa_rating="R"),
        _record("f", year=2012, genres=("Romantic Comedy",), rating=7.0, mpaa_rating=None),
    ]
    criteria = FilterCriteria(
        genres=["Comedy"],
        year_start=1980,
        min_rating=7.0,
        mpaa_ratings=["PG", "PG-13"],
    )

    kept, stats = apply_filters(records, criteria, genre_stems)

    assert [r.id for r in kept] == ["a", "f"]
    assert stats.total == 6
    assert stats.stages == {"year": 5, "genre": 4, "rating": 3, "mpaa": 2, "streaming": 2}
    assert stats.kept == 2


def test_apply_filters_all_disabled_keeps_everything(genre_stems):
    records = [_record(str(i)) for i in range(5)]
    kept, stats = apply_filters(records, FilterCriteria(), genre_stems)
    assert kept == records
    assert stats.kept == 5


def test_apply_filters_empty_catalog(genre_stems):
    kept, stats = apply_filters([], FilterCriteria(genres=["Comedy"]), genre_stems)
    assert kept == []
    assert stats.kept == 0


def test_explain_exclusion_names_failed_stages(genre_stems):
    criteria = FilterCriteria(genres=["Comedy"], year_start=2000, min_rating=7.0)
    record = _record(year=1990, genres=("Horror",), rating=8.0)
    assert explain_exclusion(record, criteria, genre_stems) == ["year", "genre"]
    assert explain_exclusion(_record(year=2001, genres=("Comedy",), rating=7.0), criteria, genre_stems) == []
