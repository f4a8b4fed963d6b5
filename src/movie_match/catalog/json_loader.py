"""JSON loader and validator for catalog files and manually added movies."""

import json
from pathlib import Path

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    ValidationError,
    field_validator,
)


class MovieIn(BaseModel):
    """A catalog movie as supplied by an import file or the add-movie API.

    Raw fields keep whatever encoding the source used; normalization
    happens when the movie is read back.
    """

    id: str
    title: str
    overview: str | None = None
    poster_path: str | None = None
    release_date: str | int | None = Field(None, validation_alias=AliasChoices("release_date", "year"))
    genres: list[str] | str | None = None
    rt_rating: str | float | None = None
    imdb_rating: str | None = None
    metascore: str | None = None
    mpaa_rating: str | None = Field(None, validation_alias=AliasChoices("mpaa_rating", "rated"))
    runtime: str | int | None = None
    streaming_services: dict | list | None = None
    # Allow extra fields (poster urls, provider payloads, etc.)
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: object) -> object:
        # TMDB ids are often numeric in exported catalogs
        return str(v) if isinstance(v, int) else v

    @field_validator("imdb_rating", "metascore", mode="before")
    @classmethod
    def _stringify_score(cls, v: object) -> object:
        return str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class CatalogFile(BaseModel):
    movies: list[MovieIn]


class _MovieList(RootModel[list[MovieIn]]):
    pass


def load_catalog_file(file_path: Path) -> list[MovieIn]:
    """Read and validate a JSON catalog file.

    The file holds either a bare list of movies or an object with a
    ``movies`` list.

    Args:
        file_path: Path to the JSON catalog file.

    Returns:
        Validated movies in file order.

    Raises:
        ValueError: If the file contains invalid JSON or fails validation.
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            raw_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_path}: {e}") from e

    try:
        if isinstance(raw_data, list):
            return _MovieList.model_validate(raw_data).root
        return CatalogFile.model_validate(raw_data).movies
    except ValidationError as e:
        raise ValueError(f"Validation error for {file_path}: {e}") from e
