"""Validated shapes of catalog (TMDB) responses.

Upstream payloads are loosely typed. They are checked here, at the boundary,
and converted to strictly typed CandidateItem values before scoring.
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from smart_discovery.constants import TMDB_IMAGE_BASE_URL
from smart_discovery.models.library import MediaType
from smart_discovery.models.recommendation import CandidateItem, valid_genre_ids


class MetadataResponse(BaseModel):
    """Details endpoint response; only genres are consumed."""

    model_config = ConfigDict(extra="ignore")

    genres: list[Any] = Field(default_factory=list)

    @field_validator("genres", mode="before")
    @classmethod
    def default_missing_genres(cls, v: object) -> object:
        return v if isinstance(v, list) else []

    def genre_ids(self) -> list[int]:
        """Positive genre ids, skipping malformed genre entries."""
        ids = []
        for raw in self.genres:
            if not isinstance(raw, dict):
                continue
            genre_id = raw.get("id")
            if isinstance(genre_id, int) and not isinstance(genre_id, bool) and genre_id > 0:
                ids.append(genre_id)
        return ids


class CatalogResult(BaseModel):
    """One row of a trending / top-rated / search result list."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    media_type: str | None = None
    title: str | None = None
    name: str | None = None
    poster_path: str | None = None
    release_date: str | None = None
    first_air_date: str | None = None
    vote_average: float = 0.0
    vote_count: int = 0
    popularity: float = 0.0
    genre_ids: list[Any] = Field(default_factory=list)

    @field_validator("vote_average", "popularity", mode="before")
    @classmethod
    def default_missing_float(cls, v: object) -> object:
        if v is None or (isinstance(v, float) and not math.isfinite(v)):
            return 0.0
        return v

    @field_validator("vote_count", mode="before")
    @classmethod
    def default_missing_int(cls, v: object) -> object:
        return 0 if v is None else v

    @field_validator("genre_ids", mode="before")
    @classmethod
    def default_missing_list(cls, v: object) -> object:
        return v if isinstance(v, list) else []

    def resolve_media_type(self, default: str | None = None) -> MediaType | None:
        """Row media type, else the endpoint default, else guessed from title/name."""
        value = self.media_type or default or ("movie" if self.title else "tv")
        try:
            return MediaType(value)
        except ValueError:
            # trending/all also returns "person" rows
            return None

    def display_title(self) -> str:
        raw_title = self.title or self.name
        if isinstance(raw_title, str) and raw_title.strip() and raw_title != str(self.id):
            return raw_title.strip()
        return "Untitled"

    def year(self) -> int | None:
        date = self.release_date or self.first_air_date
        if date and date[:4].isdigit():
            return int(date[:4])
        return None

    def poster_url(self) -> str | None:
        if self.poster_path:
            return f"{TMDB_IMAGE_BASE_URL}/w342{self.poster_path}"
        return None

    def to_candidate(self, media_type: MediaType, is_favorite: bool = False) -> CandidateItem:
        return CandidateItem(
            id=str(self.id),
            media_type=media_type,
            title=self.display_title(),
            poster=self.poster_url(),
            year=self.year(),
            is_favorite=is_favorite,
            vote_average=min(max(self.vote_average, 0.0), 10.0),
            vote_count=max(self.vote_count, 0),
            popularity=max(self.popularity, 0.0),
            genre_ids=valid_genre_ids(self.genre_ids),
        )


class CatalogPage(BaseModel):
    """A page of list results."""

    model_config = ConfigDict(extra="ignore")

    results: list[Any] = Field(default_factory=list)
