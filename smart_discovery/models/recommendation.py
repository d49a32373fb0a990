"""Preference, candidate and scored-result values."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from pydantic import BaseModel, Field, field_validator

from smart_discovery.constants import DEFAULT_MEDIA_TYPE_RATIO, PRIOR_RATING
from smart_discovery.models.library import MediaType


def valid_genre_ids(raw: Iterable[Any] | None) -> list[int]:
    """Keep positive integer genre ids, dropping None, bools, strings and non-positives."""
    if raw is None or isinstance(raw, (str, bytes, Mapping)):
        return []
    try:
        return [g for g in raw if isinstance(g, int) and not isinstance(g, bool) and g > 0]
    except TypeError:
        return []


def _default_media_types() -> dict[MediaType, float]:
    return {MediaType.MOVIE: DEFAULT_MEDIA_TYPE_RATIO, MediaType.TV: DEFAULT_MEDIA_TYPE_RATIO}


@dataclass
class UserPreferences:
    """Preference profile derived from one library snapshot."""

    favorite_genres: dict[int, float] = field(default_factory=dict)
    preferred_media_types: dict[MediaType, float] = field(default_factory=_default_media_types)
    average_rating: float = PRIOR_RATING
    not_interested_ids: set[str] = field(default_factory=set)
    favorite_ids: set[str] = field(default_factory=set)

    def with_genres(self, favorite_genres: Mapping[int, float]) -> "UserPreferences":
        """Copy with learned genre affinities merged over the current ones."""
        return replace(self, favorite_genres={**self.favorite_genres, **favorite_genres})

    def media_type_ratio(self, media_type: MediaType) -> float:
        return self.preferred_media_types.get(media_type, 0.0)

    def to_dict(self) -> dict[str, Any]:
        """Canonical, JSON-ready form used for cache keys."""
        return {
            "favorite_genres": {str(k): v for k, v in sorted(self.favorite_genres.items())},
            "preferred_media_types": {
                MediaType(k).value: v for k, v in sorted(self.preferred_media_types.items())
            },
            "average_rating": self.average_rating,
            "not_interested_ids": sorted(self.not_interested_ids),
            "favorite_ids": sorted(self.favorite_ids),
        }


class CandidateItem(BaseModel):
    """An externally sourced title under consideration."""

    id: str
    media_type: MediaType
    title: str
    poster: str | None = None
    year: int | None = None
    is_favorite: bool | None = None
    vote_average: float = Field(default=0.0, ge=0, le=10)
    vote_count: int = Field(default=0, ge=0)
    popularity: float = Field(default=0.0, ge=0)
    genre_ids: list[int] = Field(default_factory=list)

    @field_validator("genre_ids", mode="before")
    @classmethod
    def drop_invalid_genres(cls, v: object) -> list[int]:
        return valid_genre_ids(v)  # type: ignore[arg-type]

    @property
    def key(self) -> str:
        return f"{self.media_type.value}:{self.id}"


@dataclass
class ScoreResult:
    score: float
    reasons: list[str]


@dataclass
class ScoredCandidate:
    """A candidate with its score and human-readable reasons."""

    item: CandidateItem
    score: float
    reasons: list[str] = field(default_factory=list)
