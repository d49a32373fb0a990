"""Library snapshot models supplied by the list-management subsystem."""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from smart_discovery.constants import RATING_MAX, RATING_MIN


class MediaType(str, enum.Enum):
    """Catalog media type."""

    MOVIE = "movie"
    TV = "tv"


class ListName(str, enum.Enum):
    """Library list an entry belongs to."""

    WATCHING = "watching"
    WISHLIST = "wishlist"
    WATCHED = "watched"


class LibraryEntry(BaseModel):
    """One user-owned media record.

    Snapshots are read-only for the engine, hence frozen.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    media_type: MediaType = Field(alias="mediaType")
    title: str = ""
    list: ListName = ListName.WATCHED
    added_at: datetime | None = Field(default=None, alias="addedAt")
    user_rating: int | None = Field(default=None, ge=RATING_MIN, le=RATING_MAX, alias="userRating")
    rating_updated_at: datetime | None = Field(default=None, alias="ratingUpdatedAt")
    is_favorite: bool = Field(default=False, alias="isFavorite")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> object:
        """Catalog ids arrive as ints from TMDB and as strings from storage."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode="after")
    def require_rating_timestamp(self) -> "LibraryEntry":
        if self.user_rating is not None and self.rating_updated_at is None:
            raise ValueError("rating_updated_at is required when user_rating is set")
        return self

    @property
    def key(self) -> str:
        return f"{self.media_type.value}:{self.id}"
