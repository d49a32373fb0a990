"""Pytest configuration and fixtures."""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from smart_discovery.models import LibraryEntry, ListName, MediaType, UserPreferences
from smart_discovery.utils.cache import InMemoryTTLCache, cache

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = FIXED_NOW) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_entry(
    id: str,
    rating: int | None = None,
    media_type: str = "movie",
    *,
    rated_at: datetime = FIXED_NOW,
    is_favorite: bool = False,
    list_name: ListName = ListName.WATCHED,
) -> LibraryEntry:
    """Library entry helper; rated entries get a rating timestamp."""
    return LibraryEntry(
        id=id,
        media_type=MediaType(media_type),
        title=f"Test {id}",
        list=list_name,
        added_at=FIXED_NOW,
        user_rating=rating,
        rating_updated_at=rated_at if rating is not None else None,
        is_favorite=is_favorite,
    )


def catalog_row(id: int, media_type: str | None = "movie", **overrides: Any) -> dict[str, Any]:
    """A TMDB-shaped list result."""
    row = {
        "id": id,
        "title": f"Title {id}" if media_type != "tv" else None,
        "name": f"Show {id}" if media_type == "tv" else None,
        "media_type": media_type,
        "poster_path": f"/poster{id}.jpg",
        "vote_average": 7.5,
        "vote_count": 1000,
        "popularity": 80.0,
        "release_date": "2024-01-01",
        "genre_ids": [18],
    }
    row.update(overrides)
    return row


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def memory_cache() -> InMemoryTTLCache:
    return InMemoryTTLCache()


@pytest.fixture(autouse=True)
def clear_global_cache():
    """Keep the process-wide recommendation cache isolated per test."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def base_preferences() -> UserPreferences:
    return UserPreferences(
        favorite_genres={},
        preferred_media_types={MediaType.MOVIE: 0.5, MediaType.TV: 0.5},
        average_rating=3.5,
        not_interested_ids=set(),
        favorite_ids=set(),
    )
