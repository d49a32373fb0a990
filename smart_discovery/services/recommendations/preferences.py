"""Preference analysis over a user's library snapshot."""

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime

from smart_discovery.constants import (
    DEFAULT_MEDIA_TYPE_RATIO,
    MIN_SAMPLE_SIZE,
    PRIOR_RATING,
    RATING_HALF_LIFE,
    RATING_MAX,
    RATING_MIN,
)
from smart_discovery.models.library import LibraryEntry, MediaType
from smart_discovery.models.recommendation import UserPreferences

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def analyze(
    items: Sequence[LibraryEntry],
    not_interested: Iterable[LibraryEntry] = (),
    favorites: Iterable[LibraryEntry] | None = None,
    *,
    now: Callable[[], datetime] | None = None,
) -> UserPreferences:
    """Build a preference profile from the user's library.

    Genre affinities are left empty; they come from analyze_genres() and are
    merged with UserPreferences.with_genres().

    Args:
        items: Watching, wishlist and watched entries together
        not_interested: Entries the user dismissed
        favorites: Explicit favorites; inferred from is_favorite flags when None
        now: Clock used for recency weighting

    Returns:
        UserPreferences for this snapshot
    """
    if favorites is None:
        favorite_ids = {item.key for item in items if item.is_favorite}
    else:
        favorite_ids = {item.key for item in favorites}

    preferences = UserPreferences(
        preferred_media_types=_media_type_ratios(items),
        average_rating=_average_rating(items, (now or utc_now)()),
        not_interested_ids={item.key for item in not_interested},
        favorite_ids=favorite_ids,
    )
    logger.debug(
        f"Analyzed {len(items)} library items: average rating {preferences.average_rating:.2f}, "
        f"{len(preferences.favorite_ids)} favorites, {len(preferences.not_interested_ids)} dismissed"
    )
    return preferences


def _media_type_ratios(items: Sequence[LibraryEntry]) -> dict[MediaType, float]:
    if not items:
        return {MediaType.MOVIE: DEFAULT_MEDIA_TYPE_RATIO, MediaType.TV: DEFAULT_MEDIA_TYPE_RATIO}

    counts = Counter(item.media_type for item in items)
    total = len(items)
    return {media_type: counts[media_type] / total for media_type in MediaType}


def _average_rating(items: Sequence[LibraryEntry], now: datetime) -> float:
    """Average star rating, blended with the neutral prior for small libraries.

    The cold-start decision looks at the total number of items, rated or not:
    a library of 5+ entries with only two ratings already uses the plain
    recency-weighted mean of those two ratings.
    """
    rated = [item for item in items if item.user_rating is not None]
    if not rated:
        return PRIOR_RATING

    if len(items) < MIN_SAMPLE_SIZE:
        user_avg = sum(item.user_rating for item in rated) / len(rated)
        prior_weight = (MIN_SAMPLE_SIZE - len(items)) / MIN_SAMPLE_SIZE
        user_weight = len(items) / MIN_SAMPLE_SIZE
        average = prior_weight * PRIOR_RATING + user_weight * user_avg
    else:
        weights = [_recency_weight(item, now) for item in rated]
        total_weight = sum(weights)
        if total_weight <= 0:
            return PRIOR_RATING
        average = sum(w * item.user_rating for w, item in zip(weights, rated)) / total_weight

    return min(max(average, RATING_MIN), RATING_MAX)


def _recency_weight(item: LibraryEntry, now: datetime) -> float:
    """Exponential half-life decay: a rating loses half its weight every 90 days."""
    rated_at = item.rating_updated_at or item.added_at
    if rated_at is None:
        return 1.0
    if rated_at.tzinfo is None:
        rated_at = rated_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    age = max((now - rated_at).total_seconds(), 0.0)
    return 0.5 ** (age / RATING_HALF_LIFE.total_seconds())
