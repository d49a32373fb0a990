"""Candidate scoring against a user's preference profile."""

import math
from collections.abc import Mapping
from typing import Any

from smart_discovery.constants import (
    FAVORITE_SCORE_BOOST,
    GENRE_WEIGHT,
    HIGH_RATER_THRESHOLD,
    HIGH_VOTE_THRESHOLD,
    MEDIA_TYPE_REASON_THRESHOLD,
    MEDIA_TYPE_WEIGHT,
    NICHE_BOOST,
    NICHE_THRESHOLD,
    POPULARITY_CAP,
    POPULARITY_SCALE,
    POPULARITY_WEIGHT,
    PRIOR_RATING,
    QUALITY_WEIGHT,
    RATING_COMPAT_WEIGHT,
    VOTE_COUNT_SATURATION,
)
from smart_discovery.models.recommendation import (
    CandidateItem,
    ScoreResult,
    UserPreferences,
    valid_genre_ids,
)


def score_candidate(
    candidate: CandidateItem,
    preferences: UserPreferences,
    raw: Mapping[str, Any] | None = None,
) -> ScoreResult:
    """Score one candidate using multiple signals.

    Scoring breakdown (max ~1.2):
    - Quality: 0-0.35, vote average scaled by vote count confidence
    - Popularity: 0-0.084, plus 0.05 for niche titles
    - Media type alignment: 0-0.15
    - Genre alignment: 0-0.25
    - High-rater compatibility: 0-0.2
    - Favorite: +0.08
    Not-interested candidates score 0.

    Args:
        candidate: Candidate to score
        preferences: User profile
        raw: Optional TMDB-shaped metrics (vote_average, vote_count,
            popularity, genre_ids) overriding the candidate's own;
            malformed values are ignored

    Returns:
        ScoreResult with score >= 0 and reasons in signal order
    """
    raw = raw if isinstance(raw, Mapping) else {}
    vote_average = _number(raw.get("vote_average"), candidate.vote_average)
    vote_count = _number(raw.get("vote_count"), candidate.vote_count)
    popularity = _number(raw.get("popularity"), candidate.popularity)
    genre_ids = valid_genre_ids(raw["genre_ids"]) if "genre_ids" in raw else candidate.genre_ids

    score = 0.0
    reasons: list[str] = []

    # Quality: more votes -> more trust in the average, never below half weight
    if vote_average > 0:
        confidence = min(math.log10(max(vote_count, 0) + 1) / VOTE_COUNT_SATURATION, 1.0)
        score += (min(vote_average, 10.0) / 10) * (0.5 + 0.5 * confidence) * QUALITY_WEIGHT
        reasons.append(f"High TMDB rating ({vote_average:g}/10)")

    # Popularity, capped so blockbusters don't dominate
    if popularity > 0:
        raw_popularity = min(popularity / POPULARITY_SCALE, 1.0)
        score += min(raw_popularity, POPULARITY_CAP) * POPULARITY_WEIGHT
        reasons.append("Popular content")
        if raw_popularity < NICHE_THRESHOLD:
            score += NICHE_BOOST
            reasons.append("Niche favorite")

    media_type_preference = preferences.media_type_ratio(candidate.media_type)
    score += media_type_preference * MEDIA_TYPE_WEIGHT
    if media_type_preference > MEDIA_TYPE_REASON_THRESHOLD:
        reasons.append(f"Matches your {candidate.media_type.value} preference")

    if preferences.favorite_genres:
        genre_total = 0.0
        matching_genres = 0
        for genre_id in dict.fromkeys(genre_ids):
            affinity = preferences.favorite_genres.get(genre_id)
            if affinity is not None and affinity > 0:
                genre_total += affinity
                matching_genres += 1
        if matching_genres:
            score += min(genre_total, 1.0) * GENRE_WEIGHT
            plural = "s" if matching_genres > 1 else ""
            reasons.append(f"Matches {matching_genres} favorite genre{plural}")

    if preferences.average_rating > HIGH_RATER_THRESHOLD and vote_average > HIGH_VOTE_THRESHOLD:
        score += (preferences.average_rating - PRIOR_RATING) * RATING_COMPAT_WEIGHT
        reasons.append("Matches your high-rating preference")

    # Tie-breaker only: smaller than the quality gap between poor and great titles
    if candidate.is_favorite:
        score += FAVORITE_SCORE_BOOST
        reasons.append("Favorite pick")

    if candidate.key in preferences.not_interested_ids:
        score = 0.0
        reasons.append("Marked as not interested")

    return ScoreResult(score=max(score, 0.0), reasons=reasons)


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return float(default)
    return float(value)
