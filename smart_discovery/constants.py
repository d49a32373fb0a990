"""Recommendation constants - centralized tuning values."""

from datetime import timedelta

# =============================================================================
# Preference analysis
# =============================================================================
MIN_SAMPLE_SIZE = 5  # Below this many library items, blend with the prior
PRIOR_RATING = 3.0  # Neutral star rating
RATING_MIN = 1
RATING_MAX = 5
RATING_HALF_LIFE = timedelta(days=90)
DEFAULT_MEDIA_TYPE_RATIO = 0.5

# =============================================================================
# Genre affinity
# =============================================================================
UNRATED_GENRE_WEIGHT = 0.6  # Same weight as a 3-star rating

# =============================================================================
# Scoring weights
# =============================================================================
QUALITY_WEIGHT = 0.35
VOTE_COUNT_SATURATION = 4.0  # log10 scale: 10k votes = full confidence
POPULARITY_WEIGHT = 0.12
POPULARITY_SCALE = 100.0
POPULARITY_CAP = 0.7
NICHE_THRESHOLD = 0.5
NICHE_BOOST = 0.05
MEDIA_TYPE_WEIGHT = 0.15
MEDIA_TYPE_REASON_THRESHOLD = 0.6
GENRE_WEIGHT = 0.25
HIGH_RATER_THRESHOLD = 3.5
HIGH_VOTE_THRESHOLD = 7.0
RATING_COMPAT_WEIGHT = 0.1
FAVORITE_SCORE_BOOST = 0.08
MIN_RECOMMENDATION_SCORE = 0.1

# =============================================================================
# Orchestration
# =============================================================================
DEFAULT_RECOMMENDATION_LIMIT = 20
CATALOG_PAGES = (1, 2)
CATALOG_SOURCES = (
    # (endpoint, media type for rows that carry none)
    ("/trending/all/week", None),
    ("/movie/top_rated", "movie"),
    ("/tv/top_rated", "tv"),
)

# =============================================================================
# External API URLs
# =============================================================================
TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
HTTPX_TIMEOUT = 10.0
