"""Personal recommendation engine for a movie and TV tracking library."""

from smart_discovery.exceptions import (
    CacheKeyError,
    CatalogError,
    CatalogRequestError,
    CatalogUnavailableError,
    DiscoveryError,
)
from smart_discovery.models import (
    CandidateItem,
    LibraryEntry,
    ListName,
    MediaType,
    ScoredCandidate,
    ScoreResult,
    UserPreferences,
)
from smart_discovery.services.recommendations import (
    RecommendationEngine,
    analyze,
    analyze_genres,
    get_recommendations,
    score_candidate,
)

__version__ = "0.1.0"

__all__ = [
    "CacheKeyError",
    "CandidateItem",
    "CatalogError",
    "CatalogRequestError",
    "CatalogUnavailableError",
    "DiscoveryError",
    "LibraryEntry",
    "ListName",
    "MediaType",
    "RecommendationEngine",
    "ScoredCandidate",
    "ScoreResult",
    "UserPreferences",
    "analyze",
    "analyze_genres",
    "get_recommendations",
    "score_candidate",
]
