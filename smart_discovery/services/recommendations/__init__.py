"""Recommendation services package."""

from smart_discovery.services.recommendations.engine import RecommendationEngine, get_recommendations
from smart_discovery.services.recommendations.genres import analyze_genres
from smart_discovery.services.recommendations.preferences import analyze
from smart_discovery.services.recommendations.scoring import score_candidate

__all__ = [
    "RecommendationEngine",
    "analyze",
    "analyze_genres",
    "get_recommendations",
    "score_candidate",
]
