"""Data models for the recommendation engine."""

from smart_discovery.models.library import LibraryEntry, ListName, MediaType
from smart_discovery.models.recommendation import (
    CandidateItem,
    ScoredCandidate,
    ScoreResult,
    UserPreferences,
)
from smart_discovery.models.catalog import CatalogPage, CatalogResult, MetadataResponse

__all__ = [
    "CandidateItem",
    "CatalogPage",
    "CatalogResult",
    "LibraryEntry",
    "ListName",
    "MediaType",
    "MetadataResponse",
    "ScoredCandidate",
    "ScoreResult",
    "UserPreferences",
]
