"""Catalog metadata clients."""

from smart_discovery.services.metadata.tmdb import TMDBService, tmdb_service

__all__ = ["TMDBService", "tmdb_service"]
