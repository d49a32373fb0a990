"""Recommendation engine: cached, ranked suggestions from catalog lists."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any

from pydantic import ValidationError

from smart_discovery.config import get_settings
from smart_discovery.constants import (
    CATALOG_PAGES,
    CATALOG_SOURCES,
    DEFAULT_RECOMMENDATION_LIMIT,
    MIN_RECOMMENDATION_SCORE,
)
from smart_discovery.exceptions import CacheKeyError, CatalogUnavailableError
from smart_discovery.models.catalog import CatalogPage, CatalogResult
from smart_discovery.models.library import LibraryEntry
from smart_discovery.models.recommendation import ScoredCandidate, UserPreferences
from smart_discovery.services.recommendations.preferences import utc_now
from smart_discovery.services.recommendations.scoring import score_candidate
from smart_discovery.utils.cache import (
    CacheEntry,
    RecommendationCache,
    cache as default_cache,
    fingerprint,
    make_cache_key,
)
from smart_discovery.utils.logging import LogContext

logger = logging.getLogger(__name__)

CatalogFetcher = Callable[[str, Mapping[str, Any]], Awaitable[Mapping[str, Any]]]
LibraryAccessor = Callable[[], Sequence[LibraryEntry]]


def _empty_library() -> list[LibraryEntry]:
    return []


class RecommendationEngine:
    """Engine for ranking catalog titles against a user's preferences.

    Strategy:
    1. Serve from the cache when (user, preferences, library) is unchanged
       and the entry is younger than the TTL
    2. Otherwise fetch trending, top-rated movies and top-rated TV (two pages
       each) concurrently; a failed or slow source contributes nothing
    3. Merge and dedupe, dropping dismissed titles, titles without posters
       and titles already in the library
    4. Score every candidate and rank by score
    5. Store the ranking with the current time

    Cache, clock and library accessor are injected so TTL behavior can be
    tested without waiting.
    """

    CACHE_NAMESPACE = "recommendations"

    def __init__(
        self,
        cache: RecommendationCache | None = None,
        clock: Callable[[], datetime] | None = None,
        library: LibraryAccessor | None = None,
        ttl: timedelta | None = None,
        fetch_timeout: float | None = None,
    ):
        settings = get_settings()
        self.cache = cache if cache is not None else default_cache
        self.clock = clock or utc_now
        self.library = library or _empty_library
        self.ttl = ttl if ttl is not None else timedelta(seconds=settings.recommendation_cache_ttl_seconds)
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else settings.catalog_fetch_timeout_seconds

    def cache_key(
        self,
        user_id: str,
        preferences: UserPreferences,
        library: Sequence[LibraryEntry],
    ) -> str:
        """Key covering every preference field and every library entry field."""
        try:
            prefs_digest = fingerprint(preferences.to_dict())
            library_digest = fingerprint(
                sorted(
                    (entry.model_dump(mode="json") for entry in library),
                    key=lambda e: (e["media_type"], e["id"]),
                )
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise CacheKeyError(f"Cannot build recommendation cache key: {e}") from e
        return make_cache_key(self.CACHE_NAMESPACE, user_id, prefs_digest, library_digest)

    async def get_recommendations(
        self,
        preferences: UserPreferences,
        limit: int = DEFAULT_RECOMMENDATION_LIMIT,
        fetch_catalog: CatalogFetcher | None = None,
        user_id: str = "anonymous",
    ) -> list[ScoredCandidate]:
        """Get the top `limit` recommendations for a user.

        Raises:
            CacheKeyError: preferences or library snapshot are not serializable
            CatalogUnavailableError: every catalog request failed
        """
        log = LogContext(logger, user=user_id)
        limit = max(limit, 0)

        try:
            snapshot = list(self.library())
        except Exception as e:
            raise CacheKeyError(f"Cannot read library snapshot: {e}") from e
        key = self.cache_key(user_id, preferences, snapshot)
        now = self.clock()

        cached = self._read_cache(key, now, log)
        if cached is not None:
            log.debug(f"Cache HIT ({len(cached)} ranked)")
            return cached[:limit]
        log.debug("Cache MISS")

        if fetch_catalog is None:
            from smart_discovery.services.metadata.tmdb import tmdb_service

            fetch_catalog = tmdb_service.fetch

        rows = await self._fetch_candidates(fetch_catalog, log)
        ranked = self._rank(rows, preferences, snapshot)
        log.info(f"Ranked {len(ranked)} candidates from {len(rows)} catalog rows")

        self._write_cache(key, ranked, now, log)
        return ranked[:limit]

    def _read_cache(self, key: str, now: datetime, log: LogContext) -> list[ScoredCandidate] | None:
        try:
            entry = self.cache.get(key)
        except Exception as e:
            log.warning(f"Cache read failed, treating as miss: {e}")
            return None

        if entry is None:
            return None
        if not isinstance(entry, CacheEntry) or not isinstance(entry.recommendations, list):
            log.warning(f"Ignoring corrupt cache entry of type {type(entry).__name__}")
            return None

        try:
            fresh = now - entry.created_at < self.ttl
        except TypeError as e:
            log.warning(f"Ignoring cache entry with unusable timestamp: {e}")
            return None
        return list(entry.recommendations) if fresh else None

    def _write_cache(
        self,
        key: str,
        ranked: list[ScoredCandidate],
        now: datetime,
        log: LogContext,
    ) -> None:
        try:
            self.cache.set(key, ranked, now)
            purged = self.cache.purge_expired(now, self.ttl)
            if purged:
                log.debug(f"Purged {purged} expired cache entries")
        except Exception as e:
            log.warning(f"Cache write failed: {e}")

    async def _fetch_candidates(
        self,
        fetch_catalog: CatalogFetcher,
        log: LogContext,
    ) -> list[tuple[CatalogResult, str | None]]:
        """Fetch every catalog page concurrently and validate the rows."""
        requests = [
            (endpoint, page, default_type)
            for endpoint, default_type in CATALOG_SOURCES
            for page in CATALOG_PAGES
        ]
        pages = await asyncio.gather(
            *(self._fetch_page(fetch_catalog, endpoint, page, log) for endpoint, page, _ in requests)
        )

        failed = sum(1 for page in pages if page is None)
        if failed == len(requests):
            log.error(f"All {failed} catalog requests failed")
            raise CatalogUnavailableError(f"All {failed} catalog requests failed")
        if failed:
            log.warning(f"{failed}/{len(requests)} catalog requests failed, continuing with partial results")

        rows: list[tuple[CatalogResult, str | None]] = []
        for (endpoint, _, default_type), page in zip(requests, pages):
            if page is None:
                continue
            for raw in page.results:
                try:
                    rows.append((CatalogResult.model_validate(raw), default_type))
                except ValidationError:
                    log.debug(f"Skipping malformed row from {endpoint}")
        return rows

    async def _fetch_page(
        self,
        fetch_catalog: CatalogFetcher,
        endpoint: str,
        page: int,
        log: LogContext,
    ) -> CatalogPage | None:
        try:
            data = await asyncio.wait_for(fetch_catalog(endpoint, {"page": page}), timeout=self.fetch_timeout)
            return CatalogPage.model_validate(data)
        except asyncio.TimeoutError:
            log.warning(f"{endpoint} page {page} timed out after {self.fetch_timeout:.1f}s")
        except ValidationError as e:
            log.warning(f"{endpoint} page {page} returned a malformed payload: {e.error_count()} errors")
        except Exception as e:
            log.warning(f"{endpoint} page {page} failed: {e}")
        return None

    def _rank(
        self,
        rows: list[tuple[CatalogResult, str | None]],
        preferences: UserPreferences,
        library: Sequence[LibraryEntry],
    ) -> list[ScoredCandidate]:
        library_keys = {entry.key for entry in library}
        favorite_keys = {entry.key for entry in library if entry.is_favorite} | preferences.favorite_ids

        seen: set[str] = set()
        scored: list[ScoredCandidate] = []
        for row, default_type in rows:
            media_type = row.resolve_media_type(default_type)
            if media_type is None:
                continue
            key = f"{media_type.value}:{row.id}"
            if key in seen:
                continue
            seen.add(key)

            if not row.poster_path:
                continue
            if key in preferences.not_interested_ids or key in library_keys:
                continue

            try:
                candidate = row.to_candidate(media_type, is_favorite=key in favorite_keys)
            except ValidationError:
                logger.debug(f"Skipping unscorable row {key}")
                continue
            result = score_candidate(candidate, preferences)
            if result.score > MIN_RECOMMENDATION_SCORE:
                scored.append(ScoredCandidate(item=candidate, score=result.score, reasons=result.reasons))

        # sort() is stable: equal scores keep catalog order
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored


async def get_recommendations(
    preferences: UserPreferences,
    limit: int = DEFAULT_RECOMMENDATION_LIMIT,
    fetch_catalog: CatalogFetcher | None = None,
    user_id: str = "anonymous",
    *,
    library: LibraryAccessor | None = None,
) -> list[ScoredCandidate]:
    """Get recommendations using the process-wide cache.

    Args:
        preferences: Profile from analyze(), optionally merged with analyze_genres()
        limit: Max number of results
        fetch_catalog: Async (endpoint, params) -> payload; defaults to TMDB
        user_id: Cache partition; users never share entries
        library: Accessor for the current library snapshot
    """
    engine = RecommendationEngine(library=library)
    return await engine.get_recommendations(preferences, limit, fetch_catalog, user_id)
