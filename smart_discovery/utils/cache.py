"""In-process caching for generated recommendations.

The orchestrator owns TTL decisions; caches here only store entries together
with their creation time and hand them back untouched.
"""

import hashlib
import json
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol

from smart_discovery.models.recommendation import ScoredCandidate
from smart_discovery.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Stored recommendation list and the moment it was produced."""

    recommendations: list[ScoredCandidate]
    created_at: datetime


class RecommendationCache(Protocol):
    """Storage interface used by the recommendation engine."""

    def get(self, key: str) -> CacheEntry | None: ...

    def set(self, key: str, value: list[ScoredCandidate], created_at: datetime) -> None: ...

    def purge_expired(self, now: datetime, ttl: timedelta) -> int: ...


class InMemoryTTLCache:
    """Thread-safe key -> entry map.

    Nothing is evicted in the background. Expired entries fail the engine's
    TTL check on read and are dropped by purge_expired(), which the engine
    calls on every write.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: list[ScoredCandidate], created_at: datetime) -> None:
        entry = CacheEntry(recommendations=list(value), created_at=created_at)
        with self._lock:
            self._entries[key] = entry

    def purge_expired(self, now: datetime, ttl: timedelta) -> int:
        """Drop entries at least `ttl` old, plus entries whose age cannot be computed.

        Returns:
            Number of entries removed
        """
        with self._lock:
            expired = [key for key, entry in self._entries.items() if not _is_fresh(entry, now, ttl)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _is_fresh(entry: Any, now: datetime, ttl: timedelta) -> bool:
    try:
        return now - entry.created_at < ttl
    except (AttributeError, TypeError):
        return False


# Global cache instance
cache = InMemoryTTLCache()


def fingerprint(value: Any) -> str:
    """SHA-256 of a canonical JSON dump (sorted keys, compact separators).

    Raises:
        TypeError / ValueError: if the value is not JSON serializable
    """
    payload = json.dumps(value, sort_keys=True, separators=(",", ":"), default=_json_default)
    return hashlib.sha256(payload.encode()).hexdigest()


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def make_cache_key(namespace: str, *args: Any, **kwargs: Any) -> str:
    """Generate a cache key from arguments.

    Args:
        namespace: Key prefix (e.g., "recommendations")
        *args: Positional parts to include in key
        **kwargs: Keyword parts to include in key

    Returns:
        Cache key string
    """
    parts = [namespace]

    for arg in args:
        if arg is not None:
            parts.append(str(arg))

    for key, value in sorted(kwargs.items()):
        if value is not None:
            parts.append(f"{key}={value}")

    return ":".join(parts)
