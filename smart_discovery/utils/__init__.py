"""Utility modules for the recommendation engine."""

from smart_discovery.utils.cache import CacheEntry, InMemoryTTLCache, RecommendationCache, cache
from smart_discovery.utils.logging import LogContext, get_logger, setup_logging
from smart_discovery.utils.rate_limiter import RateLimitConfig, rate_limiter
from smart_discovery.utils.retry import RetryConfig, retry_async

__all__ = [
    # Cache
    "CacheEntry",
    "InMemoryTTLCache",
    "RecommendationCache",
    "cache",
    # Logging
    "get_logger",
    "LogContext",
    "setup_logging",
    # Rate limiting
    "rate_limiter",
    "RateLimitConfig",
    # Retry
    "retry_async",
    "RetryConfig",
]
