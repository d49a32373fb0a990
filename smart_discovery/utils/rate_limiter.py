"""Token-bucket rate limiter for catalog API calls."""

import asyncio
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests_per_second: float = 2.0
    burst_size: int = 5
    min_interval: float = 0.0  # Minimum time between requests (seconds)


@dataclass
class TokenBucket:
    """Token bucket refilled continuously at refill_rate tokens per second."""

    capacity: int
    refill_rate: float
    tokens: float = field(default=0.0)
    last_refill: float = field(default_factory=time.monotonic)

    def __post_init__(self):
        self.tokens = float(self.capacity)

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def acquire(self, tokens: int = 1) -> float:
        """Try to take tokens.

        Returns:
            Wait time in seconds (0 if tokens acquired immediately)
        """
        self._refill()

        if self.tokens >= tokens:
            self.tokens -= tokens
            return 0.0

        return (tokens - self.tokens) / self.refill_rate

    async def acquire_async(self, tokens: int = 1) -> None:
        wait_time = self.acquire(tokens)
        if wait_time > 0:
            logger.debug(f"Rate limited, waiting {wait_time:.2f}s")
            await asyncio.sleep(wait_time)
            self._refill()
            self.tokens -= tokens


class RateLimiter:
    """Per-service rate limiter shared by all catalog clients."""

    def __init__(self):
        self._buckets: dict[str, TokenBucket] = {}
        self._configs: dict[str, RateLimitConfig] = {
            # TMDB allows roughly 40 requests per second per IP
            "tmdb": RateLimitConfig(requests_per_second=20.0, burst_size=20),
            "default": RateLimitConfig(),
        }
        self._lock = asyncio.Lock()
        self._last_request: dict[str, float] = defaultdict(float)

    def configure(self, service: str, config: RateLimitConfig) -> None:
        """Configure rate limits for a specific service."""
        self._configs[service] = config
        self._buckets.pop(service, None)

    def _config_for(self, service: str) -> RateLimitConfig:
        return self._configs.get(service, self._configs["default"])

    def _get_bucket(self, service: str) -> TokenBucket:
        if service not in self._buckets:
            config = self._config_for(service)
            self._buckets[service] = TokenBucket(
                capacity=config.burst_size,
                refill_rate=config.requests_per_second,
            )
        return self._buckets[service]

    async def acquire(self, service: str = "default", tokens: int = 1) -> None:
        """Wait until a request to the service is allowed."""
        async with self._lock:
            bucket = self._get_bucket(service)
            min_interval = self._config_for(service).min_interval

            elapsed = time.monotonic() - self._last_request[service]
            if elapsed < min_interval:
                wait = min_interval - elapsed
                logger.debug(f"Rate limit [{service}]: waiting {wait:.3f}s (min interval)")
                await asyncio.sleep(wait)

            await bucket.acquire_async(tokens)
            self._last_request[service] = time.monotonic()


# Global rate limiter instance
rate_limiter = RateLimiter()
