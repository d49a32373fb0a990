"""Retry with exponential backoff for catalog API calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2
    base_delay: float = 0.5  # seconds
    max_delay: float = 5.0  # seconds
    exponential_base: float = 2.0
    retryable_exceptions: tuple = (
        httpx.TimeoutException,
        httpx.ConnectError,
        httpx.ReadError,
        ConnectionError,
    )
    retryable_status_codes: tuple = (429, 500, 502, 503, 504)

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (self.exponential_base**attempt), self.max_delay)


DEFAULT_RETRY_CONFIG = RetryConfig()


async def retry_async(
    func: Callable[..., Awaitable[httpx.Response]],
    *args: Any,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    operation_name: str = "operation",
    **kwargs: Any,
) -> httpx.Response:
    """Execute an async HTTP call with retry logic and exponential backoff.

    A response with a retryable status is retried; once attempts run out the
    last response is returned so the caller can inspect it. Transient
    exceptions are retried and re-raised after the final attempt. Any other
    exception propagates immediately.

    Args:
        func: Async function returning an httpx.Response
        *args: Positional arguments for the function
        config: Retry configuration
        operation_name: Name of the operation for logging
        **kwargs: Keyword arguments for the function
    """
    attempts = config.max_retries + 1

    for attempt in range(attempts):
        try:
            response = await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            if attempt >= config.max_retries:
                logger.error(f"{operation_name}: Failed after {attempts} attempts: {e}")
                raise
            delay = config.delay_for(attempt)
            logger.warning(
                f"{operation_name}: {type(e).__name__}, "
                f"retrying in {delay:.1f}s (attempt {attempt + 1}/{attempts})"
            )
            await asyncio.sleep(delay)
            continue

        if response.status_code in config.retryable_status_codes and attempt < config.max_retries:
            delay = config.delay_for(attempt)
            logger.warning(
                f"{operation_name}: Got status {response.status_code}, "
                f"retrying in {delay:.1f}s (attempt {attempt + 1}/{attempts})"
            )
            await asyncio.sleep(delay)
            continue

        return response

    # Unreachable: the final attempt either returns or raises
    raise RuntimeError(f"{operation_name}: retry loop exited without a result")
