"""TMDB API integration used as the engine's catalog fetcher."""

from typing import Any

import httpx

from smart_discovery.config import get_settings
from smart_discovery.constants import TMDB_API_BASE_URL
from smart_discovery.exceptions import CatalogRequestError
from smart_discovery.utils.http_client import get_tmdb_client
from smart_discovery.utils.logging import get_logger
from smart_discovery.utils.rate_limiter import RateLimiter, rate_limiter
from smart_discovery.utils.retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry_async

logger = get_logger(__name__)


class TMDBService:
    """Generic TMDB client.

    `fetch` matches the (path, params) -> payload callable expected by
    analyze_genres and RecommendationEngine, so the engine stays unaware of
    HTTP.
    """

    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        client: httpx.AsyncClient | None = None,
        limiter: RateLimiter | None = None,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
    ) -> None:
        settings = get_settings()
        self.api_key = settings.tmdb_api_key if api_key is None else api_key
        self.language = language or settings.tmdb_language
        self._client = client
        self._limiter = limiter or rate_limiter
        self._retry_config = retry_config
        # Support both API key v3 and Bearer token
        if self.api_key and self.api_key.startswith("eyJ"):
            # Bearer token (API Read Access Token)
            self.headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            }
            self.use_api_key_param = False
        else:
            # API key v3 - pass as query parameter
            self.headers = {"Accept": "application/json"}
            self.use_api_key_param = True

    def _build_params(self, params: dict[str, Any] | None) -> dict[str, str]:
        built = {"language": self.language}
        for key, value in (params or {}).items():
            if value is not None:
                built[key] = str(value)
        if self.use_api_key_param:
            built["api_key"] = self.api_key
        return built

    async def fetch(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET a TMDB path and return the decoded JSON body.

        Args:
            path: API path such as "/movie/603" or "/trending/all/week"
            params: Extra query parameters (page, etc.)

        Raises:
            CatalogRequestError: missing credentials, transport failure,
                non-200 status or a non-object body
        """
        if not self.api_key:
            raise CatalogRequestError(path, "TMDB API key is not configured")

        client = self._client or get_tmdb_client()
        await self._limiter.acquire("tmdb")
        try:
            response = await retry_async(
                client.get,
                f"{TMDB_API_BASE_URL}{path}",
                params=self._build_params(params),
                headers=self.headers,
                config=self._retry_config,
                operation_name=f"TMDB {path}",
            )
        except httpx.HTTPError as e:
            raise CatalogRequestError(path, f"request failed: {e}") from e

        if response.status_code != 200:
            logger.debug(f"TMDB {path} returned {response.status_code}")
            raise CatalogRequestError(path, f"unexpected status {response.status_code}", response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogRequestError(path, "response body is not JSON") from e
        if not isinstance(data, dict):
            raise CatalogRequestError(path, "response body is not a JSON object")
        return data

    async def get_details(self, media_type: str, tmdb_id: int | str) -> dict[str, Any]:
        """Movie or TV details (genres, runtime, ...)."""
        return await self.fetch(f"/{media_type}/{tmdb_id}")

    async def get_trending(self, media_type: str = "all", time_window: str = "week", page: int = 1) -> dict[str, Any]:
        """Trending titles page ("all", "movie" or "tv")."""
        return await self.fetch(f"/trending/{media_type}/{time_window}", {"page": page})

    async def get_top_rated(self, media_type: str = "movie", page: int = 1) -> dict[str, Any]:
        """Top-rated movies or TV shows page."""
        return await self.fetch(f"/{media_type}/top_rated", {"page": page})


tmdb_service = TMDBService()
