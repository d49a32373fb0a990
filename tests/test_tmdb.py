"""Tests for the TMDB catalog client."""

import httpx
import pytest

from smart_discovery.exceptions import CatalogRequestError
from smart_discovery.services.metadata.tmdb import TMDBService
from smart_discovery.utils.http_client import close_all_clients, get_tmdb_client
from smart_discovery.utils.rate_limiter import RateLimiter
from smart_discovery.utils.retry import RetryConfig

NO_RETRY = RetryConfig(max_retries=0)
FAST_RETRY = RetryConfig(max_retries=2, base_delay=0.0, max_delay=0.0)


def make_service(handler, api_key: str = "test-key", retry_config: RetryConfig = NO_RETRY) -> TMDBService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TMDBService(
        api_key=api_key,
        language="en-US",
        client=client,
        limiter=RateLimiter(),
        retry_config=retry_config,
    )


class TestFetch:
    """Tests for TMDBService.fetch."""

    @pytest.mark.asyncio
    async def test_returns_json_body(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": [{"id": 1}]})

        service = make_service(handler)
        data = await service.fetch("/movie/top_rated", {"page": 2})

        assert data == {"results": [{"id": 1}]}
        request = seen[0]
        assert request.url.path == "/3/movie/top_rated"
        assert request.url.params["page"] == "2"
        assert request.url.params["language"] == "en-US"
        assert request.url.params["api_key"] == "test-key"

    @pytest.mark.asyncio
    async def test_bearer_token_sent_as_header(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        service = make_service(handler, api_key="eyJhbGciOiJIUzI1NiJ9.token")
        await service.fetch("/tv/1")

        assert seen[0].headers["Authorization"] == "Bearer eyJhbGciOiJIUzI1NiJ9.token"
        assert "api_key" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_none_params_dropped(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        await make_service(handler).fetch("/movie/1", {"append_to_response": None})

        assert "append_to_response" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(CatalogRequestError, match="not configured"):
            await make_service(handler, api_key="").fetch("/movie/1")

    @pytest.mark.asyncio
    async def test_non_200_raises_with_status(self):
        service = make_service(lambda request: httpx.Response(404, json={"status_message": "nope"}))

        with pytest.raises(CatalogRequestError) as exc_info:
            await service.fetch("/movie/0")

        assert exc_info.value.status_code == 404
        assert exc_info.value.path == "/movie/0"

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        service = make_service(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(CatalogRequestError, match="not JSON"):
            await service.fetch("/movie/1")

    @pytest.mark.asyncio
    async def test_non_object_body(self):
        service = make_service(lambda request: httpx.Response(200, json=[1, 2]))

        with pytest.raises(CatalogRequestError, match="not a JSON object"):
            await service.fetch("/movie/1")

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(CatalogRequestError, match="request failed"):
            await make_service(handler).fetch("/movie/1")

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        statuses = iter([503, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses), json={"ok": True})

        data = await make_service(handler, retry_config=FAST_RETRY).fetch("/movie/1")

        assert data == {"ok": True}

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500)

        with pytest.raises(CatalogRequestError) as exc_info:
            await make_service(handler, retry_config=FAST_RETRY).fetch("/movie/1")

        assert calls == 3
        assert exc_info.value.status_code == 500


class TestEndpoints:
    """Tests for the endpoint helpers."""

    @pytest.fixture
    def requests(self) -> list[httpx.Request]:
        return []

    @pytest.fixture
    def service(self, requests) -> TMDBService:
        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"results": []})

        return make_service(handler)

    @pytest.mark.asyncio
    async def test_get_trending(self, service, requests):
        await service.get_trending(page=2)

        assert requests[0].url.path == "/3/trending/all/week"
        assert requests[0].url.params["page"] == "2"

    @pytest.mark.asyncio
    async def test_get_top_rated(self, service, requests):
        await service.get_top_rated("tv")

        assert requests[0].url.path == "/3/tv/top_rated"
        assert requests[0].url.params["page"] == "1"

    @pytest.mark.asyncio
    async def test_get_details(self, service, requests):
        await service.get_details("movie", 603)

        assert requests[0].url.path == "/3/movie/603"


class TestSharedClient:
    """Tests for the persistent httpx client."""

    @pytest.mark.asyncio
    async def test_client_reused_until_closed(self):
        first = get_tmdb_client()
        assert get_tmdb_client() is first

        await close_all_clients()

        assert first.is_closed
        second = get_tmdb_client()
        assert second is not first
        await close_all_clients()
