"""
Unit tests for econ_ingest/core/http_client.py

Tests cover URL building, retry on transient failures, 429 handling,
error classification and credential redaction.

All tests are fully offline (httpx.MockTransport).
"""
import httpx
import pytest
from unittest.mock import AsyncMock, patch

from econ_ingest.core.api_errors import (
    AuthenticationError,
    FatalError,
    NotFoundError,
    RateLimitError,
    RetryableError,
)
from econ_ingest.core.http_client import BaseAPIClient
from econ_ingest.sources.fred.client import FREDClient

SECRET = "sk-test-0123456789"


class DemoClient(BaseAPIClient):
    SOURCE_NAME = "demo"
    BASE_URL = "https://api.example.com/v1"


class StatusClient(DemoClient):
    """Reports failures inside a 200 body, like BLS and Alpha Vantage."""

    def _check_api_error(self, data, resource_id):
        if data.get("status") == "failed":
            return FatalError(message=data["detail"], source=self.SOURCE_NAME)
        if data.get("status") == "busy":
            return RetryableError(message="busy", source=self.SOURCE_NAME)
        return None


@pytest.fixture
def make_client(mock_http):
    def _make(handler, cls=DemoClient, max_retries=3, **kwargs):
        transport = mock_http(handler)
        client = cls(max_retries=max_retries, transport=transport.transport, **kwargs)
        return client, transport

    return _make


@pytest.fixture(autouse=True)
def no_backoff():
    with patch.object(BaseAPIClient, "_backoff", new=AsyncMock()) as backoff:
        yield backoff


@pytest.mark.unit
@pytest.mark.asyncio
class TestUrlBuilding:

    async def test_empty_url_uses_base_url(self, make_client):
        client, transport = make_client(lambda request: {"ok": True})
        await client.get("", params={"q": "1"})
        assert str(transport.requests[0].url) == "https://api.example.com/v1?q=1"
        await client.close()

    async def test_relative_path_is_joined_on_base_url(self, make_client):
        client, transport = make_client(lambda request: {"ok": True})
        await client.get("/series/observations")
        assert transport.requests[0].url.path == "/v1/series/observations"
        await client.close()

    async def test_base_url_override(self, make_client):
        client, transport = make_client(
            lambda request: {"ok": True}, base_url="https://mirror.example.org/api"
        )
        await client.get("items")
        assert transport.requests[0].url.host == "mirror.example.org"
        await client.close()

    async def test_post_sends_json_body(self, make_client):
        client, transport = make_client(lambda request: {"ok": True})
        await client.post("", json_body={"seriesid": ["A"]})
        request = transport.requests[0]
        assert request.method == "POST"
        assert b'"seriesid"' in request.content
        await client.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestRetries:

    async def test_server_error_is_retried(self, make_client, no_backoff):
        responses = [httpx.Response(503, text="busy"), {"value": 1}]
        client, transport = make_client(lambda request: responses.pop(0))

        data = await client.get("x")

        assert data == {"value": 1}
        assert len(transport.requests) == 2
        no_backoff.assert_awaited_once()
        await client.close()

    async def test_server_error_exhausts_retries(self, make_client):
        client, transport = make_client(lambda request: httpx.Response(500, text="boom"), max_retries=2)

        with pytest.raises(RetryableError) as exc_info:
            await client.get("x")

        assert exc_info.value.status_code == 500
        assert len(transport.requests) == 2
        await client.close()

    async def test_rate_limit_honours_retry_after(self, make_client):
        responses = [httpx.Response(429, text="slow down", headers={"Retry-After": "0"}), {"ok": 1}]
        client, transport = make_client(lambda request: responses.pop(0))

        assert await client.get("x") == {"ok": 1}
        assert len(transport.requests) == 2
        await client.close()

    async def test_rate_limit_on_last_attempt_raises(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(429, text="slow"), max_retries=1)
        with pytest.raises(RateLimitError):
            await client.get("x")
        await client.close()

    async def test_network_error_becomes_retryable_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, transport = make_client(handler, max_retries=2)
        with pytest.raises(RetryableError):
            await client.get("x")
        assert len(transport.requests) == 2
        await client.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestErrorClassification:

    async def test_not_found_is_not_retried(self, make_client):
        client, transport = make_client(lambda request: httpx.Response(404, text="missing"))
        with pytest.raises(NotFoundError):
            await client.get("x")
        assert len(transport.requests) == 1
        await client.close()

    async def test_unauthorized(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(401, text="bad key"))
        with pytest.raises(AuthenticationError):
            await client.get("x")
        await client.close()

    async def test_unparseable_body_is_fatal(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(FatalError, match="Unparseable"):
            await client.get("x")
        await client.close()

    async def test_error_field_is_not_sniffed_by_default(self, make_client):
        client, _ = make_client(lambda request: {"error": "informational"})
        assert await client.get("x") == {"error": "informational"}
        await client.close()

    async def test_provider_hook_error_is_raised(self, make_client):
        client, transport = make_client(
            lambda request: {"status": "failed", "detail": "no such thing"}, cls=StatusClient
        )
        with pytest.raises(FatalError, match="no such thing"):
            await client.get("x")
        assert len(transport.requests) == 1
        await client.close()

    async def test_retryable_hook_error_is_retried(self, make_client, no_backoff):
        payloads = [{"status": "busy"}, {"status": "ok", "value": 2}]
        client, transport = make_client(lambda request: payloads.pop(0), cls=StatusClient)

        assert await client.get("x") == {"status": "ok", "value": 2}
        assert len(transport.requests) == 2
        no_backoff.assert_awaited_once()
        await client.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestRedaction:
    """API keys never appear in raised errors."""

    async def test_key_echoed_in_error_body_is_masked(self, make_client):
        client, transport = make_client(
            lambda request: httpx.Response(400, text=f"bad request {request.url}"),
            cls=FREDClient,
            api_key=SECRET,
        )

        with pytest.raises(FatalError) as exc_info:
            await client.get("series/observations", params={"series_id": "GDP"})

        assert transport.requests[0].url.params["api_key"] == SECRET
        assert SECRET not in str(exc_info.value)
        assert "api_key=***" in str(exc_info.value)
        await client.close()

    async def test_key_in_api_error_message_is_masked(self, make_client):
        client, _ = make_client(
            lambda request: {"error_code": 400, "error_message": f"key {SECRET} is not registered"},
            cls=FREDClient,
            api_key=SECRET,
        )

        with pytest.raises(FatalError) as exc_info:
            await client.get("series/observations")

        assert SECRET not in str(exc_info.value)
        await client.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestFetchMultiple:

    async def test_failed_item_yields_none(self, make_client):
        def handler(request):
            if request.url.path.endswith("/bad"):
                return httpx.Response(404, text="missing")
            return {"id": request.url.path.rsplit("/", 1)[-1]}

        client, _ = make_client(handler)
        results = await client.fetch_multiple(["good", "bad"], lambda item: client.get(item))

        assert results == {"good": {"id": "good"}, "bad": None}
        await client.close()
