"""
Unit tests for the ReqRes client.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, patch

from service_users.app.adapters.reqres_client import ReqResClient, is_transient_response
from shared.config import ReqResSettings
from shared.errors import ConfigurationError, ExternalServiceError, ExternalServiceTimeoutError
from shared.metrics import MetricsCollector
from shared.retry import RetryConfig
from shared.test_helpers import (
    DEFAULT_BASE_URL,
    FakeReqResDirectory,
    UserDataFactory,
    json_response,
    undecodable_response,
)


class TestReqResClient:
    """Test cases for ReqResClient."""

    @pytest.fixture
    def directory(self):
        return FakeReqResDirectory()

    @pytest.fixture
    def no_delay(self):
        return RetryConfig.fixed(retries=3, delay=0)

    @pytest.mark.asyncio
    async def test_get_builds_url_from_base(self, directory, no_delay):
        """Paths and query parameters are resolved against the base URL."""
        directory.add("users?page=2", UserDataFactory.page([], page=2))

        async with ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport) as client:
            response = await client.get("users", params={"page": 2})

        assert response.status_code == 200
        assert str(directory.requests[0].url) == "https://reqres.test/api/users?page=2"
        assert directory.requests[0].headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_api_key_header(self, directory, no_delay):
        directory.add("users/1", UserDataFactory.single(UserDataFactory.user(1)))
        client = ReqResClient(DEFAULT_BASE_URL, api_key="reqres-free-v1", retry_config=no_delay,
                              transport=directory.transport)

        await client.get("users/1")

        assert directory.requests[0].headers["x-api-key"] == "reqres-free-v1"

    @pytest.mark.asyncio
    async def test_no_api_key_header_when_unset(self, directory, no_delay):
        directory.add("users/1", UserDataFactory.single(UserDataFactory.user(1)))
        client = ReqResClient(DEFAULT_BASE_URL, api_key="", retry_config=no_delay, transport=directory.transport)

        await client.get("users/1")

        assert "x-api-key" not in directory.requests[0].headers

    def test_base_url_gets_trailing_slash(self):
        client = ReqResClient("https://reqres.test/api")

        assert client.base_url == "https://reqres.test/api/"

    @pytest.mark.parametrize("base_url", ["", "   ", None, "reqres.in/api", "ftp://reqres.test/api"])
    def test_invalid_base_url(self, base_url):
        """A missing or non-http(s) base URL fails at construction."""
        with pytest.raises(ConfigurationError):
            ReqResClient(base_url)

    def test_from_settings(self):
        settings = ReqResSettings(
            base_url="https://reqres.test/api",
            timeout_seconds=5,
            api_key="secret",
            retry_attempts=1,
            retry_delay_seconds=0.5,
        )

        client = ReqResClient.from_settings(settings)

        assert client.base_url == "https://reqres.test/api/"
        assert client.timeout == 5
        assert client.retry_config.max_attempts == 2
        assert client.retry_config.delay == 0.5

    @pytest.mark.asyncio
    async def test_default_retry_policy_waits_two_seconds(self, directory):
        """Three retries two seconds apart after the first attempt."""
        directory.add("users/1", httpx.ConnectError("connection refused"))
        client = ReqResClient(DEFAULT_BASE_URL, transport=directory.transport)

        with patch("shared.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(ExternalServiceError):
                await client.get("users/1")

        assert len(directory.requests) == 4
        assert mock_sleep.await_count == 3
        for call in mock_sleep.await_args_list:
            assert call.args == (2.0,)

    @pytest.mark.asyncio
    async def test_network_error_after_retries(self, directory, no_delay):
        directory.add("users/1", httpx.ConnectError("connection refused"))
        client = ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get("users/1")

        assert not isinstance(exc_info.value, ExternalServiceTimeoutError)
        assert exc_info.value.service == "reqres"
        assert exc_info.value.code == "EXTERNAL_SERVICE_ERROR"
        assert exc_info.value.details["attempts"] == 4
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_after_retries(self, directory, no_delay):
        directory.add("users/1", httpx.ReadTimeout("timed out"))
        client = ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport)

        with pytest.raises(ExternalServiceTimeoutError) as exc_info:
            await client.get("users/1")

        assert exc_info.value.code == "EXTERNAL_SERVICE_TIMEOUT"
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_undecodable_body_is_not_retried(self, directory, no_delay):
        """Decoding errors are request errors outside the transport family."""
        directory.add("users/1", undecodable_response())
        client = ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get("users/1")

        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
        assert len(directory.requests) == 1

    @pytest.mark.asyncio
    async def test_too_many_redirects(self, directory, no_delay):
        directory.add("users/1", httpx.TooManyRedirects("Exceeded maximum allowed redirects."))
        client = ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.get("users/1")

        assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)

    @pytest.mark.asyncio
    async def test_transient_status_returns_last_response(self, directory, no_delay):
        """408 on every attempt is handed back after the retries."""
        directory.add("users/1", json_response(408, {}))
        client = ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport)

        response = await client.get("users/1")

        assert response.status_code == 408
        assert len(directory.requests) == 4

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, directory, no_delay):
        client = ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport)

        response = await client.get("users/99")

        assert response.status_code == 404
        assert len(directory.requests) == 1

    @pytest.mark.asyncio
    async def test_records_upstream_metrics(self, directory, no_delay):
        metrics = MetricsCollector("users")
        directory.add("users/1", json_response(500, {}), UserDataFactory.single(UserDataFactory.user(1)))
        client = ReqResClient(DEFAULT_BASE_URL, retry_config=no_delay, transport=directory.transport,
                              metrics=metrics)

        await client.get("users/1")

        assert metrics.get_sample_value("upstream_requests_total", {"endpoint": "users", "status_code": "500"}) == 1.0
        assert metrics.get_sample_value("upstream_requests_total", {"endpoint": "users", "status_code": "200"}) == 1.0

    @pytest.mark.asyncio
    async def test_close(self, directory):
        client = ReqResClient(DEFAULT_BASE_URL, transport=directory.transport)

        await client.close()

        assert client._client.is_closed


class TestIsTransientResponse:
    """Test cases for is_transient_response."""

    @pytest.mark.parametrize("status_code,expected", [
        (200, False),
        (400, False),
        (404, False),
        (408, True),
        (429, False),
        (500, True),
        (503, True),
    ])
    def test_status_codes(self, status_code, expected):
        assert is_transient_response(httpx.Response(status_code)) is expected
