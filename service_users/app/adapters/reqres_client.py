"""
Async HTTP client for the remote ReqRes user directory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from shared.config import ReqResSettings
from shared.errors import ConfigurationError, ExternalServiceError, ExternalServiceTimeoutError
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryError, retry_on_exception

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 2.0

# Connection failures, protocol errors and client-side timeouts.
TRANSIENT_EXCEPTIONS = (httpx.TransportError,)


def is_transient_response(response: httpx.Response) -> bool:
    """True for statuses worth retrying: 5xx and 408 Request Timeout."""
    return response.status_code >= 500 or response.status_code == 408


class ReqResClient:
    """GET-only client with a fixed retry policy around every request.

    Transient failures are retried according to ``retry_config``. When the
    retries run out on an exception, ``get`` raises ``ExternalServiceError``
    (``ExternalServiceTimeoutError`` for timeouts). When they run out on a
    transient status, the last response is returned as is. Other request
    errors, such as a body that cannot be decoded, raise
    ``ExternalServiceError`` without a retry.
    """

    SERVICE_NAME = "reqres"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        api_key: Optional[str] = None,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional["MetricsCollector"] = None,
    ) -> None:
        self.base_url = self._validate_base_url(base_url)
        self.timeout = timeout
        self.logger = get_logger("users.reqres_client")
        self.metrics = metrics
        self.retry_config = retry_config or RetryConfig.fixed(
            retries=DEFAULT_RETRY_ATTEMPTS,
            delay=DEFAULT_RETRY_DELAY_SECONDS,
        )

        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self._send = retry_on_exception(
            TRANSIENT_EXCEPTIONS,
            config=self.retry_config,
            retry_on_result=is_transient_response,
        )(self._send_once)

    @classmethod
    def from_settings(cls, settings: ReqResSettings, **kwargs: Any) -> "ReqResClient":
        """Build a client from loaded ``ReqResSettings``."""
        return cls(
            str(settings.base_url),
            timeout=settings.timeout_seconds,
            api_key=settings.api_key,
            retry_config=RetryConfig.fixed(
                retries=settings.retry_attempts,
                delay=settings.retry_delay_seconds,
            ),
            **kwargs,
        )

    @staticmethod
    def _validate_base_url(base_url: Optional[str]) -> str:
        if not base_url or not str(base_url).strip():
            raise ConfigurationError("ReqRes base URL is not configured")

        url = httpx.URL(str(base_url).strip())
        if not url.is_absolute_url or url.scheme not in ("http", "https"):
            raise ConfigurationError(
                "ReqRes base URL must be an absolute http(s) URI",
                details={"base_url": str(base_url)},
            )
        return str(url).rstrip("/") + "/"

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "ReqResClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _send_once(self, path: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        response = await self._client.get(path, params=params)
        if self.metrics is not None:
            self.metrics.record_upstream_request(path.split("/", 1)[0], response.status_code)
        return response

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """GET ``path`` relative to the base URL."""
        try:
            response = await self._send(path, params)
        except RetryError as exc:
            cause = exc.last_exception
            details = {"path": path, "attempts": exc.attempts, "error": str(cause)}
            if isinstance(cause, httpx.TimeoutException):
                self.logger.error("ReqRes request timed out", **details)
                raise ExternalServiceTimeoutError(self.SERVICE_NAME, details=details) from cause

            self.logger.error("ReqRes request failed", **details)
            raise ExternalServiceError(
                self.SERVICE_NAME,
                message=str(cause) or type(cause).__name__,
                details=details,
            ) from cause
        except httpx.RequestError as exc:
            # Not retried: undecodable Content-Encoding, too many redirects.
            details = {"path": path, "error": str(exc)}
            self.logger.error("ReqRes request failed", **details)
            raise ExternalServiceError(
                self.SERVICE_NAME,
                message=str(exc) or type(exc).__name__,
                details=details,
            ) from exc

        self.logger.debug(
            "ReqRes response received",
            path=path,
            params=params,
            status_code=response.status_code,
        )
        return response
