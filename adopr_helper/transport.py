"""
Async HTTP transport for the Azure DevOps REST API.

Handles Basic authentication with a personal access token, the
``api-version`` query parameter, connection-level retries, and turning
non-success responses into ``RemoteError``.
"""

import asyncio
import base64
import random
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

import httpx

from adopr_helper.exceptions import RemoteError
from adopr_helper.logging import log_http_request, log_http_response

DEFAULT_API_VERSION = "7.1"


@dataclass
class RetryConfig:
    """Configuration for retrying connection failures.

    Error responses (4xx/5xx) are never retried; they surface as RemoteError.
    """

    max_retries: int = 2
    backoff_factor: float = 2.0
    max_backoff: float = 30.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def basic_auth_header(token: str) -> str:
    """Build the Authorization header value for a personal access token."""
    encoded = base64.b64encode(f":{token}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


class AsyncHTTPTransport:
    """
    Async HTTP transport layer with PAT authentication.

    Handles:
    - ``Authorization: Basic base64(":" + token)`` on every request
    - ``Accept: application/json`` by default, ``text/plain`` for raw content
    - Exponential backoff with jitter for connection failures
    - Error responses as RemoteError carrying status code and reason
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Service root (e.g., "https://dev.azure.com")
            token: Personal access token
            api_version: Value of the ``api-version`` query parameter
            timeout: Request timeout in seconds
            retry_config: Configuration for connection retries
            transport: Optional httpx transport (used to plug in a fake service)
        """
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Authorization": basic_auth_header(token),
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        GET a JSON document.

        Args:
            path: API path relative to the base URL
            params: Extra query parameters (``api-version`` is always added)

        Returns:
            Parsed JSON object (empty dict for an empty body)

        Raises:
            RemoteError: On a non-success response, exhausted retries, or a
                body that is not a JSON object (e.g. a 203 sign-in page)
        """
        response = await self._get(path, params, accept="application/json")
        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteError(
                response.status_code, "Invalid JSON response", url=str(response.request.url)
            ) from e

        if not isinstance(data, dict):
            raise RemoteError(
                response.status_code, "Invalid JSON response", url=str(response.request.url)
            )

        return data

    async def get_text(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> str:
        """
        GET raw text content with ``Accept: text/plain``.

        Raises:
            RemoteError: On a non-success response or exhausted retries
        """
        response = await self._get(path, params, accept="text/plain")
        return response.text

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None,
        accept: str,
    ) -> httpx.Response:
        query = {**(params or {}), "api-version": self.api_version}
        headers = {"Accept": accept}

        async def make_request() -> httpx.Response:
            log_http_request("GET", f"{self.base_url}{path}", headers=dict(self._client.headers))
            started = time.monotonic()
            response = await self._client.get(path, params=query, headers=headers)
            log_http_response(
                response.status_code,
                str(response.request.url),
                elapsed_ms=(time.monotonic() - started) * 1000,
                size=len(response.content),
            )
            return response

        response = await self._execute_with_retry(make_request)

        if response.status_code >= 400:
            raise RemoteError(
                response.status_code,
                response.reason_phrase or "Error",
                url=str(response.request.url),
            )

        return response

    async def _execute_with_retry(
        self, request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]]
    ) -> httpx.Response:
        """
        Execute a request, retrying connection failures only.

        Args:
            request_fn: Async function that makes the HTTP request

        Returns:
            The first response received, whatever its status

        Raises:
            RemoteError: With status 0 after max retries of connection failures,
                or at once for any other request failure
        """
        for attempt in range(self.retry_config.max_retries + 1):
            try:
                return await request_fn()
            except httpx.TransportError as e:
                if attempt >= self.retry_config.max_retries:
                    raise RemoteError(0, f"Connection error: {e}") from e

                await asyncio.sleep(self._get_backoff_time(attempt))
            except httpx.HTTPError as e:
                raise RemoteError(0, f"Request failed: {e}") from e

        raise RemoteError(0, "Request failed with no error details")

    def _get_backoff_time(self, attempt: int) -> float:
        """
        Calculate backoff time for a retry.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Time to wait in seconds
        """
        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)

        return min(base_wait + jitter, self.retry_config.max_backoff)
