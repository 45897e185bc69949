"""
adopr-helper async client.

Aggregates the resource clients over a single authenticated transport.
"""

from typing import Any

import httpx

from adopr_helper.clients import AsyncBlobsClient, AsyncProjectsClient, AsyncPullsClient
from adopr_helper.config import DEFAULT_API_VERSION, DEFAULT_BASE_URL, Settings
from adopr_helper.transport import AsyncHTTPTransport, RetryConfig


class AsyncAdoClient:
    """
    Async client for the Azure DevOps REST endpoints used by adopr-helper.

    Example:
        ```python
        import asyncio
        from adopr_helper import AsyncAdoClient

        async def main():
            async with AsyncAdoClient(token="my-pat") as client:
                projects = await client.projects.list_projects("acme")

        asyncio.run(main())
        ```
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: Personal access token
            base_url: Service root (default: https://dev.azure.com)
            api_version: REST API version (default: 7.1)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for connection retries (optional)
            transport: Optional httpx transport, e.g. a fake service in tests
        """
        self.base_url = base_url
        self.api_version = api_version

        self._transport = AsyncHTTPTransport(
            base_url=base_url,
            token=token,
            api_version=api_version,
            timeout=timeout,
            retry_config=retry_config,
            transport=transport,
        )

        self.pulls = AsyncPullsClient(self._transport)
        self.blobs = AsyncBlobsClient(self._transport)
        self.projects = AsyncProjectsClient(self._transport)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        token: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AsyncAdoClient":
        """Create a client using the base URL and API version from settings."""
        return cls(
            token=token,
            base_url=settings.base_url,
            api_version=settings.api_version,
            transport=transport,
        )

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncAdoClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
