"""Blob content resource client."""

from typing import TYPE_CHECKING
from urllib.parse import quote

from adopr_helper.clients.pulls import repository_path
from adopr_helper.types.pulls import PrIdentity

if TYPE_CHECKING:
    from adopr_helper.transport import AsyncHTTPTransport


class AsyncBlobsClient:
    """Async client for content-addressed blob downloads."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        self.transport = transport

    async def get_text(self, identity: PrIdentity, object_id: str) -> str:
        """
        Download a blob as text.

        Raises:
            RemoteError: If the service answers with an error status
        """
        return await self.transport.get_text(
            f"{repository_path(identity)}/blobs/{quote(object_id, safe='')}"
        )
