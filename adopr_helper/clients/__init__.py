"""adopr-helper resource clients."""

from adopr_helper.clients.blobs import AsyncBlobsClient
from adopr_helper.clients.projects import AsyncProjectsClient
from adopr_helper.clients.pulls import AsyncPullsClient

__all__ = [
    "AsyncPullsClient",
    "AsyncBlobsClient",
    "AsyncProjectsClient",
]
