"""
Patch synthesis for changed files.

For every eligible changed item the old and new blob are downloaded and
turned into a unified diff. A blob that fails to download is treated as
empty content and reported as a warning on the resulting FilePatch; it
never aborts the other items.
"""

import asyncio
import difflib
from collections.abc import Sequence

import httpx

from adopr_helper.clients.blobs import AsyncBlobsClient
from adopr_helper.exceptions import BlobFetchError, RemoteError
from adopr_helper.logging import get_logger
from adopr_helper.types.pulls import ChangedItem, FilePatch, PrIdentity

DEFAULT_CONCURRENCY = 8
NO_NEWLINE_MARKER = "\\ No newline at end of file"
INDEX_SEPARATOR = "=" * 67

logger = get_logger()


def create_unified_diff(file_name: str, old_content: str, new_content: str) -> str:
    """
    Build a unified diff between two versions of a file.

    The header always carries ``Index:``, ``---`` and ``+++`` lines, so
    identical content still yields a (hunkless) patch.

    Args:
        file_name: Display name used in the headers
        old_content: Content before the change ("" for a new file)
        new_content: Content after the change
    """
    lines = [
        f"Index: {file_name}\n",
        f"{INDEX_SEPARATOR}\n",
    ]

    diff = difflib.unified_diff(
        old_content.splitlines(keepends=True),
        new_content.splitlines(keepends=True),
        fromfile=file_name,
        tofile=file_name,
    )

    for line in diff:
        if line.endswith("\n"):
            lines.append(line)
        else:
            lines.append(f"{line}\n{NO_NEWLINE_MARKER}\n")

    if len(lines) == 2:
        lines.extend([f"--- {file_name}\n", f"+++ {file_name}\n"])

    return "".join(lines)


class PatchSynthesizer:
    """
    Downloads blob pairs and produces FilePatch objects.

    Example:
        ```python
        synthesizer = PatchSynthesizer(client.blobs, identity, concurrency=4)
        patches = await synthesizer.synthesize_all(eligible_items)
        ```
    """

    def __init__(
        self,
        blobs: AsyncBlobsClient,
        identity: PrIdentity,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        """
        Initialize the synthesizer.

        Args:
            blobs: Client used for blob downloads
            identity: Pull request whose repository holds the blobs
            concurrency: Maximum number of items processed at the same time
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.blobs = blobs
        self.identity = identity
        self.concurrency = concurrency

    async def synthesize(self, item: ChangedItem) -> FilePatch:
        """
        Produce the patch for one changed item.

        Old and new content are fetched concurrently. A missing content id
        means empty content on that side.
        """
        (old_content, old_warning), (new_content, new_warning) = await asyncio.gather(
            self._fetch(item.old_content_id),
            self._fetch(item.new_content_id),
        )

        file_name = item.file_name
        return FilePatch(
            file_name=file_name,
            old_content=old_content,
            unified_diff=create_unified_diff(file_name, old_content or "", new_content or ""),
            warnings=[warning for warning in (old_warning, new_warning) if warning],
        )

    async def synthesize_all(self, items: Sequence[ChangedItem]) -> list[FilePatch]:
        """
        Produce patches for many items with bounded concurrency.

        Returns:
            One FilePatch per item, in item order
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(item: ChangedItem) -> FilePatch:
            async with semaphore:
                return await self.synthesize(item)

        return list(await asyncio.gather(*(bounded(item) for item in items)))

    async def _fetch(self, object_id: str | None) -> tuple[str | None, str | None]:
        """Return (content, warning); content is None if absent or failed."""
        if not object_id:
            return None, None

        try:
            return await self.blobs.get_text(self.identity, object_id), None
        except RemoteError as e:
            error = BlobFetchError(object_id, f"HTTP {e.status_code}")
        except httpx.HTTPError as e:
            error = BlobFetchError(object_id, str(e))

        logger.warning(error.message)
        return None, error.message
