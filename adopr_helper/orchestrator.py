"""
Pull request download workflow.

parse URL -> load token -> validate PR -> list changes -> keep eligible
items -> synthesize patches -> write artifacts.

Each run is independent and runs to completion or to the first terminal
error. There is no cancellation: an interrupted run leaves in-flight
requests to be dropped with the event loop.
"""

from collections.abc import Callable, Iterable
from pathlib import Path

import httpx

from adopr_helper.artifacts import DEFAULT_DOWNLOAD_FOLDER, FileWriter, LocalFileWriter, write_artifacts
from adopr_helper.changes import filter_eligible
from adopr_helper.client import AsyncAdoClient
from adopr_helper.config import Settings
from adopr_helper.logging import get_logger
from adopr_helper.patches import DEFAULT_CONCURRENCY, PatchSynthesizer
from adopr_helper.pr_reference import parse_pr_url
from adopr_helper.types.artifacts import DownloadResult
from adopr_helper.vault import CredentialVault

logger = get_logger()

ProgressCallback = Callable[[str], None]


class DownloadOrchestrator:
    """
    Runs the download of one pull request into a local folder.

    Example:
        ```python
        store = JsonFileConfigStore.default()
        orchestrator = DownloadOrchestrator(CredentialVault(store), Settings(store))
        result = asyncio.run(orchestrator.run(pr_url))
        if result.nothing_to_do:
            print("No supported code file found in this PR.")
        ```
    """

    def __init__(
        self,
        vault: CredentialVault,
        settings: Settings,
        destination: str | Path = DEFAULT_DOWNLOAD_FOLDER,
        writer: FileWriter | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        extensions: Iterable[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            vault: Source of the personal access token
            settings: Base URL and API version
            destination: Folder the artifacts are written to
            writer: File writer (default: LocalFileWriter on destination)
            concurrency: Maximum number of files downloaded at the same time
            extensions: Optional file suffix allow-list
            transport: Optional httpx transport, e.g. a fake service in tests
            progress: Optional callback receiving user-facing progress messages
        """
        self.vault = vault
        self.settings = settings
        self.destination = Path(destination)
        self.writer = writer or LocalFileWriter(self.destination)
        self.concurrency = concurrency
        self.extensions = list(extensions) if extensions is not None else None
        self._transport = transport
        self._progress = progress

    def _report(self, message: str) -> None:
        logger.info(message)
        if self._progress is not None:
            self._progress(message)

    async def run(self, pr_url: str) -> DownloadResult:
        """
        Download the changed files of a pull request.

        Args:
            pr_url: Pull request URL

        Returns:
            DownloadResult; ``nothing_to_do`` is True when no eligible file
            was found, in which case nothing is written

        Raises:
            ParseError: If the URL is malformed
            CredentialMissingError: If no token is stored
            AuthenticationError: If the stored token cannot be decrypted
            RemoteError: If PR metadata or the change list cannot be fetched
            NotActiveError: If the PR is not active
            MergeConflictError: If the PR has merge conflicts
            BranchResolutionError: If the PR branches cannot be determined
            StorageError: If the download folder cannot be written
        """
        identity = parse_pr_url(pr_url)
        self._report(
            f"Parsed PR URL: organization={identity.organization} project={identity.project} "
            f"repository={identity.repository} pull_request_id={identity.pull_request_id}"
        )

        token = self.vault.get()

        async with AsyncAdoClient.from_settings(self.settings, token, transport=self._transport) as client:
            metadata = await client.pulls.validate(identity)
            changes = await client.pulls.list_changes(identity, metadata)

            if not changes:
                self._report("No changed files found in this PR.")
                return DownloadResult(identity=identity)

            eligible = filter_eligible(changes, self.extensions)
            if not eligible:
                self._report("No supported code file found in this PR.")
                return DownloadResult(identity=identity, total_changes=len(changes))

            self._report(
                "Changed files to download:\n" + "\n".join(item.path for item in eligible)
            )

            synthesizer = PatchSynthesizer(client.blobs, identity, concurrency=self.concurrency)
            patches = await synthesizer.synthesize_all(eligible)

        artifacts = write_artifacts(patches, self.writer, self.destination)
        self._report(f"Downloaded files to {self.destination}")

        return DownloadResult(
            identity=identity,
            patches=patches,
            artifacts=artifacts,
            total_changes=len(changes),
        )
