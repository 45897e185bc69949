"""
Browsing an organization's projects and repositories.

Repository lists are cached per organization and project for the lifetime
of the browser. ``refresh()`` drops the cache and notifies every subscribed
listener so views showing the tree can reload.
"""

from collections.abc import Callable

import httpx

from adopr_helper.client import AsyncAdoClient
from adopr_helper.config import Settings
from adopr_helper.logging import get_logger
from adopr_helper.types.projects import Project, Repo
from adopr_helper.vault import CredentialVault

logger = get_logger()

Listener = Callable[[], None]


class ProjectBrowser:
    """Lists projects and (cached) repositories for interactive selection."""

    def __init__(
        self,
        vault: CredentialVault,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.vault = vault
        self.settings = settings
        self._transport = transport
        self._repos: dict[tuple[str, str], list[Repo]] = {}
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called after every refresh.

        Returns:
            A function that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh(self) -> None:
        """Drop cached repository lists and notify listeners."""
        self._repos.clear()
        for listener in list(self._listeners):
            listener()

    def cached_projects(self) -> list[str]:
        """Names of projects whose repositories are cached."""
        return [project for _, project in self._repos]

    async def list_projects(self, organization: str | None = None) -> list[Project]:
        """
        List projects of an organization (default: the configured one).

        Raises:
            ConfigurationError: If no organization is given or configured
            CredentialMissingError: If no token is stored
            AuthenticationError: If the stored token cannot be decrypted
            RemoteError: If the service answers with an error status
        """
        org = organization or self.settings.organization
        async with self._client() as client:
            return await client.projects.list_projects(org)

    async def list_repositories(
        self,
        project: str | None = None,
        organization: str | None = None,
    ) -> list[Repo]:
        """
        List repositories of a project (default: the selected one).

        Results are cached per (organization, project) until ``refresh()``.

        Raises:
            ConfigurationError: If organization or project is not set
            CredentialMissingError: If no token is stored
            AuthenticationError: If the stored token cannot be decrypted
            RemoteError: If the service answers with an error status
        """
        project_name = project or self.settings.project
        org = organization or self.settings.organization

        cached = self._repos.get((org, project_name))
        if cached is not None:
            return cached

        async with self._client() as client:
            repos = await client.projects.list_repositories(org, project_name)

        logger.debug("Cached %d repositories for project %s", len(repos), project_name)
        self._repos[(org, project_name)] = repos
        return repos

    def _client(self) -> AsyncAdoClient:
        return AsyncAdoClient.from_settings(self.settings, self.vault.get(), transport=self._transport)
