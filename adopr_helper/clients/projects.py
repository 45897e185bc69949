"""Projects and repositories resource client."""

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from adopr_helper.types.projects import Project, Repo

if TYPE_CHECKING:
    from adopr_helper.transport import AsyncHTTPTransport


class AsyncProjectsClient:
    """Async client for listing an organization's projects and repositories."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the projects client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def list_projects(self, organization: str) -> list[Project]:
        """
        List projects of an organization.

        Returns:
            List of Project objects (empty if the organization has none)

        Raises:
            RemoteError: If the service answers with an error status
        """
        response = await self.transport.get_json(
            f"/{quote(organization, safe='')}/_apis/projects"
        )

        return [
            Project(
                project_id=project.get("id", ""),
                name=project["name"],
                description=project.get("description"),
                url=project.get("url"),
                visibility=project.get("visibility", "private"),
            )
            for project in response.get("value") or []
        ]

    async def list_repositories(self, organization: str, project: str) -> list[Repo]:
        """
        List Git repositories of a project.

        Args:
            organization: Organization name
            project: Project name or id

        Returns:
            List of Repo objects (empty if the project has none)

        Raises:
            RemoteError: If the service answers with an error status
        """
        response = await self.transport.get_json(
            f"/{quote(organization, safe='')}/{quote(project, safe='')}/_apis/git/repositories"
        )

        return [self._parse_repo(repo) for repo in response.get("value") or []]

    def _parse_repo(self, data: dict[str, Any]) -> Repo:
        project = data.get("project") or {}
        return Repo(
            repo_id=data.get("id", ""),
            name=data["name"],
            project_name=project.get("name"),
            default_branch=data.get("defaultBranch"),
            url=data.get("url"),
            size=data.get("size", 0),
        )
