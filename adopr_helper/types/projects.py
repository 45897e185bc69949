"""Project and repository data models."""

from dataclasses import dataclass


@dataclass
class Project:
    """Azure DevOps project information."""

    project_id: str
    name: str
    description: str | None
    url: str | None
    visibility: str  # "private" or "public"


@dataclass
class Repo:
    """Git repository within a project."""

    repo_id: str
    name: str
    project_name: str | None
    default_branch: str | None
    url: str | None
    size: int
