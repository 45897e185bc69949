"""Typer CLI for adopr-helper."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adopr_helper.artifacts import DEFAULT_DOWNLOAD_FOLDER
from adopr_helper.browser import ProjectBrowser
from adopr_helper.config import ConfigStore, JsonFileConfigStore, Settings
from adopr_helper.exceptions import AdoPrHelperError, AuthenticationError, CredentialMissingError
from adopr_helper.logging import configure_logging
from adopr_helper.orchestrator import DownloadOrchestrator
from adopr_helper.patches import DEFAULT_CONCURRENCY
from adopr_helper.vault import CredentialVault

app = typer.Typer(help="Download Azure DevOps pull request changes for local review.")
console = Console()
err_console = Console(stderr=True)


@dataclass
class AppContext:
    """Collaborators shared by the commands of one invocation."""

    store: ConfigStore
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def settings(self) -> Settings:
        return Settings(self.store)

    @property
    def vault(self) -> CredentialVault:
        return CredentialVault(self.store)

    def browser(self) -> ProjectBrowser:
        return ProjectBrowser(self.vault, self.settings, transport=self.transport)


def build_context() -> AppContext:
    """Create the context for the current working directory."""
    return AppContext(store=JsonFileConfigStore.default())


def _fail(error: AdoPrHelperError) -> typer.Exit:
    if isinstance(error, AuthenticationError):
        err_console.print(f"[red]{escape(error.message)}[/red]")
        err_console.print("Run 'adopr-helper set-pat' to re-enter your token.")
    elif isinstance(error, CredentialMissingError):
        err_console.print(f"[red]{escape(error.message)}[/red]")
    else:
        err_console.print(f"[red]Error:[/red] {escape(error.message)}")
    return typer.Exit(code=1)


@app.command("set-pat")
def set_pat_command(
    token: Annotated[
        str,
        typer.Option(prompt="Azure DevOps Personal Access Token (PAT)", hide_input=True),
    ],
) -> None:
    """Encrypt and store the personal access token."""
    if not token.strip():
        err_console.print("No PAT provided.")
        raise typer.Exit(code=1)

    try:
        build_context().vault.set(token.strip())
    except AdoPrHelperError as error:
        raise _fail(error) from error
    console.print("Azure DevOps PAT saved securely with machine-specific encryption.")


@app.command("clear-pat")
def clear_pat_command() -> None:
    """Remove the stored personal access token."""
    try:
        build_context().vault.clear()
    except AdoPrHelperError as error:
        raise _fail(error) from error
    console.print("Stored PAT cleared.")


@app.command("set-org")
def set_org_command(
    organization: Annotated[
        str, typer.Option(prompt="Azure DevOps Organization name", help="e.g. mycompany")
    ],
) -> None:
    """Set the Azure DevOps organization."""
    context = build_context()
    try:
        context.settings.organization = organization.strip()
        context.settings.clear_selections()
    except AdoPrHelperError as error:
        raise _fail(error) from error
    console.print(f"Organization set to: {organization.strip()}")


@app.command("set-project")
def set_project_command(
    name: Annotated[str | None, typer.Argument(help="Project name; omit to pick from a list.")] = None,
) -> None:
    """Select the Azure DevOps project."""
    context = build_context()
    settings = context.settings

    try:
        if name is None:
            projects = asyncio.run(context.browser().list_projects())
            if not projects:
                console.print("No projects found in this organization.")
                return

            table = Table("#", "Project", "Visibility", "Description")
            for index, project in enumerate(projects, start=1):
                table.add_row(str(index), project.name, project.visibility, project.description or "")
            console.print(table)

            choice = typer.prompt("Select an Azure DevOps project", type=int)
            if not 1 <= choice <= len(projects):
                err_console.print(f"Invalid selection: {choice}")
                raise typer.Exit(code=1)
            name = projects[choice - 1].name

        settings.project = name
        settings.clear_repository()
    except AdoPrHelperError as error:
        raise _fail(error) from error

    console.print(f"Project set to: {name}")


@app.command("select-repo")
def select_repo_command(
    name: Annotated[str | None, typer.Argument(help="Repository name; omit to pick from a list.")] = None,
) -> None:
    """Select a repository of the current project."""
    context = build_context()

    try:
        if name is None:
            repos = asyncio.run(context.browser().list_repositories())
            if not repos:
                console.print("No repositories found in this project.")
                return

            for index, repo in enumerate(repos, start=1):
                console.print(f"{index:>3}  {repo.name}")

            choice = typer.prompt("Select a repository", type=int)
            if not 1 <= choice <= len(repos):
                err_console.print(f"Invalid selection: {choice}")
                raise typer.Exit(code=1)
            name = repos[choice - 1].name

        context.settings.repository = name
    except AdoPrHelperError as error:
        raise _fail(error) from error

    console.print(f"Selected repository: {name}")


@app.command("repos")
def repos_command(
    project: Annotated[str | None, typer.Option(help="Project name (default: selected project).")] = None,
) -> None:
    """List repositories of a project."""
    context = build_context()

    try:
        repos = asyncio.run(context.browser().list_repositories(project))
    except AdoPrHelperError as error:
        raise _fail(error) from error

    table = Table("Repository", "Default branch", "Size")
    for repo in repos:
        table.add_row(repo.name, repo.default_branch or "", str(repo.size))
    console.print(table)


@app.command("show-selections")
def show_selections_command() -> None:
    """Show the current organization, project and repository."""
    context = build_context()
    settings = context.settings

    try:
        if not context.vault.has_credential():
            err_console.print("Azure DevOps PAT is not set")
            raise typer.Exit(code=1)

        organization = settings.organization_or_none()
        if not organization:
            err_console.print("Azure DevOps Organization is not set")
            raise typer.Exit(code=1)

        selections = settings.describe_selections()
    except AdoPrHelperError as error:
        raise _fail(error) from error

    console.print(f"Organization: {organization}")
    console.print(selections)


@app.command("download")
def download_command(
    pr_url: Annotated[str, typer.Argument(help="Azure DevOps pull request URL.")],
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Folder the files are written to.")
    ] = Path(DEFAULT_DOWNLOAD_FOLDER),
    concurrency: Annotated[
        int, typer.Option(min=1, help="Maximum number of files downloaded at once.")
    ] = DEFAULT_CONCURRENCY,
    verbose: Annotated[bool, typer.Option(help="Log HTTP traffic.")] = False,
) -> None:
    """Download the changed files, a combined patch and review instructions."""
    if verbose:
        configure_logging(level=logging.INFO, http_level=logging.DEBUG)

    context = build_context()
    orchestrator = DownloadOrchestrator(
        context.vault,
        context.settings,
        destination=output,
        concurrency=concurrency,
        transport=context.transport,
        progress=lambda message: console.print(message, markup=False),
    )

    try:
        result = asyncio.run(orchestrator.run(pr_url))
    except AdoPrHelperError as error:
        raise _fail(error) from error

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    if result.artifacts is not None:
        console.print(f"Instructions file created: {result.artifacts.instructions_file}")
