"""End-to-end download tests against the fake service."""

import asyncio
from pathlib import Path

import pytest

from adopr_helper.artifacts import INSTRUCTIONS_FILE_NAME, PATCH_FILE_NAME, build_instructions
from adopr_helper.config import InMemoryConfigStore, Settings
from adopr_helper.exceptions import (
    AuthenticationError,
    CredentialMissingError,
    MergeConflictError,
    NotActiveError,
    ParseError,
)
from adopr_helper.orchestrator import DownloadOrchestrator
from adopr_helper.testing import FakeAzureDevOps, make_vault
from adopr_helper.types.artifacts import DownloadResult
from adopr_helper.vault import CredentialVault

PR_URL = "https://dev.azure.com/acme/proj1/_git/repoA/pullrequest/42"


def download(
    vault: CredentialVault,
    settings: Settings,
    fake: FakeAzureDevOps,
    destination: Path,
    url: str = PR_URL,
    messages: list[str] | None = None,
) -> DownloadResult:
    orchestrator = DownloadOrchestrator(
        vault,
        settings,
        destination=destination,
        transport=fake.transport(),
        progress=messages.append if messages is not None else None,
    )
    return asyncio.run(orchestrator.run(url))


def test_download_writes_originals_patch_and_instructions(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    fake_ado.add_change("/src/a.ts", "edit", object_id="new1", original_object_id="old1")
    fake_ado.blobs.update({"old1": "foo", "new1": "bar"})
    messages: list[str] = []

    result = download(vault, settings, fake_ado, tmp_path / "PR_FOLDER", messages=messages)

    destination = tmp_path / "PR_FOLDER"
    assert not result.nothing_to_do
    assert (destination / "src" / "a.ts").read_text() == "foo"

    patch = (destination / PATCH_FILE_NAME).read_text()
    assert "-foo" in patch
    assert "+bar" in patch

    instructions = (destination / INSTRUCTIONS_FILE_NAME).read_text()
    assert instructions == build_instructions(["src/a.ts"])
    assert "- src/a.ts" in instructions
    assert f"- {PATCH_FILE_NAME}" in instructions

    assert result.artifacts.instructions_file == destination / INSTRUCTIONS_FILE_NAME
    assert any("src/a.ts" in message for message in messages)


def test_every_request_is_authenticated(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    fake_ado.add_change("/src/a.ts", "edit", object_id="new1", original_object_id="old1")
    fake_ado.blobs.update({"old1": "foo", "new1": "bar"})

    download(vault, settings, fake_ado, tmp_path)

    assert [request.kind for request in fake_ado.requests[:2]] == ["pull_request", "diffs"]
    assert all(request.headers["authorization"].startswith("Basic ") for request in fake_ado.requests)


def test_completed_pr_makes_no_further_calls(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    fake_ado.add_pull_request("42", status="completed")

    with pytest.raises(NotActiveError):
        download(vault, settings, fake_ado, tmp_path / "out")

    assert fake_ado.requests_of("diffs") == []
    assert fake_ado.requests_of("blob") == []
    assert not (tmp_path / "out").exists()


def test_conflicting_pr_is_rejected(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    fake_ado.add_pull_request("42", merge_status="conflicts")

    with pytest.raises(MergeConflictError):
        download(vault, settings, fake_ado, tmp_path / "out")

    assert fake_ado.requests_of("diffs") == []


def test_no_eligible_items_writes_nothing(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    fake_ado.add_change("/src", "edit", git_object_type="tree", is_folder=True)
    fake_ado.add_change("/old.ts", "delete", original_object_id="old1")
    messages: list[str] = []

    result = download(vault, settings, fake_ado, tmp_path / "out", messages=messages)

    assert result.nothing_to_do
    assert result.total_changes == 2
    assert fake_ado.requests_of("blob") == []
    assert not (tmp_path / "out").exists()
    assert "No supported code file found in this PR." in messages


def test_empty_change_list(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    messages: list[str] = []

    result = download(vault, settings, fake_ado, tmp_path / "out", messages=messages)

    assert result.nothing_to_do
    assert result.total_changes == 0
    assert "No changed files found in this PR." in messages


def test_failed_blob_is_partial_success(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    fake_ado.add_change("/a.py", "edit", object_id="a2", original_object_id="a1")
    fake_ado.add_change("/b.py", "edit", object_id="b2", original_object_id="b1")
    fake_ado.add_change("/c.py", "add", object_id="c2")
    fake_ado.blobs.update({"a1": "a\n", "a2": "A\n", "b2": "B\n", "c2": "C\n"})
    fake_ado.blob_errors["b1"] = 404

    result = download(vault, settings, fake_ado, tmp_path)

    assert len(result.patches) == 3
    assert len(result.warnings) == 1
    assert (tmp_path / "a.py").read_text() == "a\n"
    assert (tmp_path / "b.py").read_text() == ""
    assert (tmp_path / "c.py").read_text() == ""

    patch = (tmp_path / PATCH_FILE_NAME).read_text()
    assert patch.index("Index: a.py") < patch.index("Index: b.py") < patch.index("Index: c.py")
    assert "+B" in patch


def test_missing_token_makes_no_requests(
    settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    vault = make_vault(InMemoryConfigStore())

    with pytest.raises(CredentialMissingError):
        download(vault, settings, fake_ado, tmp_path)

    assert fake_ado.requests == []


def test_undecryptable_token_makes_no_requests(
    settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    store = InMemoryConfigStore()
    make_vault(store, "other-machine").set("token")

    with pytest.raises(AuthenticationError):
        download(make_vault(store), settings, fake_ado, tmp_path)

    assert fake_ado.requests == []


def test_invalid_url_makes_no_requests(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    with pytest.raises(ParseError):
        download(vault, settings, fake_ado, tmp_path, url="https://example.com/not-a-pr")

    assert fake_ado.requests == []


def test_rerun_overwrites_previous_download(
    vault: CredentialVault, settings: Settings, fake_ado: FakeAzureDevOps, tmp_path: Path
) -> None:
    fake_ado.add_change("/src/a.ts", "edit", object_id="new1", original_object_id="old1")
    fake_ado.blobs.update({"old1": "foo", "new1": "bar"})

    download(vault, settings, fake_ado, tmp_path)
    first = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*") if p.is_file())
    patch_before = (tmp_path / PATCH_FILE_NAME).read_text()

    download(vault, settings, fake_ado, tmp_path)
    second = sorted(p.relative_to(tmp_path) for p in tmp_path.rglob("*") if p.is_file())

    assert first == second
    assert (tmp_path / PATCH_FILE_NAME).read_text() == patch_before
