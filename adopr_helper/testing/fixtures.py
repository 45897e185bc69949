"""
Pytest fixtures for adopr-helper testing.

Provides a fixed machine fingerprint, an in-memory settings store, a vault
holding a token, and a fake Azure DevOps service.
"""

from collections.abc import Generator

import pytest

from adopr_helper.config import InMemoryConfigStore, Settings
from adopr_helper.testing.mock import FakeAzureDevOps
from adopr_helper.vault import CredentialVault, MachineFingerprint

TEST_TOKEN = "test-pat-0123456789"
TEST_ORGANIZATION = "acme"
TEST_PROJECT = "proj1"
TEST_REPOSITORY = "repoA"


def make_fingerprint(machine_id: str = "test-machine") -> MachineFingerprint:
    """Build a deterministic fingerprint."""
    return MachineFingerprint(
        machine_id=machine_id,
        hostname="test-host",
        platform="linux",
        architecture="x86_64",
    )


def make_vault(store: InMemoryConfigStore, machine_id: str = "test-machine") -> CredentialVault:
    """Build a vault whose key does not depend on the machine running the tests."""
    fingerprint = make_fingerprint(machine_id)
    return CredentialVault(store, fingerprint=lambda: fingerprint)


@pytest.fixture
def config_store() -> InMemoryConfigStore:
    """Provide an empty in-memory settings store."""
    return InMemoryConfigStore()


@pytest.fixture
def settings(config_store: InMemoryConfigStore) -> Settings:
    """Provide settings with organization and project selected."""
    settings = Settings(config_store)
    settings.organization = TEST_ORGANIZATION
    settings.project = TEST_PROJECT
    return settings


@pytest.fixture
def vault(config_store: InMemoryConfigStore) -> CredentialVault:
    """Provide a vault with TEST_TOKEN stored."""
    vault = make_vault(config_store)
    vault.set(TEST_TOKEN)
    return vault


@pytest.fixture
def fake_ado() -> Generator[FakeAzureDevOps, None, None]:
    """
    Provide a FakeAzureDevOps with pull request 42 (active, mergeable).

    Example:
        ```python
        def test_download(fake_ado):
            fake_ado.add_change("/src/a.ts", "edit", object_id="new1", original_object_id="old1")
            fake_ado.blobs.update({"old1": "foo", "new1": "bar"})
        ```
    """
    fake = FakeAzureDevOps()
    fake.add_pull_request("42")
    yield fake
    fake.requests.clear()
