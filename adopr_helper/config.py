"""
Persisted settings for adopr-helper.

All reads and writes of organization/project/repository selections and of
the encrypted credential go through a ``ConfigStore``. Two implementations
ship: an in-memory store for tests and a JSON-file store with a global file
(per user) and a workspace file (per working directory).
"""

import json
import os
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from adopr_helper.exceptions import ConfigurationError, StorageError

PAT_KEY = "adopr-helper.pat"
ORG_KEY = "adopr-helper.org"
PROJECT_KEY = "adopr-helper.project"
REPO_KEY = "adopr-helper.repo"

CONFIG_DIR_ENV_VAR = "ADOPR_HELPER_CONFIG_DIR"
BASE_URL_ENV_VAR = "ADOPR_HELPER_BASE_URL"
API_VERSION_ENV_VAR = "ADOPR_HELPER_API_VERSION"

DEFAULT_BASE_URL = "https://dev.azure.com"
DEFAULT_API_VERSION = "7.1"
WORKSPACE_FILE_NAME = ".adopr-helper.json"
GLOBAL_FILE_NAME = "settings.json"


class ConfigScope(str, Enum):
    """Where a setting is persisted."""

    GLOBAL = "global"
    WORKSPACE = "workspace"


class ConfigStore(ABC):
    """Key-value settings store with global and workspace scope."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the workspace value for key if set, else the global value."""

    @abstractmethod
    def set(self, key: str, value: str, scope: ConfigScope = ConfigScope.GLOBAL) -> None:
        """Store value under key in the given scope, replacing any previous value."""

    @abstractmethod
    def clear(self, key: str, scope: ConfigScope = ConfigScope.GLOBAL) -> None:
        """Remove key from the given scope. Missing keys are ignored."""


class InMemoryConfigStore(ConfigStore):
    """Settings store kept in process memory."""

    def __init__(
        self,
        global_values: dict[str, str] | None = None,
        workspace_values: dict[str, str] | None = None,
    ) -> None:
        self._values: dict[ConfigScope, dict[str, str]] = {
            ConfigScope.GLOBAL: dict(global_values or {}),
            ConfigScope.WORKSPACE: dict(workspace_values or {}),
        }

    def get(self, key: str) -> str | None:
        workspace = self._values[ConfigScope.WORKSPACE]
        if key in workspace:
            return workspace[key]
        return self._values[ConfigScope.GLOBAL].get(key)

    def set(self, key: str, value: str, scope: ConfigScope = ConfigScope.GLOBAL) -> None:
        self._values[scope][key] = value

    def clear(self, key: str, scope: ConfigScope = ConfigScope.GLOBAL) -> None:
        self._values[scope].pop(key, None)

    def scope_values(self, scope: ConfigScope) -> dict[str, str]:
        """Return a copy of every value stored in one scope."""
        return dict(self._values[scope])


class JsonFileConfigStore(ConfigStore):
    """
    Settings store backed by two JSON files.

    Writes rewrite the whole file; two processes writing at the same time
    race and the last writer wins.
    """

    def __init__(self, global_path: Path, workspace_path: Path) -> None:
        self._paths = {
            ConfigScope.GLOBAL: Path(global_path),
            ConfigScope.WORKSPACE: Path(workspace_path),
        }

    @classmethod
    def default(cls, workspace_dir: str | Path | None = None) -> "JsonFileConfigStore":
        """
        Create a store at the default locations.

        The global file lives in ``$ADOPR_HELPER_CONFIG_DIR`` if set, otherwise
        in ``~/.config/adopr-helper``. The workspace file lives in the given
        directory (default: current working directory).
        """
        config_dir = os.environ.get(CONFIG_DIR_ENV_VAR)
        global_dir = Path(config_dir) if config_dir else Path.home() / ".config" / "adopr-helper"
        workspace = Path(workspace_dir) if workspace_dir is not None else Path.cwd()
        return cls(global_dir / GLOBAL_FILE_NAME, workspace / WORKSPACE_FILE_NAME)

    def path_for(self, scope: ConfigScope) -> Path:
        return self._paths[scope]

    def get(self, key: str) -> str | None:
        workspace = self._read(ConfigScope.WORKSPACE)
        if key in workspace:
            return workspace[key]
        return self._read(ConfigScope.GLOBAL).get(key)

    def set(self, key: str, value: str, scope: ConfigScope = ConfigScope.GLOBAL) -> None:
        values = self._read(scope)
        values[key] = value
        self._write(scope, values)

    def clear(self, key: str, scope: ConfigScope = ConfigScope.GLOBAL) -> None:
        values = self._read(scope)
        if key in values:
            del values[key]
            self._write(scope, values)

    def _read(self, scope: ConfigScope) -> dict[str, str]:
        path = self._paths[scope]
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Settings file {path} is not valid JSON: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read settings file {path}: {e}", path=str(path)) from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a JSON object")
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, scope: ConfigScope, values: dict[str, str]) -> None:
        path = self._paths[scope]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(values, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot write settings file {path}: {e}", path=str(path)) from e


class Settings:
    """
    Typed access to the organization/project/repository selections.

    Example:
        ```python
        settings = Settings(InMemoryConfigStore())
        settings.organization = "acme"
        settings.project  # raises ConfigurationError until a project is selected
        ```
    """

    def __init__(self, store: ConfigStore) -> None:
        self.store = store

    @property
    def base_url(self) -> str:
        return os.environ.get(BASE_URL_ENV_VAR, DEFAULT_BASE_URL).rstrip("/")

    @property
    def api_version(self) -> str:
        return os.environ.get(API_VERSION_ENV_VAR, DEFAULT_API_VERSION)

    @property
    def organization(self) -> str:
        return self._require(ORG_KEY, "Azure DevOps Organization is not set")

    @organization.setter
    def organization(self, value: str) -> None:
        self.store.set(ORG_KEY, value, ConfigScope.GLOBAL)

    @property
    def project(self) -> str:
        return self._require(PROJECT_KEY, "Azure DevOps project is not set")

    @project.setter
    def project(self, value: str) -> None:
        self.store.set(PROJECT_KEY, value, ConfigScope.WORKSPACE)

    @property
    def repository(self) -> str:
        return self._require(REPO_KEY, "Azure DevOps repository is not set")

    @repository.setter
    def repository(self, value: str) -> None:
        self.store.set(REPO_KEY, value, ConfigScope.WORKSPACE)

    def organization_or_none(self) -> str | None:
        return self.store.get(ORG_KEY) or None

    def project_or_none(self) -> str | None:
        return self.store.get(PROJECT_KEY) or None

    def repository_or_none(self) -> str | None:
        return self.store.get(REPO_KEY) or None

    def clear_repository(self) -> None:
        self.store.clear(REPO_KEY, ConfigScope.WORKSPACE)

    def clear_selections(self) -> None:
        """Clear the selected project and repository."""
        self.store.clear(PROJECT_KEY, ConfigScope.WORKSPACE)
        self.clear_repository()

    def describe_selections(self) -> str:
        """Human-readable summary of the current project/repository selection."""
        project = self.project_or_none()
        repo = self.repository_or_none()
        if project and repo:
            return f"Selected: {project} → {repo}"
        if project:
            return f"Selected project: {project} (no repository selected)"
        return "No project or repository selected"

    def _require(self, key: str, message: str) -> str:
        value = self.store.get(key)
        if not value:
            raise ConfigurationError(message)
        return value
