"""adopr-helper - download Azure DevOps pull request changes for local review."""

from adopr_helper.browser import ProjectBrowser
from adopr_helper.changes import filter_eligible, is_eligible
from adopr_helper.client import AsyncAdoClient
from adopr_helper.config import (
    ConfigScope,
    ConfigStore,
    InMemoryConfigStore,
    JsonFileConfigStore,
    Settings,
)
from adopr_helper.exceptions import (
    AdoPrHelperError,
    AuthenticationError,
    BlobFetchError,
    BranchResolutionError,
    ConfigurationError,
    CredentialMissingError,
    InvalidFormat,
    MergeConflictError,
    NotActiveError,
    ParseError,
    RemoteError,
    StorageError,
)
from adopr_helper.logging import configure_logging, get_logger
from adopr_helper.orchestrator import DownloadOrchestrator
from adopr_helper.patches import PatchSynthesizer, create_unified_diff
from adopr_helper.pr_reference import parse_pr_url
from adopr_helper.transport import AsyncHTTPTransport, RetryConfig
from adopr_helper.vault import CredentialVault, EncryptedSecret, MachineFingerprint

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Workflow
    "DownloadOrchestrator",
    "ProjectBrowser",
    "PatchSynthesizer",
    "create_unified_diff",
    "parse_pr_url",
    "is_eligible",
    "filter_eligible",
    # Client
    "AsyncAdoClient",
    "AsyncHTTPTransport",
    "RetryConfig",
    # Credentials
    "CredentialVault",
    "EncryptedSecret",
    "MachineFingerprint",
    # Configuration
    "ConfigScope",
    "ConfigStore",
    "InMemoryConfigStore",
    "JsonFileConfigStore",
    "Settings",
    # Exceptions
    "AdoPrHelperError",
    "ParseError",
    "InvalidFormat",
    "ConfigurationError",
    "CredentialMissingError",
    "AuthenticationError",
    "RemoteError",
    "NotActiveError",
    "MergeConflictError",
    "BranchResolutionError",
    "BlobFetchError",
    "StorageError",
    # Logging
    "configure_logging",
    "get_logger",
]
