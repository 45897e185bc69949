"""adopr-helper exception classes."""


class AdoPrHelperError(Exception):
    """Base exception for all adopr-helper errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ParseError(AdoPrHelperError):
    """Raised when a pull request URL does not match a supported shape."""

    def __init__(self, url: str) -> None:
        super().__init__("INVALID_FORMAT", "Invalid Azure DevOps PR URL format.")
        self.url = url


# The parser's failure kind, under the name used in user-facing docs.
InvalidFormat = ParseError


class ConfigurationError(AdoPrHelperError):
    """Raised when a required setting (organization, project, ...) is missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class StorageError(AdoPrHelperError):
    """Raised when a settings file or a downloaded file cannot be read or written."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__("STORAGE_ERROR", message)
        self.path = path


class CredentialMissingError(AdoPrHelperError):
    """Raised when no personal access token has been stored yet."""

    def __init__(
        self,
        message: str = "Azure DevOps PAT not set. Please run 'set-pat' first.",
    ) -> None:
        super().__init__("CREDENTIAL_MISSING", message)


class AuthenticationError(AdoPrHelperError):
    """Raised when the stored token cannot be decrypted on this machine."""

    def __init__(
        self,
        message: str = (
            "Failed to decrypt stored PAT - this may be due to machine changes "
            "or corrupted data. Please re-enter your Personal Access Token."
        ),
    ) -> None:
        super().__init__("AUTHENTICATION_FAILED", message)


class RemoteError(AdoPrHelperError):
    """Raised on a non-success response from the remote service."""

    def __init__(self, status_code: int, status_text: str, url: str | None = None) -> None:
        super().__init__("REMOTE_ERROR", f"HTTP {status_code}: {status_text}")
        self.status_code = status_code
        self.status_text = status_text
        self.url = url


class NotActiveError(AdoPrHelperError):
    """Raised when the pull request is completed or abandoned."""

    def __init__(self, status: str) -> None:
        super().__init__("PR_NOT_ACTIVE", "The PR is not active.")
        self.status = status


class MergeConflictError(AdoPrHelperError):
    """Raised when the pull request cannot merge cleanly."""

    def __init__(self, merge_status: str) -> None:
        super().__init__("MERGE_CONFLICT", "The PR has merge conflict.")
        self.merge_status = merge_status


class BranchResolutionError(AdoPrHelperError):
    """Raised when source or target branch cannot be derived from PR metadata."""

    def __init__(self) -> None:
        super().__init__(
            "BRANCH_RESOLUTION_FAILED",
            "Could not determine source or target branch from PR details.",
        )


class BlobFetchError(AdoPrHelperError):
    """Raised when a single blob cannot be downloaded.

    The patch synthesizer catches this per item; it never aborts a download.
    """

    def __init__(self, object_id: str, reason: str) -> None:
        super().__init__("BLOB_FETCH_FAILED", f"Failed to download blob {object_id}: {reason}")
        self.object_id = object_id
        self.reason = reason
