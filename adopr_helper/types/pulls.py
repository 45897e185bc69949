"""Pull request-related data models."""

from dataclasses import dataclass, field
from enum import Enum


class _LenientEnum(str, Enum):
    """String enum that maps unknown service values to ``OTHER``."""

    @classmethod
    def _missing_(cls, value: object) -> "_LenientEnum":
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return cls("other")


class PrStatus(_LenientEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    OTHER = "other"


class MergeStatus(_LenientEnum):
    SUCCEEDED = "succeeded"
    CONFLICTS = "conflicts"
    QUEUED = "queued"
    OTHER = "other"


class ChangeType(_LenientEnum):
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    RENAME = "rename"
    MOVE = "move"
    OTHER = "other"


class ObjectKind(_LenientEnum):
    BLOB = "blob"
    TREE = "tree"
    OTHER = "other"


@dataclass(frozen=True)
class PrIdentity:
    """Structured identity of a pull request, as parsed from its URL."""

    organization: str
    project: str
    repository: str
    pull_request_id: str


@dataclass
class PrMetadata:
    """Status and branch refs of a pull request."""

    status: PrStatus
    merge_status: MergeStatus
    source_ref: str
    target_ref: str
    raw_status: str = ""  # value as returned by the service
    raw_merge_status: str = ""


@dataclass
class BranchPair:
    """Branch names with the ``refs/heads/`` prefix stripped."""

    source: str
    target: str


@dataclass
class ChangedItem:
    """One entry of a commit diff enumeration."""

    path: str
    change_type: ChangeType
    object_kind: ObjectKind
    new_content_id: str | None = None
    old_content_id: str | None = None
    is_folder: bool = False

    @property
    def file_name(self) -> str:
        """Repository-relative path without the leading slash."""
        return self.path.lstrip("/")


@dataclass
class FilePatch:
    """Unified diff of one changed file plus its pre-change content."""

    file_name: str
    old_content: str | None
    unified_diff: str
    warnings: list[str] = field(default_factory=list)
