"""adopr-helper type definitions.

This module exports all data model types used by the package.
"""

from adopr_helper.types.artifacts import ArtifactSet, DownloadResult
from adopr_helper.types.projects import Project, Repo
from adopr_helper.types.pulls import (
    BranchPair,
    ChangedItem,
    ChangeType,
    FilePatch,
    MergeStatus,
    ObjectKind,
    PrIdentity,
    PrMetadata,
    PrStatus,
)

__all__ = [
    # Pull request types
    "PrIdentity",
    "PrMetadata",
    "PrStatus",
    "MergeStatus",
    "BranchPair",
    "ChangedItem",
    "ChangeType",
    "ObjectKind",
    "FilePatch",
    # Project types
    "Project",
    "Repo",
    # Download types
    "ArtifactSet",
    "DownloadResult",
]
