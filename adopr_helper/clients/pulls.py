"""Pull requests resource client."""

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from adopr_helper.exceptions import BranchResolutionError, MergeConflictError, NotActiveError
from adopr_helper.types.pulls import (
    BranchPair,
    ChangedItem,
    ChangeType,
    MergeStatus,
    ObjectKind,
    PrIdentity,
    PrMetadata,
    PrStatus,
)

if TYPE_CHECKING:
    from adopr_helper.transport import AsyncHTTPTransport

BRANCH_REF_PREFIX = "refs/heads/"
MAX_DIFF_CHANGES = 2000


def repository_path(identity: PrIdentity) -> str:
    """API path of the repository a pull request belongs to."""
    return (
        f"/{quote(identity.organization, safe='')}"
        f"/{quote(identity.project, safe='')}"
        f"/_apis/git/repositories/{quote(identity.repository, safe='')}"
    )


def strip_branch_ref(ref: str | None) -> str:
    """Turn ``refs/heads/feature/x`` into ``feature/x``."""
    if not ref:
        return ""
    if ref.startswith(BRANCH_REF_PREFIX):
        return ref[len(BRANCH_REF_PREFIX):]
    return ref


def resolve_branches(metadata: PrMetadata) -> BranchPair:
    """
    Derive source and target branch names from PR metadata.

    Raises:
        BranchResolutionError: If either branch name is empty after stripping
    """
    source = strip_branch_ref(metadata.source_ref)
    target = strip_branch_ref(metadata.target_ref)

    if not source.strip() or not target.strip():
        raise BranchResolutionError()

    return BranchPair(source=source, target=target)


class AsyncPullsClient:
    """Async client for pull request metadata and change enumeration."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the pulls client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def get_metadata(self, identity: PrIdentity) -> PrMetadata:
        """
        Get status, merge status and branch refs of a pull request.

        Raises:
            RemoteError: If the service answers with an error status
        """
        data = await self.transport.get_json(
            f"{repository_path(identity)}/pullRequests/{quote(identity.pull_request_id, safe='')}"
        )
        return self._parse_metadata(data)

    async def validate(self, identity: PrIdentity) -> PrMetadata:
        """
        Fetch PR metadata and check that the PR can be downloaded.

        The PR must be active, then must merge cleanly, then must have
        resolvable source and target branches, in that order.

        Returns:
            PrMetadata of an eligible pull request

        Raises:
            RemoteError: If the metadata request fails
            NotActiveError: If the PR is completed, abandoned, ...
            MergeConflictError: If the merge status is not "succeeded"
            BranchResolutionError: If a branch ref is missing
        """
        metadata = await self.get_metadata(identity)

        if metadata.status is not PrStatus.ACTIVE:
            raise NotActiveError(metadata.raw_status or metadata.status.value)

        if metadata.merge_status is not MergeStatus.SUCCEEDED:
            raise MergeConflictError(metadata.raw_merge_status or metadata.merge_status.value)

        resolve_branches(metadata)
        return metadata

    async def list_changes(
        self,
        identity: PrIdentity,
        metadata: PrMetadata,
    ) -> list[ChangedItem]:
        """
        List items changed between the target and source branches.

        At most ``MAX_DIFF_CHANGES`` items are returned; the service
        truncates larger diffs.

        Raises:
            BranchResolutionError: If a branch ref is missing
            RemoteError: If the service answers with an error status
        """
        branches = resolve_branches(metadata)

        data = await self.transport.get_json(
            f"{repository_path(identity)}/diffs/commits",
            params={
                "baseVersion": branches.target,
                "targetVersion": branches.source,
                "$top": MAX_DIFF_CHANGES,
            },
        )

        return [self._parse_change(change) for change in data.get("changes") or []]

    def _parse_metadata(self, data: dict[str, Any]) -> PrMetadata:
        raw_status = data.get("status") or ""
        raw_merge_status = data.get("mergeStatus") or ""
        return PrMetadata(
            status=PrStatus(raw_status),
            merge_status=MergeStatus(raw_merge_status),
            source_ref=data.get("sourceRefName") or "",
            target_ref=data.get("targetRefName") or "",
            raw_status=raw_status,
            raw_merge_status=raw_merge_status,
        )

    def _parse_change(self, change: dict[str, Any]) -> ChangedItem:
        item = change.get("item") or {}
        return ChangedItem(
            path=item.get("path") or "",
            change_type=ChangeType(change.get("changeType") or ""),
            object_kind=ObjectKind(item.get("gitObjectType") or ""),
            new_content_id=item.get("objectId") or None,
            old_content_id=item.get("originalObjectId") or None,
            is_folder=bool(item.get("isFolder", False)),
        )
