"""
Fake Azure DevOps service for testing.

Serves the REST endpoints adopr-helper uses from in-memory data through an
``httpx.MockTransport`` and records every request, so tests can assert
which calls were (not) made.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

import httpx

_PR_PATH = re.compile(r"^/(?P<org>[^/]+)/(?P<project>[^/]+)/_apis/git/repositories/(?P<repo>[^/]+)/pullRequests/(?P<pr_id>[^/]+)$")
_DIFFS_PATH = re.compile(r"^/(?P<org>[^/]+)/(?P<project>[^/]+)/_apis/git/repositories/(?P<repo>[^/]+)/diffs/commits$")
_BLOB_PATH = re.compile(r"^/(?P<org>[^/]+)/(?P<project>[^/]+)/_apis/git/repositories/(?P<repo>[^/]+)/blobs/(?P<object_id>[^/]+)$")
_PROJECTS_PATH = re.compile(r"^/(?P<org>[^/]+)/_apis/projects$")
_REPOS_PATH = re.compile(r"^/(?P<org>[^/]+)/(?P<project>[^/]+)/_apis/git/repositories$")


@dataclass
class RecordedRequest:
    """Record of a request received by the fake service."""

    method: str
    path: str
    params: dict[str, str]
    headers: dict[str, str]

    @property
    def kind(self) -> str:
        """Endpoint kind: "pull_request", "diffs", "blob", "projects", "repositories"."""
        for kind, pattern in _ROUTES:
            if pattern.match(self.path):
                return kind
        return "unknown"


_ROUTES = (
    ("pull_request", _PR_PATH),
    ("diffs", _DIFFS_PATH),
    ("blob", _BLOB_PATH),
    ("projects", _PROJECTS_PATH),
    ("repositories", _REPOS_PATH),
)


@dataclass
class FakeAzureDevOps:
    """
    In-memory Azure DevOps.

    Example:
        ```python
        fake = FakeAzureDevOps()
        fake.add_pull_request("42", source="refs/heads/feature", target="refs/heads/main")
        fake.add_change("/src/a.ts", "edit", object_id="new1", original_object_id="old1")
        fake.blobs.update({"old1": "foo", "new1": "bar"})
        client = AsyncAdoClient(token="t", transport=fake.transport())
        ```
    """

    pull_requests: dict[str, dict[str, Any]] = field(default_factory=dict)
    changes: list[dict[str, Any]] = field(default_factory=list)
    blobs: dict[str, str] = field(default_factory=dict)
    blob_errors: dict[str, int] = field(default_factory=dict)
    projects: list[dict[str, Any]] = field(default_factory=list)
    repositories: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    failures: dict[str, int] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)

    def add_pull_request(
        self,
        pr_id: str,
        status: str = "active",
        merge_status: str = "succeeded",
        source: str | None = "refs/heads/feature",
        target: str | None = "refs/heads/main",
    ) -> None:
        """Register pull request metadata."""
        self.pull_requests[pr_id] = {
            "pullRequestId": int(pr_id) if pr_id.isdigit() else pr_id,
            "status": status,
            "mergeStatus": merge_status,
            "sourceRefName": source,
            "targetRefName": target,
        }

    def add_change(
        self,
        path: str,
        change_type: str = "edit",
        object_id: str | None = None,
        original_object_id: str | None = None,
        git_object_type: str = "blob",
        is_folder: bool = False,
    ) -> None:
        """Append an entry to the diff enumeration."""
        item: dict[str, Any] = {"path": path, "gitObjectType": git_object_type}
        if object_id is not None:
            item["objectId"] = object_id
        if original_object_id is not None:
            item["originalObjectId"] = original_object_id
        if is_folder:
            item["isFolder"] = True
        self.changes.append({"item": item, "changeType": change_type})

    def fail(self, kind: str, status_code: int) -> None:
        """Make every request of an endpoint kind answer with status_code."""
        self.failures[kind] = status_code

    def requests_of(self, kind: str) -> list[RecordedRequest]:
        return [request for request in self.requests if request.kind == kind]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = unquote(request.url.path)
        recorded = RecordedRequest(
            method=request.method,
            path=path,
            params=dict(request.url.params),
            headers=dict(request.headers),
        )
        self.requests.append(recorded)

        if recorded.kind in self.failures:
            return httpx.Response(self.failures[recorded.kind])

        match = _PR_PATH.match(path)
        if match:
            pr = self.pull_requests.get(match["pr_id"])
            if pr is None:
                return httpx.Response(404)
            return _json(pr)

        if _DIFFS_PATH.match(path):
            top = int(recorded.params.get("$top", len(self.changes)))
            return _json({"changes": self.changes[:top]})

        match = _BLOB_PATH.match(path)
        if match:
            object_id = match["object_id"]
            if object_id in self.blob_errors:
                return httpx.Response(self.blob_errors[object_id])
            if object_id not in self.blobs:
                return httpx.Response(404)
            return httpx.Response(200, text=self.blobs[object_id])

        if _PROJECTS_PATH.match(path):
            return _json({"count": len(self.projects), "value": self.projects})

        match = _REPOS_PATH.match(path)
        if match:
            repos = self.repositories.get(match["project"])
            if repos is None:
                return _json({})
            return _json({"count": len(repos), "value": repos})

        return httpx.Response(404)


def _json(data: dict[str, Any]) -> httpx.Response:
    return httpx.Response(
        200,
        content=json.dumps(data).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )
