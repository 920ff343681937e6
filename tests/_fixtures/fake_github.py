"""In-memory stand-ins for the GitHub collaborators used in tests."""

from __future__ import annotations

import base64
import json
import textwrap
from typing import Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from action_allowlist.errors import FileReadFailure
from action_allowlist.github.client import GitHubRequest, GitHubResponse
from action_allowlist.models import FileDescriptor, RepositoryIdentity


class FakeFleet:
    """Listing and content source backed by dictionaries of file text."""

    def __init__(self) -> None:
        self._files: Dict[str, Dict[str, str]] = {}
        self._listing_errors: Dict[str, Exception] = {}
        self._unreadable: set[Tuple[str, str]] = set()
        self.fetched: List[str] = []

    def add_repo(self, full_name: str, files: Mapping[str, str]) -> RepositoryIdentity:
        self._files[full_name] = {
            path: textwrap.dedent(content).lstrip("\n") for path, content in files.items()
        }
        return RepositoryIdentity.parse(full_name)

    def fail_listing(self, full_name: str, exc: Exception) -> RepositoryIdentity:
        self._listing_errors[full_name] = exc
        return RepositoryIdentity.parse(full_name)

    def fail_content(self, full_name: str, path: str) -> None:
        self._unreadable.add((full_name, path))

    def list_files(self, repository: RepositoryIdentity) -> List[FileDescriptor]:
        error = self._listing_errors.get(repository.full_name)
        if error is not None:
            raise error
        files = self._files.get(repository.full_name, {})
        return [
            FileDescriptor(path=path, content_id=f"{repository.full_name}:{path}")
            for path in files
        ]

    def get_content(self, repository: RepositoryIdentity, content_id: str) -> str:
        self.fetched.append(content_id)
        full_name, path = content_id.split(":", 1)
        if (full_name, path) in self._unreadable:
            raise FileReadFailure(path, "simulated read failure")
        return self._files[full_name][path]


class FakeSearch:
    """Search source returning canned items per organization."""

    def __init__(self, items_by_org: Mapping[str, List[str]] | None = None) -> None:
        self.items_by_org = {org: list(names) for org, names in (items_by_org or {}).items()}
        self.queries: List[str] = []
        self.error: Optional[Exception] = None

    def search_repositories(self, query: str) -> List[Dict[str, object]]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        org = next(term[4:] for term in query.split() if term.startswith("org:"))
        return [{"full_name": name} for name in self.items_by_org.get(org, [])]


class RouteTransport:
    """Transport that answers GitHub requests from a path -> (status, payload) table."""

    def __init__(self, routes: Mapping[str, Tuple[int, object]] | None = None) -> None:
        self.routes: Dict[str, Tuple[int, object]] = dict(routes or {})
        self.requests: List[GitHubRequest] = []

    def add(self, path: str, payload: object, status: int = 200) -> None:
        self.routes[path] = (status, payload)

    def __call__(self, request: GitHubRequest) -> GitHubResponse:
        self.requests.append(request)
        parts = urlsplit(request.url)
        key = parts.path
        page = parse_qs(parts.query).get("page")
        if page and f"{key}#page={page[0]}" in self.routes:
            key = f"{key}#page={page[0]}"
        if key not in self.routes:
            return GitHubResponse(status=404, body=json.dumps({"message": "Not Found"}).encode())
        status, payload = self.routes[key]
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        return GitHubResponse(status=status, body=body)


def blob_payload(text: str) -> Dict[str, object]:
    encoded = base64.encodebytes(text.encode("utf-8")).decode("ascii")
    return {"content": encoded, "encoding": "base64"}


__all__ = ["FakeFleet", "FakeSearch", "RouteTransport", "blob_payload"]
