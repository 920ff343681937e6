"""Tests for action_allowlist.github.client."""

from __future__ import annotations

from http.client import IncompleteRead
from urllib.parse import parse_qs, urlsplit

import pytest

from action_allowlist.errors import GitHubAPIError
from action_allowlist.github import client as client_module
from action_allowlist.github.client import (
    GitHubClient,
    GitHubRequest,
    GitHubResponse,
    urllib_transport,
)
from tests._fixtures.fake_github import RouteTransport


def test_requests_carry_auth_and_api_headers(transport: RouteTransport) -> None:
    transport.add("/repos/skills/hello", {"default_branch": "main"})
    client = GitHubClient("secret-token", transport=transport)

    payload = client.get_repository("skills", "hello")

    assert payload == {"default_branch": "main"}
    request = transport.requests[0]
    assert request.method == "GET"
    assert request.url == "https://api.github.com/repos/skills/hello"
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.headers["Accept"] == "application/vnd.github+json"
    assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_anonymous_client_sends_no_authorization(transport: RouteTransport) -> None:
    transport.add("/repos/skills/hello", {"default_branch": "main"})

    GitHubClient(transport=transport).get_repository("skills", "hello")

    assert "Authorization" not in transport.requests[0].headers


def test_error_status_raises_with_status_and_message(transport: RouteTransport) -> None:
    transport.add("/repos/skills/empty/git/trees/main", {"message": "Git Repository is empty."}, status=409)
    client = GitHubClient(transport=transport)

    with pytest.raises(GitHubAPIError) as excinfo:
        client.get_tree("skills", "empty", "main")

    assert excinfo.value.status == 409
    assert "Git Repository is empty." in str(excinfo.value)


def test_invalid_json_raises(transport: RouteTransport) -> None:
    transport.add("/repos/skills/hello", b"<html>oops</html>")

    with pytest.raises(GitHubAPIError):
        GitHubClient(transport=transport).get_repository("skills", "hello")


def test_tree_request_is_recursive(transport: RouteTransport) -> None:
    transport.add("/repos/skills/hello/git/trees/main", {"tree": [], "truncated": False})

    GitHubClient(transport=transport).get_tree("skills", "hello", "main")

    query = parse_qs(urlsplit(transport.requests[0].url).query)
    assert query == {"recursive": ["1"]}


def test_search_paginates_until_short_page(transport: RouteTransport) -> None:
    first_page = [{"full_name": f"skills/repo-{i}"} for i in range(100)]
    transport.add("/search/repositories#page=1", {"total_count": 102, "items": first_page})
    transport.add(
        "/search/repositories#page=2",
        {"total_count": 102, "items": [{"full_name": "skills/a"}, {"full_name": "skills/b"}]},
    )

    items = GitHubClient(transport=transport).search_repositories("org:skills topic:skills-course")

    assert len(items) == 102
    assert len(transport.requests) == 2
    query = parse_qs(urlsplit(transport.requests[0].url).query)
    assert query["q"] == ["org:skills topic:skills-course"]
    assert query["per_page"] == ["100"]


def test_search_stops_when_total_reached(transport: RouteTransport) -> None:
    page = [{"full_name": f"skills/repo-{i}"} for i in range(100)]
    transport.add("/search/repositories#page=1", {"total_count": 100, "items": page})

    items = GitHubClient(transport=transport).search_repositories("org:skills")

    assert len(items) == 100
    assert len(transport.requests) == 1


def test_search_stops_at_result_ceiling(transport: RouteTransport) -> None:
    for page in range(1, 12):
        items = [{"full_name": f"skills/repo-{page}-{i}"} for i in range(100)]
        transport.add(f"/search/repositories#page={page}", {"total_count": 5000, "items": items})

    items = GitHubClient(transport=transport).search_repositories("org:skills")

    assert len(items) == 1000
    assert len(transport.requests) == 10
    last_query = parse_qs(urlsplit(transport.requests[-1].url).query)
    assert last_query["page"] == ["10"]


def test_api_url_trailing_slash_is_trimmed(transport: RouteTransport) -> None:
    transport.add("/api/v3/repos/skills/hello", {"default_branch": "main"})

    client = GitHubClient(api_url="https://ghe.example.com/api/v3/", transport=transport)
    client.get_repository("skills", "hello")

    assert transport.requests[0].url == "https://ghe.example.com/api/v3/repos/skills/hello"


def test_transport_connection_error_becomes_api_error() -> None:
    def reset(request: GitHubRequest) -> GitHubResponse:
        raise ConnectionResetError(104, "Connection reset by peer")

    with pytest.raises(GitHubAPIError) as excinfo:
        GitHubClient(transport=reset).get_repository("skills", "hello")

    assert excinfo.value.status is None
    assert "Connection reset by peer" in str(excinfo.value)


class _UnreadableResponse:
    status = 200

    def __enter__(self) -> "_UnreadableResponse":
        return self

    def __exit__(self, *exc_info: object) -> bool:
        return False

    def read(self) -> bytes:
        raise IncompleteRead(b"partial")


def test_urllib_transport_wraps_truncated_body(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(client_module, "urlopen", lambda request, timeout: _UnreadableResponse())
    request = GitHubRequest(method="GET", url="https://api.github.com/repos/skills/hello")

    with pytest.raises(GitHubAPIError) as excinfo:
        urllib_transport(request)

    assert excinfo.value.status is None
    assert excinfo.value.url == request.url


def test_urllib_transport_wraps_connection_reset(monkeypatch: pytest.MonkeyPatch) -> None:
    def reset(request: object, timeout: float) -> object:
        raise ConnectionResetError(104, "Connection reset by peer")

    monkeypatch.setattr(client_module, "urlopen", reset)

    with pytest.raises(GitHubAPIError):
        urllib_transport(GitHubRequest(method="GET", url="https://api.github.com/rate_limit"))
