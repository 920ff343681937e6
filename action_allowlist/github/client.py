"""Minimal GitHub REST client used for discovery, tree listing and blob fetch."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from http.client import HTTPException
from typing import Any, Callable, Dict, List, Mapping, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from ..errors import GitHubAPIError
from ..logging import get_logger

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
SEARCH_PAGE_SIZE = 100
# GitHub search never returns more than 1000 results for one query.
SEARCH_RESULT_LIMIT = 1000


@dataclass
class GitHubRequest:
    """A single HTTP request issued by the client."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0


@dataclass
class GitHubResponse:
    status: int
    body: bytes


Transport = Callable[[GitHubRequest], GitHubResponse]


def _error_message(body: bytes, fallback: str) -> str:
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        text = body.decode("utf-8", errors="ignore").strip()
        return text or fallback
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return fallback


def urllib_transport(request: GitHubRequest) -> GitHubResponse:
    """Send the request with urllib; HTTP errors come back as responses."""
    http_request = Request(request.url, headers=request.headers, method=request.method)
    try:
        with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
            return GitHubResponse(status=response.status, body=response.read())
    except HTTPError as exc:
        body = exc.read() if hasattr(exc, "read") else b""
        return GitHubResponse(status=exc.code, body=body or b"")
    except URLError as exc:
        raise GitHubAPIError(
            f"GitHub request failed: {exc.reason}", url=request.url
        ) from exc
    except TimeoutError as exc:
        raise GitHubAPIError(
            f"GitHub request timed out after {request.timeout}s", url=request.url
        ) from exc
    except (OSError, HTTPException) as exc:
        # Connection resets and truncated bodies surface while reading.
        raise GitHubAPIError(
            f"GitHub request failed: {str(exc) or type(exc).__name__}", url=request.url
        ) from exc


class GitHubClient:
    """Issues authenticated JSON requests against the GitHub REST API."""

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        api_url: Optional[str] = None,
        request_timeout: float = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.token = token
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")
        self.request_timeout = request_timeout
        self._transport = transport or urllib_transport
        self.logger = get_logger("github")

    # ------------------------------------------------------------------
    # Endpoints

    def search_repositories(self, query: str) -> List[Dict[str, Any]]:
        """Return every repository item matching a search query."""
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            payload = self.get_json(
                "/search/repositories",
                params={"q": query, "per_page": SEARCH_PAGE_SIZE, "page": page},
            )
            if not isinstance(payload, dict) or not isinstance(payload.get("items"), list):
                raise GitHubAPIError("Unexpected JSON shape from repository search")
            batch = [item for item in payload["items"] if isinstance(item, dict)]
            items.extend(batch)

            total = payload.get("total_count")
            limit = min(total, SEARCH_RESULT_LIMIT) if isinstance(total, int) else SEARCH_RESULT_LIMIT
            if len(payload["items"]) < SEARCH_PAGE_SIZE or len(items) >= limit:
                return items
            page += 1

    def get_repository(self, owner: str, name: str) -> Dict[str, Any]:
        payload = self.get_json(f"/repos/{_segment(owner)}/{_segment(name)}")
        if not isinstance(payload, dict):
            raise GitHubAPIError("Unexpected JSON shape from repository API")
        return payload

    def get_tree(
        self, owner: str, name: str, ref: str, *, recursive: bool = True
    ) -> Dict[str, Any]:
        params = {"recursive": "1"} if recursive else None
        payload = self.get_json(
            f"/repos/{_segment(owner)}/{_segment(name)}/git/trees/{_segment(ref)}",
            params=params,
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("tree"), list):
            raise GitHubAPIError("Unexpected JSON shape from tree API")
        return payload

    def get_blob(self, owner: str, name: str, sha: str) -> Dict[str, Any]:
        payload = self.get_json(
            f"/repos/{_segment(owner)}/{_segment(name)}/git/blobs/{_segment(sha)}"
        )
        if not isinstance(payload, dict):
            raise GitHubAPIError("Unexpected JSON shape from blob API")
        return payload

    # ------------------------------------------------------------------
    # Helpers

    def get_json(self, path: str, *, params: Mapping[str, object] | None = None) -> Any:
        url = f"{self.api_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        request = GitHubRequest(
            method="GET",
            url=url,
            headers=self._headers(),
            timeout=self.request_timeout,
        )
        self.logger.debug("GET %s", url)
        try:
            response = self._transport(request)
        except (OSError, HTTPException) as exc:
            raise GitHubAPIError(
                f"GitHub request failed for {path}: {str(exc) or type(exc).__name__}",
                url=url,
            ) from exc
        if not 200 <= response.status < 300:
            message = _error_message(response.body, f"HTTP {response.status}")
            raise GitHubAPIError(
                f"GitHub API returned {response.status} for {path}: {message}",
                status=response.status,
                url=url,
            )
        try:
            return json.loads(response.body.decode("utf-8") or "null")
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise GitHubAPIError(
                f"GitHub API returned invalid JSON for {path}",
                status=response.status,
                url=url,
            ) from exc

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": "action-allowlist",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


def _segment(value: str) -> str:
    return quote(value, safe="")


__all__ = [
    "DEFAULT_API_URL",
    "GitHubClient",
    "GitHubRequest",
    "GitHubResponse",
    "Transport",
    "urllib_transport",
]
