"""GitHub REST collaborators."""

from __future__ import annotations

from .client import GitHubClient, GitHubRequest, GitHubResponse, urllib_transport
from .contents import RepositoryContents

__all__ = [
    "GitHubClient",
    "GitHubRequest",
    "GitHubResponse",
    "RepositoryContents",
    "urllib_transport",
]
