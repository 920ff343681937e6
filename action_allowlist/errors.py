"""Error types raised by the allowlist pipeline."""

from __future__ import annotations

from typing import Optional


class AllowlistError(RuntimeError):
    """Base class for allowlist pipeline failures."""


class ConfigError(AllowlistError):
    """Raised when configuration is missing or cannot be parsed."""


class DiscoveryError(AllowlistError):
    """Raised when the repository search fails; aborts the run."""


class GitHubAPIError(AllowlistError):
    """Raised for non-success responses or transport failures from the GitHub API."""

    def __init__(self, message: str, *, status: Optional[int] = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url

    @property
    def not_found(self) -> bool:
        return self.status == 404


class FileReadFailure(AllowlistError):
    """Raised when a single file's text cannot be fetched or decoded."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.reason = message
