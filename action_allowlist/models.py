"""Core data models shared across the allowlist pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

WILDCARD_REF = "*"


def compose_reference(owner: str, repo: str, path: str, ref: str) -> str:
    """Return the canonical `owner/repo[/path]@ref` string."""
    location = f"{owner}/{repo}/{path}" if path else f"{owner}/{repo}"
    return f"{location}@{ref}"


@dataclass(frozen=True)
class ActionReference:
    """A pointer to an external action or reusable workflow.

    `full` is the deduplication key; `path` is empty for references to the
    repository root.
    """

    full: str
    owner: str
    repo: str
    path: str
    ref: str

    @classmethod
    def from_parts(cls, owner: str, repo: str, path: str, ref: str) -> "ActionReference":
        return cls(
            full=compose_reference(owner, repo, path, ref),
            owner=owner,
            repo=repo,
            path=path,
            ref=ref,
        )

    @property
    def wildcard(self) -> str:
        """Version-agnostic form used by the simple allowlist."""
        return compose_reference(self.owner, self.repo, self.path, WILDCARD_REF)


@dataclass(frozen=True)
class FileDescriptor:
    """A repository file plus the blob id used to fetch its text."""

    path: str
    content_id: str


@dataclass(frozen=True)
class RepositoryIdentity:
    """Owner and name of a repository returned by discovery."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "RepositoryIdentity":
        text = (value or "").strip()
        parts = text.split("/")
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise ValueError(f"Repository must be in the form <owner/name>: {value!r}")
        return cls(owner=parts[0].strip(), name=parts[1].strip())

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def matches(self, other: "RepositoryIdentity") -> bool:
        """Compare identities the way GitHub does (case-insensitive)."""
        return self.full_name.lower() == other.full_name.lower()

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class SkippedFile:
    """A file the walker could not read."""

    path: str
    reason: str


@dataclass
class RepositoryScan:
    """Per-repository result of a walk."""

    repository: RepositoryIdentity
    references: List[ActionReference] = field(default_factory=list)
    files_scanned: int = 0
    skipped: List[SkippedFile] = field(default_factory=list)


@dataclass(frozen=True)
class RepositoryFailure:
    """A repository whose processing failed; the run continued without it."""

    repository: RepositoryIdentity
    message: str
