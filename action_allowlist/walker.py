"""Per-repository traversal: list files, fetch eligible ones, extract references."""

from __future__ import annotations

from typing import List, Protocol, Sequence, Tuple

from .dedup import reference_set
from .errors import FileReadFailure
from .extractor import ReferenceExtractor
from .logging import get_logger
from .models import (
    ActionReference,
    FileDescriptor,
    RepositoryIdentity,
    RepositoryScan,
    SkippedFile,
)

DEFAULT_PATH_PREFIXES: Tuple[str, ...] = (".github/workflows/", ".github/steps/")


class ListingSource(Protocol):
    """Returns every file of a repository in one flattened listing.

    "Not found" and "empty repository" are reported as an empty list.
    """

    def list_files(self, repository: RepositoryIdentity) -> List[FileDescriptor]:
        ...


class ContentSource(Protocol):
    """Returns the decoded text of one file; raises FileReadFailure on failure."""

    def get_content(self, repository: RepositoryIdentity, content_id: str) -> str:
        ...


def normalize_prefixes(prefixes: Sequence[str]) -> Tuple[str, ...]:
    """Strip leading `./` or `/` and make each prefix a directory (`.../`)."""
    normalized: List[str] = []
    for raw in prefixes:
        prefix = (raw or "").strip().replace("\\", "/")
        while prefix.startswith("./"):
            prefix = prefix[2:]
        prefix = prefix.lstrip("/")
        if not prefix:
            continue
        if not prefix.endswith("/"):
            prefix += "/"
        if prefix not in normalized:
            normalized.append(prefix)
    return tuple(normalized)


class RepositoryWalker:
    """Collects the deduplicated references used by one repository."""

    def __init__(
        self,
        listing: ListingSource,
        content: ContentSource,
        *,
        extractor: ReferenceExtractor | None = None,
        path_prefixes: Sequence[str] = DEFAULT_PATH_PREFIXES,
    ) -> None:
        self.listing = listing
        self.content = content
        self.extractor = extractor or ReferenceExtractor()
        self.path_prefixes = normalize_prefixes(path_prefixes)
        if not self.path_prefixes:
            raise ValueError("At least one path prefix is required")
        self.logger = get_logger("walker")

    def eligible_files(self, repository: RepositoryIdentity) -> List[FileDescriptor]:
        """Return listed files located under one of the configured prefixes."""
        files = self.listing.list_files(repository)
        eligible = [file for file in files if file.path.startswith(self.path_prefixes)]
        self.logger.debug(
            "%s: %d of %d listed files are eligible",
            repository,
            len(eligible),
            len(files),
        )
        return eligible

    def scan(self, repository: RepositoryIdentity) -> RepositoryScan:
        """Walk the repository and report references plus skipped files.

        Listing errors other than "not found"/"empty" propagate to the caller.
        """
        result = RepositoryScan(repository=repository)
        found = reference_set()

        for file in self.eligible_files(repository):
            try:
                text = self.content.get_content(repository, file.content_id)
            except FileReadFailure as exc:
                self.logger.warning("Skipping %s in %s: %s", file.path, repository, exc.reason)
                result.skipped.append(SkippedFile(path=file.path, reason=exc.reason))
                continue
            result.files_scanned += 1
            added = found.update(self.extractor.extract(text))
            self.logger.debug("%s: %s contributed %d new references", repository, file.path, added)

        result.references = found.items()
        return result

    def walk(self, repository: RepositoryIdentity) -> List[ActionReference]:
        """Return the deduplicated references found under the configured prefixes."""
        return self.scan(repository).references


__all__ = [
    "ContentSource",
    "DEFAULT_PATH_PREFIXES",
    "ListingSource",
    "RepositoryWalker",
    "normalize_prefixes",
]
