"""Fleet-wide aggregation of repository references."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .dedup import reference_set
from .logging import get_logger
from .models import ActionReference, RepositoryFailure, RepositoryIdentity, SkippedFile
from .walker import RepositoryWalker


@dataclass
class AggregationReport:
    """Outcome of one aggregation run."""

    references: List[ActionReference] = field(default_factory=list)
    attempted: int = 0
    failures: List[RepositoryFailure] = field(default_factory=list)
    files_scanned: int = 0
    skipped_files: List[tuple[RepositoryIdentity, SkippedFile]] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def succeeded(self) -> int:
        return self.attempted - self.failed


class Aggregator:
    """Drives the walker over each repository and merges the results."""

    def __init__(self, walker: RepositoryWalker) -> None:
        self.walker = walker
        self.logger = get_logger("aggregator")

    def run(self, repositories: Iterable[RepositoryIdentity]) -> AggregationReport:
        """Process repositories sequentially; a failing repository never stops the run."""
        report = AggregationReport()
        found = reference_set()

        for repository in repositories:
            report.attempted += 1
            self.logger.info("Analyzing %s...", repository)
            try:
                scan = self.walker.scan(repository)
            except Exception as exc:
                message = str(exc) or type(exc).__name__
                self.logger.warning("Failed to analyze %s: %s", repository, message)
                report.failures.append(RepositoryFailure(repository=repository, message=message))
                continue

            added = found.update(scan.references)
            report.files_scanned += scan.files_scanned
            report.skipped_files.extend((repository, skipped) for skipped in scan.skipped)
            self.logger.debug(
                "%s: %d references, %d new across the fleet",
                repository,
                len(scan.references),
                added,
            )

        report.references = found.items()
        return report


__all__ = ["AggregationReport", "Aggregator"]
