"""Pipeline orchestration: discover, walk, aggregate, synthesize, write."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from .aggregator import AggregationReport, Aggregator
from .artifacts import write_allowlists
from .config import AllowlistConfig
from .discovery import RepositoryDiscovery
from .github.client import GitHubClient
from .github.contents import RepositoryContents
from .logging import get_logger, log_lines
from .models import RepositoryIdentity
from .synthesizer import AllowlistSynthesizer, Allowlists
from .walker import RepositoryWalker


@dataclass
class RunOutcome:
    """Result of a generate run."""

    repositories: List[RepositoryIdentity]
    report: AggregationReport
    allowlists: Allowlists
    strict_path: Path
    simple_path: Path
    dry_run: bool = False


def format_summary(report: AggregationReport) -> str:
    """Render the end-of-run summary shown to users."""
    lines = [
        f"Repositories attempted: {report.attempted}",
        f"Repositories succeeded: {report.succeeded}",
        f"Repositories failed: {report.failed}",
    ]
    for failure in report.failures:
        lines.append(f"  - {failure.repository}: {failure.message}")
    lines.append(f"Files scanned: {report.files_scanned}")
    if report.skipped_files:
        lines.append(f"Files skipped: {len(report.skipped_files)}")
        for repository, skipped in report.skipped_files:
            lines.append(f"  - {repository}:{skipped.path}: {skipped.reason}")
    lines.append(f"Unique references found: {len(report.references)}")
    return "\n".join(lines)


class Orchestrator:
    """Coordinates a full allowlist generation run."""

    def __init__(
        self,
        client: GitHubClient | None = None,
        *,
        discovery: RepositoryDiscovery | None = None,
        walker: RepositoryWalker | None = None,
        synthesizer: AllowlistSynthesizer | None = None,
    ) -> None:
        self._client = client
        self._discovery = discovery
        self._walker = walker
        self.synthesizer = synthesizer or AllowlistSynthesizer()
        self.logger = get_logger("orchestrator")

    def run(self, config: AllowlistConfig, *, dry_run: bool = False) -> RunOutcome:
        """Generate both allowlists; only configuration and discovery errors abort."""
        strict_path, simple_path = config.output.require_destinations()

        discovery = self._resolve_discovery(config)
        walker = self._resolve_walker(config)

        self.logger.info(
            "Starting allowlist run for %s (topic=%s)",
            ", ".join(config.discovery.organizations),
            config.discovery.topic,
        )
        repositories = discovery.discover(
            config.discovery.organizations,
            config.discovery.topic,
            config.discovery.exclude_archived,
        )

        report = Aggregator(walker).run(repositories)
        allowlists = self.synthesizer.synthesize(report.references)

        if dry_run:
            self.logger.info("Dry-run completed; allowlists not written")
        else:
            write_allowlists(allowlists, strict_path=strict_path, simple_path=simple_path)
            self.logger.info("Strict allowlist written to %s (%d entries)", strict_path, len(allowlists.strict))
            self.logger.info("Simple allowlist written to %s (%d entries)", simple_path, len(allowlists.simple))

        log_lines(self.logger, format_summary(report))

        return RunOutcome(
            repositories=repositories,
            report=report,
            allowlists=allowlists,
            strict_path=strict_path,
            simple_path=simple_path,
            dry_run=dry_run,
        )

    # ------------------------------------------------------------------
    # Helpers

    def _resolve_client(self, config: AllowlistConfig) -> GitHubClient:
        if self._client is None:
            self._client = GitHubClient(
                token=config.github.token,
                api_url=config.github.api_url,
                request_timeout=config.github.request_timeout,
            )
        return self._client

    def _resolve_discovery(self, config: AllowlistConfig) -> RepositoryDiscovery:
        if self._discovery is not None:
            return self._discovery
        return RepositoryDiscovery(
            self._resolve_client(config),
            exclusions=config.discovery.exclude_repositories,
        )

    def _resolve_walker(self, config: AllowlistConfig) -> RepositoryWalker:
        if self._walker is not None:
            return self._walker
        contents = RepositoryContents(self._resolve_client(config))
        return RepositoryWalker(contents, contents, path_prefixes=config.scan.path_prefixes)


__all__ = ["Orchestrator", "RunOutcome", "format_summary"]
