"""Repository discovery via GitHub topic search."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Protocol, Sequence

from .dedup import OrderedKeySet
from .errors import DiscoveryError, GitHubAPIError
from .logging import get_logger
from .models import RepositoryIdentity

DEFAULT_ORGANIZATIONS: tuple[str, ...] = ("skills", "skills-dev")
DEFAULT_TOPIC = "skills-course"


class SearchSource(Protocol):
    def search_repositories(self, query: str) -> List[Dict[str, Any]]:
        ...


def build_search_query(organization: str, topic: str, exclude_archived: bool = True) -> str:
    terms = [f"org:{organization}", f"topic:{topic}"]
    if exclude_archived:
        terms.append("archived:false")
    return " ".join(terms)


def filter_excluded(
    repositories: Iterable[RepositoryIdentity],
    exclusions: Iterable[RepositoryIdentity],
) -> List[RepositoryIdentity]:
    """Drop repositories named in `exclusions` (case-insensitive)."""
    excluded = list(exclusions)
    return [repo for repo in repositories if not any(repo.matches(item) for item in excluded)]


def _identity_key(repository: RepositoryIdentity) -> str:
    return repository.full_name.lower()


def _identity_from_item(item: Dict[str, Any]) -> RepositoryIdentity:
    full_name = item.get("full_name")
    if isinstance(full_name, str) and full_name:
        return RepositoryIdentity.parse(full_name)
    owner = item.get("owner")
    login = owner.get("login") if isinstance(owner, dict) else None
    name = item.get("name")
    if isinstance(login, str) and login and isinstance(name, str) and name:
        return RepositoryIdentity(owner=login, name=name)
    raise ValueError("Search result is missing full_name")


class RepositoryDiscovery:
    """Finds candidate repositories and applies the configured exclusion list."""

    def __init__(
        self,
        source: SearchSource,
        *,
        exclusions: Sequence[RepositoryIdentity] = (),
    ) -> None:
        self.source = source
        self.exclusions = list(exclusions)
        self.logger = get_logger("discovery")

    def search(
        self, organization: str, topic: str, exclude_archived: bool = True
    ) -> List[RepositoryIdentity]:
        """Return repositories in `organization` tagged with `topic`."""
        query = build_search_query(organization, topic, exclude_archived)
        self.logger.debug("Searching repositories: %s", query)
        try:
            items = self.source.search_repositories(query)
            return [_identity_from_item(item) for item in items]
        except (GitHubAPIError, ValueError) as exc:
            raise DiscoveryError(f"Repository search failed for {organization}: {exc}") from exc

    def discover(
        self,
        organizations: Sequence[str] = DEFAULT_ORGANIZATIONS,
        topic: str = DEFAULT_TOPIC,
        exclude_archived: bool = True,
    ) -> List[RepositoryIdentity]:
        """Search every organization, deduplicate, then drop excluded repositories."""
        found: OrderedKeySet[RepositoryIdentity] = OrderedKeySet(_identity_key)
        for organization in organizations:
            found.update(self.search(organization, topic, exclude_archived))

        eligible = filter_excluded(found, self.exclusions)
        self.logger.info(
            "Discovered %d repositories (%d excluded)",
            len(eligible),
            len(found) - len(eligible),
        )
        return eligible


__all__ = [
    "DEFAULT_ORGANIZATIONS",
    "DEFAULT_TOPIC",
    "RepositoryDiscovery",
    "SearchSource",
    "build_search_query",
    "filter_excluded",
]
