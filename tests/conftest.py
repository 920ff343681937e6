from __future__ import annotations

import pytest

from tests._fixtures.fake_github import FakeFleet, FakeSearch, RouteTransport


@pytest.fixture
def fleet() -> FakeFleet:
    """Provide an empty in-memory fleet of repositories."""
    return FakeFleet()


@pytest.fixture
def search() -> FakeSearch:
    return FakeSearch()


@pytest.fixture
def transport() -> RouteTransport:
    """Provide a routing transport for GitHubClient tests."""
    return RouteTransport()
