"""Shared fakes implementing the domain ports."""
from datetime import datetime, timezone
from typing import Dict, List, Optional
import pytest
from registry_lister.domain.errors import AuthError, RegistryError
from registry_lister.domain.models import RepositoryInfo
from registry_lister.domain.registry_interface import IRegistryClient
from registry_lister.domain.token_interface import ITokenProvider
from registry_lister.infrastructure.snapshot_store import InMemorySnapshotStore


class FakeTokenProvider(ITokenProvider):
    """Hands out `token-<n>` and records the scopes it was asked for."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requests: List[tuple] = []

    async def acquire(self, *scopes: str) -> str:
        self.requests.append(scopes)
        if self.fail:
            raise AuthError("token service unavailable")
        return f"token-{len(self.requests)}"


class FakeRegistryClient(IRegistryClient):
    """In-memory registry with injectable failures."""

    def __init__(
        self,
        catalog: Optional[List[str]] = None,
        tags: Optional[Dict[str, List[str]]] = None,
        catalog_error: Optional[RegistryError] = None,
        tag_errors: Optional[Dict[str, RegistryError]] = None
    ):
        self.catalog = catalog or []
        self.tags = tags or {}
        self.catalog_error = catalog_error
        self.tag_errors = tag_errors or {}
        self.tag_requests: List[str] = []
        self.closed = False

    async def fetch_catalog(self) -> List[str]:
        if self.catalog_error is not None:
            raise self.catalog_error
        return list(self.catalog)

    async def fetch_tags(self, name: str) -> RepositoryInfo:
        self.tag_requests.append(name)
        if name in self.tag_errors:
            raise self.tag_errors[name]
        return RepositoryInfo(name=name, tags=tuple(self.tags.get(name, [])))

    async def close(self) -> None:
        self.closed = True


FIXED_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def token_provider():
    return FakeTokenProvider()


@pytest.fixture
def store():
    return InMemorySnapshotStore()


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TIME
