"""Registry API interface (port) for listing repositories and tags.

This is the anti-corruption layer that shields the domain from the
registry HTTP API specifics.
"""
from abc import ABC, abstractmethod
from typing import List
from registry_lister.domain.models import RepositoryInfo


class IRegistryClient(ABC):
    """Abstract interface for registry catalog operations."""

    @abstractmethod
    async def fetch_catalog(self) -> List[str]:
        """Fetch every repository name known to the registry.

        Raises:
            AuthError, TransportError, DecodeError
        """
        pass

    @abstractmethod
    async def fetch_tags(self, name: str) -> RepositoryInfo:
        """Fetch the tag list of one repository.

        Args:
            name: Repository name as returned by the catalog

        Raises:
            AuthError, TransportError, DecodeError
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
