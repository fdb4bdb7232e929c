"""Token provider interface (port) for registry authentication."""
from abc import ABC, abstractmethod


class ITokenProvider(ABC):
    """Abstract capability that mints bearer tokens for registry scopes."""

    @abstractmethod
    async def acquire(self, *scopes: str) -> str:
        """Obtain a bearer token.

        Args:
            scopes: Zero or more scope strings (`repository:<name>:pull`).
                No scopes means catalog-level access.

        Returns:
            The bearer token

        Raises:
            AuthError: When no token can be issued
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the provider."""
        pass
