"""Domain models representing the published registry catalog."""
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple


@dataclass(frozen=True)
class RepositoryInfo:
    """Immutable entity describing one public repository and its tags."""
    name: str
    tags: Tuple[str, ...] = ()

    @property
    def tag_summary(self) -> str:
        """Returns the tags as a single display string."""
        if not self.tags:
            return "No Tags"
        return ", ".join(self.tags)


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time listing of public repositories.

    Built in full by the refresher before it is published, so a reader
    holding a reference never sees it change.
    """
    repositories: Tuple[RepositoryInfo, ...]
    produced_at: datetime

    @property
    def is_empty(self) -> bool:
        return not self.repositories

    @property
    def repository_names(self) -> Tuple[str, ...]:
        return tuple(repo.name for repo in self.repositories)


@dataclass(frozen=True)
class ScopeRequest:
    """A resource scope presented to the token-issuing authority."""
    resource_type: str
    name: str
    actions: Tuple[str, ...] = ("pull",)

    @classmethod
    def for_pull(cls, name: str) -> 'ScopeRequest':
        """Returns the pull scope for a repository."""
        return cls(resource_type="repository", name=name, actions=("pull",))

    def to_scope(self) -> str:
        """Renders the scope in `type:name:actions` form."""
        return f"{self.resource_type}:{self.name}:{','.join(self.actions)}"

    @classmethod
    def parse(cls, scope: str) -> 'ScopeRequest':
        """Parses a `type:name:actions` scope string.

        The name may itself contain colons (e.g. a registry host with a
        port), so only the first and last separators are significant.

        Raises:
            ValueError: If the scope does not have all three parts
        """
        resource_type, sep, rest = scope.partition(":")
        name, sep2, actions = rest.rpartition(":")
        if not sep or not sep2 or not resource_type or not name:
            raise ValueError(f"Malformed scope: {scope!r}")
        return cls(
            resource_type=resource_type,
            name=name,
            actions=tuple(a for a in actions.split(",") if a)
        )


@dataclass(frozen=True)
class RefreshMetrics:
    """Metrics for a single refresh cycle."""
    repositories_listed: int
    repositories_skipped: int
    duration_seconds: float
    errors_encountered: int
    published: bool
