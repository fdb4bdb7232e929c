"""Snapshot store interface (port) shared by the refresher and readers."""
from abc import ABC, abstractmethod
from typing import Optional
from registry_lister.domain.models import Snapshot


class ISnapshotStore(ABC):
    """Single-writer, many-reader holder of the current Snapshot."""

    @abstractmethod
    def publish(self, snapshot: Snapshot) -> None:
        """Replace the current snapshot in one step."""
        pass

    @abstractmethod
    def current(self) -> Optional[Snapshot]:
        """Return the current snapshot, or None before the first refresh."""
        pass
