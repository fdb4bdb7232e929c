"""In-memory holder for the current catalog snapshot."""
import logging
from typing import Optional
from registry_lister.domain.models import Snapshot
from registry_lister.domain.snapshot_interface import ISnapshotStore


logger = logging.getLogger(__name__)


class InMemorySnapshotStore(ISnapshotStore):
    """Keeps exactly one Snapshot reference.

    Publishing rebinds a single attribute, so readers either get the old
    snapshot or the new one. Snapshots are immutable, which lets readers
    use them without locking.
    """

    def __init__(self, initial: Optional[Snapshot] = None):
        self._current = initial

    def publish(self, snapshot: Snapshot) -> None:
        self._current = snapshot
        logger.debug(f"Published snapshot with {len(snapshot.repositories)} repositories")

    def current(self) -> Optional[Snapshot]:
        return self._current
