"""Refresh service building and publishing catalog snapshots."""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence
from registry_lister.domain.errors import RegistryError
from registry_lister.domain.models import RefreshMetrics, RepositoryInfo, ScopeRequest, Snapshot
from registry_lister.domain.registry_interface import IRegistryClient
from registry_lister.domain.scope import is_public
from registry_lister.domain.snapshot_interface import ISnapshotStore


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CatalogRefresher:
    """Application service for refreshing the public repository listing.

    Orchestrates the interaction between the registry API and the
    snapshot store. One call to `refresh` is one cycle: it either
    publishes a complete new snapshot or leaves the current one alone.
    """

    def __init__(
        self,
        registry_client: IRegistryClient,
        store: ISnapshotStore,
        public_prefixes: Sequence[str],
        tag_fetch_concurrency: int = 4,
        clock: Callable[[], datetime] = utc_now
    ):
        """Initialize refresh service.

        Args:
            registry_client: Registry API client implementation
            store: Where finished snapshots are published
            public_prefixes: Repository name prefixes that may be listed
            tag_fetch_concurrency: Maximum tag lists fetched at once
            clock: Returns the timestamp stamped on new snapshots
        """
        self._registry_client = registry_client
        self._store = store
        self._public_prefixes = tuple(public_prefixes)
        self._tag_fetch_concurrency = max(1, tag_fetch_concurrency)
        self._clock = clock

    def filter_public(self, names: Sequence[str]) -> List[str]:
        """Keep only names under a public prefix, preserving order."""
        return [
            name for name in names
            if is_public(self._public_prefixes, ScopeRequest.for_pull(name))
        ]

    async def _fetch_one(self, name: str, semaphore: asyncio.Semaphore) -> Optional[RepositoryInfo]:
        async with semaphore:
            try:
                return await self._registry_client.fetch_tags(name)
            except RegistryError as e:
                # Per-repository failures are not fatal to the cycle
                logger.warning(f"Skipping repository {name}: {e}")
                return None

    async def refresh(self) -> RefreshMetrics:
        """Run one refresh cycle.

        Returns:
            RefreshMetrics describing the cycle; `published` is False when
            the catalog could not be read
        """
        start_time = time.monotonic()
        logger.info("Starting catalog refresh")

        try:
            catalog = await self._registry_client.fetch_catalog()
        except RegistryError as e:
            logger.error(f"Catalog refresh aborted, keeping previous snapshot: {e}")
            return RefreshMetrics(
                repositories_listed=0,
                repositories_skipped=0,
                duration_seconds=time.monotonic() - start_time,
                errors_encountered=1,
                published=False
            )

        public_names = self.filter_public(catalog)
        logger.info(f"{len(public_names)} of {len(catalog)} repositories are public")

        semaphore = asyncio.Semaphore(self._tag_fetch_concurrency)
        tasks = [asyncio.ensure_future(self._fetch_one(name, semaphore)) for name in public_names]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # gather leaves the siblings of a failed fetch running
            for task in tasks:
                task.cancel()
            raise
        repositories = tuple(info for info in results if info is not None)
        skipped = len(public_names) - len(repositories)

        snapshot = Snapshot(repositories=repositories, produced_at=self._clock())
        self._store.publish(snapshot)

        duration = time.monotonic() - start_time
        logger.info(
            f"Published snapshot of {len(repositories)} repositories "
            f"({skipped} skipped) in {duration:.2f} seconds"
        )

        return RefreshMetrics(
            repositories_listed=len(repositories),
            repositories_skipped=skipped,
            duration_seconds=duration,
            errors_encountered=skipped,
            published=True
        )
