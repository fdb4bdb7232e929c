"""Run one refresh cycle and display the resulting public listing."""
import asyncio
import logging
import sys
from registry_lister.application.refresh_service import CatalogRefresher
from registry_lister.config import ListerConfig
from registry_lister.infrastructure.registry_client import RegistryHttpClient
from registry_lister.infrastructure.snapshot_store import InMemorySnapshotStore
from registry_lister.infrastructure.token_providers import token_provider_from_config


logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


def print_section(title: str):
    """Print a section header."""
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


async def display_report():
    """Refresh once and print the snapshot."""
    config = ListerConfig.from_env()
    token_provider = token_provider_from_config(config)
    client = RegistryHttpClient(config.registry_host, token_provider, timeout=config.request_timeout)
    store = InMemorySnapshotStore()
    refresher = CatalogRefresher(
        registry_client=client,
        store=store,
        public_prefixes=config.public_prefixes,
        tag_fetch_concurrency=config.tag_fetch_concurrency
    )

    try:
        metrics = await refresher.refresh()
    finally:
        await client.close()
        await token_provider.close()

    print_section("Refresh Metrics")
    print(f"Published: {'yes' if metrics.published else 'no'}")
    print(f"Repositories listed: {metrics.repositories_listed}")
    print(f"Repositories skipped: {metrics.repositories_skipped}")
    print(f"Duration: {metrics.duration_seconds:.2f} seconds")

    snapshot = store.current()
    if snapshot is None:
        print("\nCatalog could not be read; see the log above.")
        return False

    print_section(f"Public Repositories on {config.pull_hostname or config.registry_host}")
    print(f"{'Repository':<40} {'Tags':<38}")
    print("-" * 80)
    for repo in snapshot.repositories:
        print(f"{repo.name:<40} {repo.tag_summary:<38}")
    print(f"\nProduced at: {snapshot.produced_at:%Y-%m-%d %H:%M:%S %Z}")
    return True


if __name__ == "__main__":
    try:
        ok = asyncio.run(display_report())
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
    sys.exit(0 if ok else 1)
