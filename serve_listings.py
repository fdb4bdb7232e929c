"""Main entry point for the registry listing service.

Wires the registry client, refresh scheduler and web application
together and serves until interrupted.
"""
import logging
import sys
from aiohttp import web
from registry_lister.application.refresh_service import CatalogRefresher
from registry_lister.application.scheduler import RefreshScheduler
from registry_lister.config import ListerConfig
from registry_lister.infrastructure.registry_client import RegistryHttpClient
from registry_lister.infrastructure.snapshot_store import InMemorySnapshotStore
from registry_lister.infrastructure.token_providers import token_provider_from_config
from registry_lister.presentation.web import create_app


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_app(config: ListerConfig) -> web.Application:
    """Assemble the application and its background refresh."""
    store = InMemorySnapshotStore()
    scheduler = None

    if config.show_listings:
        token_provider = token_provider_from_config(config)
        registry_client = RegistryHttpClient(
            config.registry_host,
            token_provider,
            timeout=config.request_timeout
        )
        refresher = CatalogRefresher(
            registry_client=registry_client,
            store=store,
            public_prefixes=config.public_prefixes,
            tag_fetch_concurrency=config.tag_fetch_concurrency
        )
        scheduler = RefreshScheduler(refresher, config.refresh_interval)

        if not config.public_prefixes:
            logger.warning("PUBLIC_PREFIXES is empty, no repositories will be listed")

    app = create_app(config, store, scheduler)

    if scheduler is not None:
        async def close_clients(app: web.Application) -> None:
            await registry_client.close()
            await token_provider.close()

        app.on_cleanup.append(close_clients)

    return app


def main():
    """Run the listing service."""
    try:
        config = ListerConfig.from_env()
        app = build_app(config)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info(
        f"Listing {config.registry_host} on {config.listen_host}:{config.listen_port}"
    )
    web.run_app(app, host=config.listen_host, port=config.listen_port, print=None)


if __name__ == "__main__":
    main()
