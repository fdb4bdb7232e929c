"""Read-only HTTP surface over the current catalog snapshot."""
import logging
from datetime import datetime
from typing import Any, Dict, Optional
from aiohttp import web
from registry_lister.application.scheduler import RefreshScheduler
from registry_lister.config import ListerConfig
from registry_lister.domain.models import Snapshot
from registry_lister.domain.snapshot_interface import ISnapshotStore


logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Docker Registry"

CONFIG_KEY = web.AppKey("config", ListerConfig)
STORE_KEY = web.AppKey("snapshot_store", ISnapshotStore)
SCHEDULER_KEY = web.AppKey("scheduler", RefreshScheduler)


def get_hostname(config: ListerConfig, request: Optional[web.Request]) -> str:
    """Hostname shown to users: override, then request Host, then a default."""
    if config.pull_hostname:
        return config.pull_hostname
    if request is not None and request.host:
        return request.host
    return DEFAULT_TITLE


def display_time(moment: datetime) -> str:
    return moment.strftime("%d-%m %H:%M")


def render_listing(title: str, snapshot: Optional[Snapshot]) -> Dict[str, Any]:
    """Build the listing document for one snapshot.

    Before the first refresh there is no snapshot; the listing is empty
    and `last_polled` is None.
    """
    if snapshot is None:
        return {"title": title, "last_polled": None, "last_polled_display": None, "repositories": []}

    return {
        "title": title,
        "last_polled": snapshot.produced_at.isoformat(),
        "last_polled_display": display_time(snapshot.produced_at),
        "repositories": [
            {"name": repo.name, "tags": list(repo.tags), "tag_summary": repo.tag_summary}
            for repo in snapshot.repositories
        ]
    }


async def listing_index(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    # Read the reference once; a refresh may publish while we render
    snapshot = request.app[STORE_KEY].current()
    try:
        document = render_listing(get_hostname(config, request), snapshot)
    except Exception as e:
        logger.error(f"Error rendering listing: {e}", exc_info=True)
        raise web.HTTPInternalServerError()
    return web.json_response(document)


async def index(request: web.Request) -> web.Response:
    return web.json_response({"title": get_hostname(request.app[CONFIG_KEY], request)})


async def ok(request: web.Request) -> web.Response:
    return web.Response(status=200)


async def _scheduler_context(app: web.Application):
    scheduler = app[SCHEDULER_KEY]
    scheduler.start()
    yield
    await scheduler.stop()


def create_app(
    config: ListerConfig,
    store: ISnapshotStore,
    scheduler: Optional[RefreshScheduler] = None
) -> web.Application:
    """Create the web application.

    Args:
        config: Process configuration, selects the page mode
        store: Source of the current snapshot
        scheduler: Refresh scheduler, run alongside the app in listings mode
    """
    app = web.Application()
    app[CONFIG_KEY] = config
    app[STORE_KEY] = store

    if config.show_listings:
        logger.info("Enabling listings")
        app.router.add_get("/", listing_index)
        if scheduler is not None:
            app[SCHEDULER_KEY] = scheduler
            app.cleanup_ctx.append(_scheduler_context)
    elif config.show_index:
        logger.info("Showing index only")
        app.router.add_get("/", index)
    else:
        logger.info("Not showing index or listings")
        app.router.add_get("/", ok)

    return app
