"""Wires infrastructure adapters to the application services.

A ``SyncContext`` is one execution context of the application: it owns its
store handle, broadcast channel, remote client and background tasks. It is
built once at startup and closed once at shutdown.
"""

import logging
from dataclasses import dataclass, field

import httpx
from fastapi import Request

from salespro_sync.application.interfaces import DefaultDataset, LocalStore, RemoteTableClient
from salespro_sync.application.services import (
    BackgroundTasks,
    ContentCache,
    SSEManager,
    SyncEngine,
)
from salespro_sync.config import Settings, get_settings
from salespro_sync.infrastructure.broadcast.broadcast_channel import (
    BroadcastChannel,
    BroadcastHub,
    default_hub,
)
from salespro_sync.infrastructure.defaults.yaml_dataset import YamlDefaultDataset
from salespro_sync.infrastructure.remote import AirtableTableClient, GlobalConfigCredentialProvider
from salespro_sync.infrastructure.storage.json_file_store import JsonFileLocalStore

logger = logging.getLogger(__name__)


@dataclass
class SyncContext:
    """Everything one context needs, constructed once and passed by reference."""

    store: LocalStore
    bus: BroadcastChannel
    remote: RemoteTableClient
    tasks: BackgroundTasks
    engine: SyncEngine
    content: ContentCache
    sse: SSEManager = field(default_factory=SSEManager)
    http_client: httpx.AsyncClient | None = None
    _owns_http_client: bool = False
    _unsubscribe_sse: object = None

    async def aclose(self) -> None:
        """Stop background work, leave the channel, release the HTTP pool."""
        await self.tasks.aclose()
        if callable(self._unsubscribe_sse):
            self._unsubscribe_sse()
        await self.sse.shutdown()
        self.bus.close()
        if self._owns_http_client and self.http_client is not None:
            await self.http_client.aclose()
        logger.info("Sync context on channel '%s' closed", self.bus.name)


def build_sync_context(
    settings: Settings | None = None,
    *,
    store: LocalStore | None = None,
    hub: BroadcastHub | None = None,
    remote: RemoteTableClient | None = None,
    defaults: DefaultDataset | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> SyncContext:
    """Construct a SyncContext; any collaborator may be injected."""
    settings = settings or get_settings()
    store = store or JsonFileLocalStore(settings.store_dir)
    bus = (hub or default_hub).open(settings.sync_channel_name)
    tasks = BackgroundTasks()

    owns_http_client = False
    if remote is None:
        if http_client is None:
            http_client = httpx.AsyncClient(timeout=settings.remote_timeout_seconds)
            owns_http_client = True
        remote = AirtableTableClient(
            credentials=GlobalConfigCredentialProvider(store, settings),
            http_client=http_client,
            timeout=settings.remote_timeout_seconds,
        )

    defaults = defaults or YamlDefaultDataset(settings.default_content_file)

    engine = SyncEngine(store, bus, remote, tasks, tolerance_ms=settings.sync_tolerance_ms)
    content = ContentCache(store, bus, remote, defaults)
    sse = SSEManager(keepalive_seconds=settings.sse_keepalive_seconds or None)

    context = SyncContext(
        store=store,
        bus=bus,
        remote=remote,
        tasks=tasks,
        engine=engine,
        content=content,
        sse=sse,
        http_client=http_client,
        _owns_http_client=owns_http_client,
    )
    context._unsubscribe_sse = bus.subscribe(sse.on_sync)
    return context


def get_sync_context(request: Request) -> SyncContext:
    """FastAPI dependency: the context built in the application lifespan."""
    return request.app.state.sync_context


def get_sync_engine(request: Request) -> SyncEngine:
    return get_sync_context(request).engine


def get_content_cache(request: Request) -> ContentCache:
    return get_sync_context(request).content


def get_sse_manager(request: Request) -> SSEManager:
    return get_sync_context(request).sse
