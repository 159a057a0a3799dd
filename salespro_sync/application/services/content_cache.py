"""ContentCache — three-tier resolution of the read-mostly collections.

Each collection resolves remote → local snapshot → built-in default. A
non-empty remote result replaces the local snapshot wholesale and is
broadcast to the other contexts. Collections the remote does not serve
skip the first tier.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from salespro_sync.application.interfaces import (
    DefaultDataset,
    LocalStore,
    RemoteTableClient,
    StorageKey,
    SyncBus,
)
from salespro_sync.application.services.content_assembly import (
    assemble_modules,
    map_rows,
    material_from_row,
    stream_from_row,
)
from salespro_sync.domain.entities import (
    AppConfig,
    AppNotification,
    CalendarEvent,
    ContentBundle,
    Material,
    Module,
    Scenario,
    Stream,
)
from salespro_sync.domain.exceptions import UnknownCollectionError
from salespro_sync.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CollectionSpec(Generic[T]):
    """How one collection is stored locally and rebuilt from dicts."""

    name: str
    storage_key: str
    entity: Callable[[dict[str, Any]], T]
    remote: bool


COLLECTIONS: dict[str, CollectionSpec] = {
    "modules": CollectionSpec("modules", StorageKey.MODULES, Module.from_dict, remote=True),
    "materials": CollectionSpec("materials", StorageKey.MATERIALS, Material.from_dict, remote=True),
    "streams": CollectionSpec("streams", StorageKey.STREAMS, Stream.from_dict, remote=True),
    "events": CollectionSpec("events", StorageKey.EVENTS, CalendarEvent.from_dict, remote=False),
    "scenarios": CollectionSpec("scenarios", StorageKey.SCENARIOS, Scenario.from_dict, remote=False),
    "notifications": CollectionSpec(
        "notifications", StorageKey.NOTIFICATIONS, AppNotification.from_dict, remote=False
    ),
}

APP_SETTINGS_TABLE = "app_settings"


def _collection_spec(name: str) -> CollectionSpec:
    spec = COLLECTIONS.get(name)
    if spec is None:
        raise UnknownCollectionError(name)
    return spec


class ContentCache:
    """Resolves content collections and the global config through the tiers."""

    def __init__(
        self,
        store: LocalStore,
        bus: SyncBus,
        remote: RemoteTableClient,
        defaults: DefaultDataset,
    ):
        self._store = store
        self._bus = bus
        self._remote = remote
        self._defaults = defaults
        self._log = SyncLogger("SyncPipeline")

    # ── Tier helpers ────────────────────────────────────────────────

    def _build(self, spec: CollectionSpec, items: Any, tier: str) -> list | None:
        """Rebuild entities from stored dicts; None if the tier is unusable."""
        if not isinstance(items, list) or not items:
            return None
        built = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                built.append(spec.entity(item))
            except (TypeError, ValueError, KeyError) as exc:
                logger.warning("Skipping unreadable %s item in %s tier: %s", spec.name, tier, exc)
        return built or None

    def _local_or_default(self, spec: CollectionSpec) -> list:
        local = self._build(spec, self._store.get(spec.storage_key, None), "local")
        if local is not None:
            self._log.detail(f"{spec.name}: using local snapshot", count=len(local))
            return local
        defaults = self._build(spec, self._defaults.collection(spec.name), "default") or []
        self._log.step_warning(
            SyncStage.FALLBACK, f"{spec.name}: using built-in defaults", count=len(defaults)
        )
        return defaults

    async def _resolve_tiers(
        self,
        spec: CollectionSpec,
        fetch_remote: Callable[[], Awaitable[list]] | None,
    ) -> tuple[list, bool]:
        """Resolve one collection; the flag tells whether the remote refreshed it."""
        if spec.remote and fetch_remote is not None and self._remote.is_configured():
            try:
                items = await fetch_remote()
            except Exception as exc:
                self._log.step_error(SyncStage.REMOTE, f"{spec.name}: remote fetch failed", error=exc)
                items = []
            if items:
                self._store.set(spec.storage_key, [item.to_dict() for item in items])
                self._log.step_complete(SyncStage.REMOTE, f"{spec.name}: loaded from remote", count=len(items))
                return items, True
            self._log.detail(f"{spec.name}: remote returned nothing")
        return self._local_or_default(spec), False

    async def _resolve(
        self,
        spec: CollectionSpec,
        fetch_remote: Callable[[], Awaitable[list]] | None,
    ) -> list:
        items, refreshed = await self._resolve_tiers(spec, fetch_remote)
        if refreshed:
            self._bus.publish()
        return items

    # ── Remote fetchers ─────────────────────────────────────────────

    async def _fetch_remote_modules(self) -> list[Module]:
        lesson_rows, module_rows = await asyncio.gather(
            self._remote.list_rows("lessons"),
            self._remote.list_rows("modules"),
        )
        modules = assemble_modules(module_rows, lesson_rows)
        for module in modules:
            self._log.detail(f"Module: {module.title}", lessons=len(module.lessons))
        return modules

    async def _fetch_remote_materials(self) -> list[Material]:
        rows = await self._remote.list_rows("materials")
        return map_rows(rows, material_from_row, "material")

    async def _fetch_remote_streams(self) -> list[Stream]:
        rows = await self._remote.list_rows("streams")
        return map_rows(rows, stream_from_row, "stream")

    # ── Public collection reads ─────────────────────────────────────

    async def fetch_modules(self) -> list[Module]:
        return await self._resolve(COLLECTIONS["modules"], self._fetch_remote_modules)

    async def fetch_materials(self) -> list[Material]:
        return await self._resolve(COLLECTIONS["materials"], self._fetch_remote_materials)

    async def fetch_streams(self) -> list[Stream]:
        return await self._resolve(COLLECTIONS["streams"], self._fetch_remote_streams)

    async def fetch_events(self) -> list[CalendarEvent]:
        return await self._resolve(COLLECTIONS["events"], None)

    async def fetch_scenarios(self) -> list[Scenario]:
        return await self._resolve(COLLECTIONS["scenarios"], None)

    async def fetch_notifications(self) -> list[AppNotification]:
        return await self._resolve(COLLECTIONS["notifications"], None)

    async def fetch_all_content(self) -> ContentBundle:
        """Resolve every content collection concurrently.

        Peers get a single sync signal however many collections the remote
        refreshed.
        """
        with self._log.timed_step(SyncStage.CONTENT, "Fetching all content"):
            resolved = await asyncio.gather(
                self._resolve_tiers(COLLECTIONS["modules"], self._fetch_remote_modules),
                self._resolve_tiers(COLLECTIONS["materials"], self._fetch_remote_materials),
                self._resolve_tiers(COLLECTIONS["streams"], self._fetch_remote_streams),
                self._resolve_tiers(COLLECTIONS["events"], None),
                self._resolve_tiers(COLLECTIONS["scenarios"], None),
            )
        if any(refreshed for _, refreshed in resolved):
            self._bus.publish()
        modules, materials, streams, events, scenarios = [items for items, _ in resolved]
        logger.info(
            "Content ready: %d modules, %d materials, %d streams, %d events, %d scenarios",
            len(modules), len(materials), len(streams), len(events), len(scenarios),
        )
        return ContentBundle(
            modules=modules,
            materials=materials,
            streams=streams,
            events=events,
            scenarios=scenarios,
        )

    # ── Local writes ────────────────────────────────────────────────

    async def save_collection(self, name: str, items: list[dict[str, Any]]) -> list:
        """Replace a collection's local snapshot and broadcast the change.

        Items are validated by rebuilding them as entities; the remote is not
        written.
        """
        spec = _collection_spec(name)
        entities = [spec.entity(item) for item in items]
        self._store.set(spec.storage_key, [e.to_dict() for e in entities])
        self._bus.publish()
        self._log.step_complete(SyncStage.CACHE, f"Saved {len(entities)} {name} locally")
        return entities

    async def send_broadcast(self, notification: AppNotification) -> list[AppNotification]:
        """Prepend a notification to the local list and broadcast."""
        spec = COLLECTIONS["notifications"]
        current = self._store.get(spec.storage_key, [])
        if not isinstance(current, list):
            current = []
        updated = [notification.to_dict(), *current]
        self._store.set(spec.storage_key, updated)
        self._bus.publish()
        return self._build(spec, updated, "local") or []

    # ── Global config ───────────────────────────────────────────────

    async def _fetch_remote_config(self) -> dict[str, Any] | None:
        rows = await self._remote.list_rows(APP_SETTINGS_TABLE)
        for row in rows:
            raw = row.fields.get("Data")
            if not raw:
                continue
            try:
                data = json.loads(raw) if isinstance(raw, str) else raw
            except ValueError as exc:
                logger.warning("Remote settings row %s has a corrupt Data blob: %s", row.id, exc)
                continue
            if isinstance(data, dict):
                return data
        return None

    async def fetch_global_config(self) -> AppConfig:
        """Global config through remote → local → default.

        A remote config never replaces the locally held integration
        credentials, so it cannot lock this client out of the remote.
        """
        local_raw = self._store.get(StorageKey.APP_CONFIG, None)
        local = AppConfig.from_dict(local_raw) if isinstance(local_raw, dict) and local_raw else None

        if self._remote.is_configured():
            remote_raw = await self._fetch_remote_config()
            if remote_raw:
                config = AppConfig.from_dict(remote_raw)
                if local is not None:
                    config.integrations = local.integrations
                self._store.set(StorageKey.APP_CONFIG, config.to_dict())
                self._bus.publish()
                self._log.step_complete(SyncStage.REMOTE, "Global config loaded from remote")
                return config

        if local is not None:
            return local
        self._log.step_warning(SyncStage.FALLBACK, "Global config: using built-in defaults")
        return AppConfig.from_dict(self._defaults.app_config())

    async def save_global_config(self, config: AppConfig) -> AppConfig:
        self._store.set(StorageKey.APP_CONFIG, config.to_dict())
        self._bus.publish()
        return config
