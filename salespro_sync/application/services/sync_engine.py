"""SyncEngine — load/save lifecycle of the mutable user record.

Local writes happen first and synchronously; remote propagation runs as a
detached background task whose failures only reach the log. Conflicts are
resolved last-write-wins on ``last_sync_timestamp`` with a tolerance band
that treats near-equal stamps as already synchronized.
"""

import asyncio
import copy
import dataclasses
import logging
from collections.abc import Callable
from enum import Enum

from salespro_sync.application.interfaces import (
    LocalStore,
    RemoteTableClient,
    StorageKey,
    SyncBus,
)
from salespro_sync.application.services.background_tasks import BackgroundTasks
from salespro_sync.application.services.user_mapping import (
    EXTERNAL_ID_FIELD,
    USERS_TABLE,
    row_to_user,
    user_to_fields,
)
from salespro_sync.domain.entities import RemoteRow, UserRecord, now_ms
from salespro_sync.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_MS = 2000


class Resolution(str, Enum):
    """Outcome of comparing a local and a remote record."""

    IN_SYNC = "in_sync"
    LOCAL_NEWER = "local_newer"
    REMOTE_NEWER = "remote_newer"


def resolve_conflict(local_ts: int, remote_ts: int, tolerance_ms: int) -> Resolution:
    """Compare two logical clocks; |Δ| < tolerance (or Δ == 0) counts as in sync."""
    delta = local_ts - remote_ts
    if delta == 0 or abs(delta) < tolerance_ms:
        return Resolution.IN_SYNC
    if delta > 0:
        return Resolution.LOCAL_NEWER
    return Resolution.REMOTE_NEWER


class SyncEngine:
    """Orchestrates reconciliation of one client's user record with the remote.

    Depends only on the LocalStore, SyncBus and RemoteTableClient ports.
    """

    def __init__(
        self,
        store: LocalStore,
        bus: SyncBus,
        remote: RemoteTableClient,
        tasks: BackgroundTasks,
        *,
        tolerance_ms: int = DEFAULT_TOLERANCE_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self._store = store
        self._bus = bus
        self._remote = remote
        self._tasks = tasks
        self._tolerance_ms = tolerance_ms
        self._clock = clock
        self._log = SyncLogger("SyncPipeline")
        # Latest push task per external id; pushes for one user run in order
        self._push_chain: dict[str, asyncio.Task] = {}

    @property
    def tolerance_ms(self) -> int:
        return self._tolerance_ms

    # ── Local state ─────────────────────────────────────────────────

    def current_user(self) -> UserRecord | None:
        """The locally cached current user, if any (no network)."""
        raw = self._store.get(StorageKey.CURRENT_USER, None)
        if not isinstance(raw, dict):
            return None
        try:
            return UserRecord.from_dict(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Local user record is unreadable; ignored: %s", exc)
            return None

    def _local_user(self, external_id: str) -> UserRecord | None:
        user = self.current_user()
        if user is None or user.external_id != str(external_id):
            return None
        return user

    def cached_roster(self) -> list[UserRecord]:
        raw = self._store.get(StorageKey.ROSTER, [])
        if not isinstance(raw, list):
            return []
        roster: list[UserRecord] = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            try:
                roster.append(UserRecord.from_dict(item))
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable roster entry: %s", exc)
        return roster

    def _write_local(self, user: UserRecord) -> None:
        """Write-through to the current-user key and the roster entry."""
        self._store.set(StorageKey.CURRENT_USER, user.to_dict())

        roster = self._store.get(StorageKey.ROSTER, [])
        if not isinstance(roster, list):
            roster = []
        entry = user.to_dict()
        for idx, item in enumerate(roster):
            if isinstance(item, dict) and str(item.get("external_id")) == user.external_id:
                roster[idx] = entry
                break
        else:
            roster.append(entry)
        self._store.set(StorageKey.ROSTER, roster)

    # ── Load ────────────────────────────────────────────────────────

    async def load_user(self, external_id: str) -> UserRecord:
        """Return the authoritative record for ``external_id``.

        Never raises: remote failures degrade to the local record or a fresh
        default one.
        """
        external_id = str(external_id)
        local = self._local_user(external_id)
        remote_row = await self._remote.find_by_field(USERS_TABLE, EXTERNAL_ID_FIELD, external_id)
        remote = row_to_user(remote_row) if remote_row is not None else None
        return self._reconcile(local, remote, external_id)

    async def sync_user(self, record: UserRecord) -> UserRecord:
        """Reconcile an in-memory record against the remote (foreground)."""
        remote_row = await self._remote.find_by_field(
            USERS_TABLE, EXTERNAL_ID_FIELD, record.external_id
        )
        remote = row_to_user(remote_row) if remote_row is not None else None
        return self._reconcile(record, remote, record.external_id)

    def _reconcile(
        self, local: UserRecord | None, remote: UserRecord | None, external_id: str
    ) -> UserRecord:
        if remote is None:
            if local is None:
                logger.info("No local or remote record for %s; starting fresh", external_id)
                return UserRecord.default(external_id)
            logger.debug("Remote record for %s absent; scheduling create", external_id)
            self._schedule_push(local)
            return local

        if local is None:
            logger.info("Hydrating %s from remote row %s", external_id, remote.remote_row_id)
            self._adopt_remote(remote)
            return remote

        resolution = resolve_conflict(
            local.last_sync_timestamp, remote.last_sync_timestamp, self._tolerance_ms
        )
        logger.debug(
            "Reconciling %s: local=%d remote=%d → %s",
            external_id,
            local.last_sync_timestamp,
            remote.last_sync_timestamp,
            resolution.value,
        )

        if resolution is Resolution.REMOTE_NEWER:
            self._adopt_remote(remote)
            return remote

        if local.remote_row_id is None and remote.remote_row_id:
            local.remote_row_id = remote.remote_row_id
            self._write_local(local)
            self._bus.publish()

        if resolution is Resolution.LOCAL_NEWER:
            self._schedule_push(local)
        return local

    def _adopt_remote(self, remote: UserRecord) -> None:
        self._write_local(remote)
        self._bus.publish()

    # ── Save ────────────────────────────────────────────────────────

    async def save_user(self, record: UserRecord) -> UserRecord:
        """Stamp, persist locally, broadcast, then push in the background.

        Returns as soon as local state is written; the remote round trip is
        never awaited and its failure is only logged.
        """
        stamped = dataclasses.replace(record, last_sync_timestamp=self._clock())
        if stamped.remote_row_id is None:
            local = self._local_user(stamped.external_id)
            if local is not None and local.remote_row_id:
                stamped.remote_row_id = local.remote_row_id
        self._write_local(stamped)
        self._bus.publish()
        self._schedule_push(stamped)
        return stamped

    def _schedule_push(self, user: UserRecord) -> None:
        external_id = user.external_id
        snapshot = copy.deepcopy(user)
        previous = self._push_chain.get(external_id)
        task = self._tasks.spawn(
            self._push_after(previous, snapshot), name=f"push-user-{external_id}"
        )
        if task is None:
            return
        self._push_chain[external_id] = task

        def _release(done: asyncio.Task) -> None:
            if self._push_chain.get(external_id) is done:
                del self._push_chain[external_id]

        task.add_done_callback(_release)

    async def _push_after(self, previous: asyncio.Task | None, user: UserRecord) -> None:
        """Run ``user``'s push once the earlier push for the same id settled."""
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        if user.remote_row_id is None:
            # An earlier push may have created the row in the meantime
            local = self._local_user(user.external_id)
            if local is not None and local.remote_row_id:
                user.remote_row_id = local.remote_row_id
        await self._push_user(user)

    async def _push_user(self, user: UserRecord) -> None:
        """Find-or-create/update the remote row for ``user``."""
        fields = user_to_fields(user)
        row: RemoteRow | None

        if user.remote_row_id:
            row = await self._remote.update_row(USERS_TABLE, user.remote_row_id, fields)
        else:
            existing = await self._remote.find_by_field(
                USERS_TABLE, EXTERNAL_ID_FIELD, user.external_id
            )
            if existing is not None:
                row = await self._remote.update_row(USERS_TABLE, existing.id, fields)
            else:
                row = await self._remote.create_row(USERS_TABLE, fields)

        if row is None:
            logger.debug("Remote push for %s did not complete", user.external_id)
            return

        self._log.step_complete(SyncStage.USER, f"User {user.external_id} synced", row=row.id)
        if user.remote_row_id is None:
            self._persist_linkage(user.external_id, row.id)

    def _persist_linkage(self, external_id: str, row_id: str) -> None:
        """Patch only the linkage into the *current* local record."""
        current = self._local_user(external_id)
        if current is None or current.remote_row_id:
            return
        current.remote_row_id = row_id
        self._write_local(current)
        self._bus.publish()

    # ── Roster ──────────────────────────────────────────────────────

    async def get_leaderboard(self) -> list[UserRecord]:
        """Full remote roster when available, else the last cached one.

        Duplicate rows for one external id collapse to the newest stamp.
        """
        rows = await self._remote.list_rows(USERS_TABLE)
        newest: dict[str, UserRecord] = {}
        for user in (row_to_user(r) for r in rows):
            if user is None:
                continue
            seen = newest.get(user.external_id)
            if seen is None or user.last_sync_timestamp > seen.last_sync_timestamp:
                newest[user.external_id] = user
        users = list(newest.values())
        if users:
            self._store.set(StorageKey.ROSTER, [u.to_dict() for u in users])
            roster = users
        else:
            roster = self.cached_roster()
        return sorted(roster, key=lambda u: u.xp, reverse=True)
