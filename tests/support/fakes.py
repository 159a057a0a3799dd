"""In-memory fakes for the sync ports, shared by unit and integration tests."""

import asyncio
import copy
import json
from typing import Any

from salespro_sync.application.interfaces import DefaultDataset, LocalStore, RemoteTableClient
from salespro_sync.domain.entities import RemoteRow


class InMemoryLocalStore(LocalStore):
    """JSON-serializing dict store; mirrors the durable store's semantics."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key, default):
        raw = self._data.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            return default

    def set(self, key, value):
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError):
            pass

    def corrupt(self, key: str) -> None:
        self._data[key] = "{not json"

    def raw(self, key: str) -> Any:
        return json.loads(self._data[key]) if key in self._data else None


class FakeRemoteTableClient(RemoteTableClient):
    """Named tables held in memory; can be switched offline or gated."""

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.offline = False
        self.tables: dict[str, list[RemoteRow]] = {}
        self.calls: list[tuple[str, str]] = []
        self.gate: asyncio.Event | None = None
        self._next_id = 1

    def seed(self, table: str, row_id: str, fields: dict[str, Any]) -> RemoteRow:
        row = RemoteRow(id=row_id, fields=dict(fields))
        self.tables.setdefault(table, []).append(row)
        return row

    def _available(self) -> bool:
        return self.configured and not self.offline

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()

    def is_configured(self) -> bool:
        return self.configured

    async def list_rows(self, table: str) -> list[RemoteRow]:
        self.calls.append(("list", table))
        await self._wait()
        if not self._available():
            return []
        return [copy.deepcopy(r) for r in self.tables.get(table, [])]

    async def find_by_field(self, table: str, field: str, value: str) -> RemoteRow | None:
        self.calls.append(("find", table))
        await self._wait()
        if not self._available():
            return None
        for row in self.tables.get(table, []):
            if str(row.fields.get(field)) == str(value):
                return copy.deepcopy(row)
        return None

    async def create_row(self, table: str, fields: dict[str, Any]) -> RemoteRow | None:
        self.calls.append(("create", table))
        await self._wait()
        if not self._available():
            return None
        row = RemoteRow(id=f"rec{self._next_id:04d}", fields=dict(fields))
        self._next_id += 1
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    async def update_row(self, table: str, row_id: str, fields: dict[str, Any]) -> RemoteRow | None:
        self.calls.append(("update", table))
        await self._wait()
        if not self._available():
            return None
        for row in self.tables.get(table, []):
            if row.id == row_id:
                row.fields.update(fields)
                return copy.deepcopy(row)
        return None

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)


class StaticDefaultDataset(DefaultDataset):
    """Default dataset built from literal dicts."""

    def __init__(self, collections: dict[str, list[dict]] | None = None, app_config: dict | None = None):
        self._collections = collections or {}
        self._app_config = app_config or {}

    def collection(self, name: str) -> list[dict]:
        return copy.deepcopy(self._collections.get(name, []))

    def app_config(self) -> dict:
        return copy.deepcopy(self._app_config)
