"""Per-call credential resolution for the remote table client.

Credentials live in the global config (editable at runtime by an admin) and
fall back to environment settings, so a changed key or base applies on the
very next call without re-initialising anything.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from salespro_sync.application.interfaces import LocalStore, StorageKey
from salespro_sync.config import Settings
from salespro_sync.domain.entities import AppConfig, DEFAULT_TABLE_NAMES


@dataclass(frozen=True)
class RemoteCredentials:
    """Endpoint, base identifier, bearer credential and table overrides."""

    endpoint: str
    base_id: str
    api_key: str
    table_names: dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return bool(self.endpoint and self.base_id and self.api_key)

    def table_name(self, logical_name: str) -> str:
        """Resolve a logical table name through overrides, then defaults."""
        return (
            self.table_names.get(logical_name)
            or DEFAULT_TABLE_NAMES.get(logical_name)
            or logical_name
        )


CredentialProvider = Callable[[], RemoteCredentials]


class GlobalConfigCredentialProvider:
    """Reads credentials from the locally cached global config on every call."""

    def __init__(self, store: LocalStore, settings: Settings):
        self._store = store
        self._settings = settings

    def __call__(self) -> RemoteCredentials:
        raw = self._store.get(StorageKey.APP_CONFIG, {})
        config = AppConfig.from_dict(raw if isinstance(raw, dict) else {})
        integ = config.integrations

        table_names = {"users": self._settings.remote_users_table}
        table_names.update(integ.table_names)

        return RemoteCredentials(
            endpoint=(integ.remote_base_url or self._settings.remote_base_url).rstrip("/"),
            base_id=integ.remote_base_id or self._settings.remote_base_id,
            api_key=integ.remote_api_key or self._settings.remote_api_key,
            table_names=table_names,
        )
