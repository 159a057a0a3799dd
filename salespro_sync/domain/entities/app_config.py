"""Domain entity — the singleton global configuration record."""

from dataclasses import dataclass, field
from typing import Any

# Logical table name → default backend table name
DEFAULT_TABLE_NAMES: dict[str, str] = {
    "users": "Users",
    "modules": "Modules",
    "lessons": "Lessons",
    "materials": "Materials",
    "streams": "Streams",
    "app_settings": "AppSettings",
}


@dataclass
class IntegrationSettings:
    """Remote backend credentials and table-name overrides."""

    remote_api_key: str = ""
    remote_base_id: str = ""
    remote_base_url: str = ""
    table_names: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "remote_api_key": self.remote_api_key,
            "remote_base_id": self.remote_base_id,
            "remote_base_url": self.remote_base_url,
            "table_names": dict(self.table_names),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "IntegrationSettings":
        data = data or {}
        table_names = data.get("table_names")
        return cls(
            remote_api_key=str(data.get("remote_api_key") or ""),
            remote_base_id=str(data.get("remote_base_id") or ""),
            remote_base_url=str(data.get("remote_base_url") or ""),
            table_names={str(k): str(v) for k, v in table_names.items()}
            if isinstance(table_names, dict)
            else {},
        )


@dataclass
class AppConfig:
    """Feature flags, integrations and free-form settings.

    Cached through the same remote → local → default tiers as content.
    """

    feature_flags: dict[str, bool] = field(default_factory=dict)
    integrations: IntegrationSettings = field(default_factory=IntegrationSettings)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "feature_flags": dict(self.feature_flags),
            "integrations": self.integrations.to_dict(),
            "extra": dict(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AppConfig":
        data = data or {}
        flags = data.get("feature_flags")
        extra = data.get("extra")
        return cls(
            feature_flags={str(k): bool(v) for k, v in flags.items()}
            if isinstance(flags, dict)
            else {},
            integrations=IntegrationSettings.from_dict(data.get("integrations")),
            extra=dict(extra) if isinstance(extra, dict) else {},
        )
