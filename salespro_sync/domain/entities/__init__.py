from .app_config import AppConfig, IntegrationSettings, DEFAULT_TABLE_NAMES
from .content import (
    AppNotification,
    CalendarEvent,
    ContentBundle,
    HomeworkType,
    Lesson,
    Material,
    MaterialType,
    Module,
    ModuleCategory,
    Scenario,
    Stream,
    StreamStatus,
)
from .remote_row import RemoteRow
from .sync_event import SyncEvent, SYNC_UPDATE, now_ms
from .user_record import UserRecord, UserRole

__all__ = [
    "AppConfig",
    "IntegrationSettings",
    "DEFAULT_TABLE_NAMES",
    "AppNotification",
    "CalendarEvent",
    "ContentBundle",
    "HomeworkType",
    "Lesson",
    "Material",
    "MaterialType",
    "Module",
    "ModuleCategory",
    "Scenario",
    "Stream",
    "StreamStatus",
    "RemoteRow",
    "SyncEvent",
    "SYNC_UPDATE",
    "now_ms",
    "UserRecord",
    "UserRole",
]
