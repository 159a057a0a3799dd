"""Abstract interface (port) for the durable local key/value cache."""

from abc import ABC, abstractmethod
from typing import Any, TypeVar

T = TypeVar("T")


class StorageKey:
    """Local key space. Every read supplies an explicit default."""

    CURRENT_USER = "progress"
    ROSTER = "allUsers"
    APP_CONFIG = "appConfig"
    MODULES = "courseModules"
    MATERIALS = "materials"
    STREAMS = "streams"
    EVENTS = "events"
    SCENARIOS = "scenarios"
    NOTIFICATIONS = "local_notifications"


class LocalStore(ABC):
    """Port for the fallback-of-last-resort cache.

    Writes are last-writer-wins at key granularity; there are no
    transactions across keys.
    """

    @abstractmethod
    def get(self, key: str, default: T) -> Any | T:
        """Return the stored value, or ``default`` if absent or unparseable.

        Must never raise.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Serialize ``value`` and overwrite whatever is stored at ``key``.

        Must never raise; a failed write is logged and the previous value stays.
        """
        ...
