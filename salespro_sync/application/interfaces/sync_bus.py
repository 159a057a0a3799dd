"""Abstract interface (port) for the cross-context change signal."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from salespro_sync.domain.entities import SyncEvent

SyncCallback = Callable[[SyncEvent], None]


class SyncBus(ABC):
    """Single-topic publish/subscribe shared by all contexts of one app instance.

    Receivers treat every signal as "re-read current state", never as a
    queued event log: there is no delivery or ordering guarantee.
    """

    @abstractmethod
    def publish(self, event: SyncEvent | None = None) -> None:
        """Notify every *other* context; the publisher never hears itself."""
        ...

    @abstractmethod
    def subscribe(self, callback: SyncCallback) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Detach from the channel. Later publishes are ignored."""
        ...
