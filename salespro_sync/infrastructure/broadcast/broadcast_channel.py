"""Named broadcast channels shared by every context of one application instance.

Each context opens its own ``BroadcastChannel`` under the same name. A
publish on one channel is delivered to every other open channel of that
name, and never back to the publisher.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable

from salespro_sync.application.interfaces import SyncBus, SyncCallback
from salespro_sync.domain.entities import SyncEvent

logger = logging.getLogger(__name__)


class BroadcastHub:
    """Registry of open channels, grouped by channel name."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._channels: dict[str, list[BroadcastChannel]] = defaultdict(list)

    def open(self, name: str) -> BroadcastChannel:
        """Open a new channel endpoint for a context."""
        return BroadcastChannel(name, hub=self)

    def _attach(self, channel: BroadcastChannel) -> None:
        with self._lock:
            self._channels[channel.name].append(channel)

    def _detach(self, channel: BroadcastChannel) -> None:
        with self._lock:
            peers = self._channels.get(channel.name, [])
            if channel in peers:
                peers.remove(channel)
            if not peers:
                self._channels.pop(channel.name, None)

    def _peers(self, channel: BroadcastChannel) -> list[BroadcastChannel]:
        with self._lock:
            return [c for c in self._channels.get(channel.name, []) if c is not channel]

    def channel_count(self, name: str) -> int:
        with self._lock:
            return len(self._channels.get(name, []))


default_hub = BroadcastHub()


class BroadcastChannel(SyncBus):
    """One context's endpoint on a named channel."""

    def __init__(self, name: str, hub: BroadcastHub | None = None) -> None:
        self._name = name
        self._hub = hub or default_hub
        self._lock = threading.Lock()
        self._callbacks: list[SyncCallback] = []
        self._closed = False
        self._hub._attach(self)

    @property
    def name(self) -> str:
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: SyncEvent | None = None) -> None:
        if self._closed:
            logger.debug("Publish on closed channel '%s' ignored", self._name)
            return
        event = event or SyncEvent()
        peers = self._hub._peers(self)
        logger.debug("Broadcasting %s on '%s' to %d peer(s)", event.type, self._name, len(peers))
        for peer in peers:
            peer._deliver(event)

    def subscribe(self, callback: SyncCallback) -> Callable[[], None]:
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._hub._detach(self)
        with self._lock:
            self._callbacks.clear()

    def _deliver(self, event: SyncEvent) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback(event)
            except Exception as exc:
                logger.error("Sync subscriber failed on channel '%s': %s", self._name, exc)
