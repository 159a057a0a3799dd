"""SSE relay — turns SyncBus signals into Server-Sent Events for HTTP clients.

A ``sync`` event carries no state, only the hint "re-read what you show". The
client is expected to call the read endpoints afterwards.
"""

import asyncio
import itertools
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

from salespro_sync.domain.entities import SyncEvent

logger = logging.getLogger(__name__)

_CLOSE = None


def format_sse(event_id: int, event_type: str, data: dict[str, Any]) -> str:
    """Encode one event in the ``text/event-stream`` wire format."""
    return f"id: {event_id}\nevent: {event_type}\ndata: {json.dumps(data)}\n\n"


class SSEManager:
    """Fans sync signals out to connected SSE clients.

    Every client owns a bounded queue. A client that stops reading is dropped
    once its queue fills up; it reconnects and re-reads state.
    """

    def __init__(self, max_queue_size: int = 100, keepalive_seconds: float | None = None) -> None:
        self._clients: list[asyncio.Queue] = []
        self._max_queue_size = max_queue_size
        self._keepalive_seconds = keepalive_seconds
        self._ids = itertools.count(1)

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Yield SSE messages until shutdown or until the client is dropped."""
        client: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._clients.append(client)
        logger.debug("SSE client connected (%d total)", len(self._clients))
        try:
            while True:
                try:
                    message = await asyncio.wait_for(client.get(), self._keepalive_seconds)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                if message is _CLOSE:
                    break
                yield message
        finally:
            self._detach(client)

    def _detach(self, client: asyncio.Queue) -> None:
        if client in self._clients:
            self._clients.remove(client)

    def _close_client(self, client: asyncio.Queue) -> None:
        """Replace whatever is queued with the close sentinel."""
        while not client.empty():
            client.get_nowait()
        client.put_nowait(_CLOSE)

    def publish_nowait(self, event_type: str, data: dict[str, Any]) -> None:
        message = format_sse(next(self._ids), event_type, data)
        for client in list(self._clients):
            try:
                client.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning("SSE client fell behind; dropping it")
                self._detach(client)
                self._close_client(client)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        self.publish_nowait(event_type, data)

    def on_sync(self, event: SyncEvent) -> None:
        """SyncBus callback: relay the signal as a ``sync`` event."""
        self.publish_nowait("sync", event.to_dict())

    async def shutdown(self) -> None:
        """End every client stream."""
        for client in list(self._clients):
            self._close_client(client)
        self._clients.clear()
