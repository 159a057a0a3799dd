"""Domain entity — ephemeral cross-context change signal."""

import time
from dataclasses import dataclass, field

SYNC_UPDATE = "SYNC_UPDATE"


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SyncEvent:
    """Signal meaning "something changed, re-read local state".

    Carries no payload beyond its type and a timestamp; never persisted.
    """

    type: str = SYNC_UPDATE
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> dict:
        return {"type": self.type, "timestamp": self.timestamp}
