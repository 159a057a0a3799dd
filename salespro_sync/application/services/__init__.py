from .background_tasks import BackgroundTasks
from .content_cache import COLLECTIONS, ContentCache
from .sse_manager import SSEManager
from .sync_engine import DEFAULT_TOLERANCE_MS, Resolution, SyncEngine, resolve_conflict

__all__ = [
    "BackgroundTasks",
    "COLLECTIONS",
    "ContentCache",
    "SSEManager",
    "DEFAULT_TOLERANCE_MS",
    "Resolution",
    "SyncEngine",
    "resolve_conflict",
]
