from .default_dataset import DefaultDataset
from .local_store import LocalStore, StorageKey
from .remote_table_client import RemoteTableClient
from .sync_bus import SyncBus, SyncCallback

__all__ = [
    "DefaultDataset",
    "LocalStore",
    "StorageKey",
    "RemoteTableClient",
    "SyncBus",
    "SyncCallback",
]
