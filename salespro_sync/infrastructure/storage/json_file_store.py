"""Local durable cache — one JSON file per key.

Storage layout:
    <store_dir>/<key>.json
"""

import contextlib
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, TypeVar

from salespro_sync.application.interfaces import LocalStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _sanitise(key: str, max_len: int = 80) -> str:
    """Replace non-word characters with underscores and truncate."""
    return re.sub(r"[^\w\-]", "_", key)[:max_len].strip("_") or "unnamed"


class JsonFileLocalStore(LocalStore):
    """Infrastructure adapter for the local cache.

    Writes go to a temporary sibling file and are moved into place with
    ``os.replace`` so a concurrent reader sees either the old or the new
    value, never a torn file. A failed write is logged and leaves the
    previous value in place.
    """

    def __init__(self, store_dir: str | Path):
        self._store_dir = Path(store_dir)
        self._store_dir.mkdir(parents=True, exist_ok=True)

    @property
    def store_dir(self) -> Path:
        return self._store_dir

    def _path(self, key: str) -> Path:
        return self._store_dir / f"{_sanitise(key)}.json"

    def get(self, key: str, default: T) -> Any | T:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text("utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read local key '%s'; using default: %s", key, exc)
            return default

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        try:
            payload = json.dumps(value, ensure_ascii=False)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Could not store local key '%s': %s", key, exc)
            return
        finally:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
        logger.debug("Stored local key '%s' at %s", key, path)
