"""Built-in default dataset loaded from a shipped YAML file."""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml

from salespro_sync.application.interfaces import DefaultDataset

logger = logging.getLogger(__name__)


class YamlDefaultDataset(DefaultDataset):
    """Reads the default dataset once; hands out deep copies."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            self._data = self._load_yaml(self._path) or {}
        return self._data

    @staticmethod
    def _load_yaml(path: Path) -> dict | None:
        """Load and parse a YAML file, returning None on error."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except Exception:
            logger.exception("Failed to parse default dataset: %s", path)
            return None
        if not isinstance(data, dict):
            logger.error("Default dataset %s is not a mapping", path)
            return None
        return data

    def collection(self, name: str) -> list[dict[str, Any]]:
        items = self._load().get(name) or []
        if not isinstance(items, list):
            return []
        return copy.deepcopy([i for i in items if isinstance(i, dict)])

    def app_config(self) -> dict[str, Any]:
        config = self._load().get("app_config") or {}
        return copy.deepcopy(config) if isinstance(config, dict) else {}
