"""Abstract interface (port) for the built-in default content set."""

from abc import ABC, abstractmethod
from typing import Any


class DefaultDataset(ABC):
    """Port for the last tier of the content fallback chain."""

    @abstractmethod
    def collection(self, name: str) -> list[dict[str, Any]]:
        """Return the shipped items of a collection as plain dicts."""
        ...

    @abstractmethod
    def app_config(self) -> dict[str, Any]:
        """Return the shipped global configuration as a plain dict."""
        ...
