"""Abstract interface (port) for a named-table remote backend."""

from abc import ABC, abstractmethod
from typing import Any

from salespro_sync.domain.entities import RemoteRow


class RemoteTableClient(ABC):
    """Port for list/find/create/update against named tables.

    Implementations must never raise to callers: a failed, unauthorized or
    unconfigured call yields an empty list or None.
    """

    @abstractmethod
    def is_configured(self) -> bool:
        """True when a credential and base identifier are currently available."""
        ...

    @abstractmethod
    async def list_rows(self, table: str) -> list[RemoteRow]:
        """Return every row of ``table`` (empty on failure)."""
        ...

    @abstractmethod
    async def find_by_field(self, table: str, field: str, value: str) -> RemoteRow | None:
        """Return the first row whose ``field`` equals ``value`` exactly."""
        ...

    @abstractmethod
    async def create_row(self, table: str, fields: dict[str, Any]) -> RemoteRow | None:
        """Create a row and return it as stored by the backend."""
        ...

    @abstractmethod
    async def update_row(self, table: str, row_id: str, fields: dict[str, Any]) -> RemoteRow | None:
        """Patch ``fields`` of an existing row and return the stored row."""
        ...
