"""Domain entity — one row of a remote named table."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RemoteRow:
    """A backend row: backend-internal ``id`` plus its ``fields`` mapping."""

    id: str
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "RemoteRow | None":
        """Build a row from a wire record, or None if the record is unusable."""
        if not isinstance(payload, dict):
            return None
        row_id = payload.get("id")
        if not row_id:
            return None
        fields = payload.get("fields")
        return cls(id=str(row_id), fields=fields if isinstance(fields, dict) else {})
