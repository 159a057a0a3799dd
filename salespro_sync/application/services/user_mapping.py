"""Mapping between UserRecord and the remote user-row schema.

Remote columns: ``TelegramId`` (filter key), ``Name``, ``Role``, ``XP``,
``Level``, ``LastSync`` and ``Data`` — a JSON blob holding every non-indexed
field (completed lessons, homework, chat history, notebook, habits, goals,
preferences).
"""

import json
import logging
from typing import Any

from salespro_sync.domain.entities import RemoteRow, UserRecord, UserRole

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
EXTERNAL_ID_FIELD = "TelegramId"

# Indexed columns; everything else travels inside the Data blob.
_INDEXED = {"external_id", "name", "role", "xp", "level", "last_sync_timestamp", "remote_row_id"}


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def user_to_fields(user: UserRecord) -> dict[str, Any]:
    """Build the remote row fields for a record."""
    data = user.to_dict()
    blob = {k: v for k, v in data.items() if k not in _INDEXED}
    return {
        EXTERNAL_ID_FIELD: user.external_id,
        "Name": user.name or "Unknown",
        "Role": user.role.value,
        "XP": int(user.xp),
        "Level": int(user.level),
        "LastSync": int(user.last_sync_timestamp),
        "Data": json.dumps(blob, ensure_ascii=False),
    }


def row_to_user(row: RemoteRow) -> UserRecord | None:
    """Rebuild a record from a remote row.

    A row without an external id is unusable and yields None. An unparseable
    ``Data`` blob only resets the blob fields to their defaults.
    """
    fields = row.fields
    external_id = fields.get(EXTERNAL_ID_FIELD)
    if external_id in (None, ""):
        logger.warning("Remote user row %s has no %s; skipped", row.id, EXTERNAL_ID_FIELD)
        return None

    blob: dict[str, Any] = {}
    raw_blob = fields.get("Data")
    if raw_blob:
        try:
            parsed = json.loads(raw_blob) if isinstance(raw_blob, str) else raw_blob
            if isinstance(parsed, dict):
                blob = parsed
            else:
                logger.warning("Remote user row %s has a non-object Data blob; defaulted", row.id)
        except ValueError as exc:
            logger.warning("Remote user row %s has a corrupt Data blob; defaulted: %s", row.id, exc)

    # Older rows kept the sync stamp inside the blob
    last_sync = fields.get("LastSync", blob.get("last_sync_timestamp", blob.get("lastSyncTimestamp")))

    data = {k: v for k, v in blob.items() if k not in _INDEXED and k != "lastSyncTimestamp"}
    data.update(
        {
            "external_id": str(external_id),
            "name": fields.get("Name") or "Unknown",
            "role": UserRole.parse(fields.get("Role")).value,
            "xp": _as_int(fields.get("XP"), 0),
            "level": _as_int(fields.get("Level"), 1),
            "last_sync_timestamp": _as_int(last_sync, 0),
            "remote_row_id": row.id,
        }
    )
    try:
        return UserRecord.from_dict(data)
    except (TypeError, ValueError) as exc:
        logger.warning("Remote user row %s could not be mapped; skipped: %s", row.id, exc)
        return None
