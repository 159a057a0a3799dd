"""Domain entity — the mutable per-user progress record."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class UserRole(str, Enum):
    """Closed set of user roles."""

    STUDENT = "STUDENT"
    CURATOR = "CURATOR"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: Any) -> "UserRole":
        """Map any stored value to a role, defaulting to STUDENT."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.STUDENT


_LIST_FIELDS = ("submitted_homeworks", "chat_history", "notebook", "habits", "goals")


def _default_preferences() -> dict[str, Any]:
    return {"theme": "dark", "notifications": True}


@dataclass
class UserRecord:
    """Progress and preferences for one external identity.

    ``last_sync_timestamp`` is a wall-clock millisecond value used only as a
    last-write-wins version marker. ``remote_row_id`` stays None until the
    first successful remote creation and is stable afterwards.
    """

    external_id: str
    name: str = "Guest"
    role: UserRole = UserRole.STUDENT
    xp: int = 0
    level: int = 1
    username: str | None = None
    completed_lesson_ids: list[str] = field(default_factory=list)
    submitted_homeworks: list[dict[str, Any]] = field(default_factory=list)
    chat_history: list[dict[str, Any]] = field(default_factory=list)
    notebook: list[dict[str, Any]] = field(default_factory=list)
    habits: list[dict[str, Any]] = field(default_factory=list)
    goals: list[dict[str, Any]] = field(default_factory=list)
    preferences: dict[str, Any] = field(default_factory=_default_preferences)
    remote_row_id: str | None = None
    last_sync_timestamp: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls, external_id: str) -> "UserRecord":
        """A fresh record for a user seen for the first time."""
        return cls(external_id=str(external_id))

    def complete_lesson(self, lesson_id: str, xp_reward: int = 0) -> bool:
        """Mark a lesson completed once; returns False if it already was."""
        if lesson_id in self.completed_lesson_ids:
            return False
        self.completed_lesson_ids.append(lesson_id)
        self.xp += max(int(xp_reward), 0)
        return True

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["role"] = self.role.value
        data["completed_lesson_ids"] = list(self.completed_lesson_ids)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        """Rebuild a record from its stored dict.

        Unknown keys are kept in ``extra``; duplicate lesson ids are collapsed.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if not kwargs.get("external_id"):
            raise ValueError("UserRecord requires an external_id")
        kwargs["external_id"] = str(kwargs["external_id"])
        kwargs["role"] = UserRole.parse(kwargs.get("role", UserRole.STUDENT.value))
        kwargs["xp"] = int(kwargs.get("xp") or 0)
        kwargs["level"] = int(kwargs.get("level") or 1)
        kwargs["last_sync_timestamp"] = int(kwargs.get("last_sync_timestamp") or 0)
        completed = kwargs.get("completed_lesson_ids")
        kwargs["completed_lesson_ids"] = list(
            dict.fromkeys(str(i) for i in completed) if isinstance(completed, list) else []
        )
        for name in _LIST_FIELDS:
            if not isinstance(kwargs.get(name, []), list):
                kwargs[name] = []
        if not isinstance(kwargs.get("preferences", {}), dict):
            kwargs["preferences"] = _default_preferences()
        extra = dict(kwargs.get("extra") or {})
        extra.update({k: v for k, v in data.items() if k not in known})
        kwargs["extra"] = extra
        return cls(**kwargs)
