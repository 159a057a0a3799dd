"""Domain entities for the read-mostly content collections.

Every entity is keyed by a stable external ``id`` that is independent of the
backend's internal row identity. Collections are replaced wholesale on each
successful fetch, never merged field by field.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ModuleCategory(str, Enum):
    SALES = "SALES"
    PSYCHOLOGY = "PSYCHOLOGY"
    TACTICS = "TACTICS"
    GENERAL = "GENERAL"


class HomeworkType(str, Enum):
    TEXT = "TEXT"
    PHOTO = "PHOTO"
    VIDEO = "VIDEO"
    FILE = "FILE"


class StreamStatus(str, Enum):
    UPCOMING = "UPCOMING"
    LIVE = "LIVE"
    PAST = "PAST"


class MaterialType(str, Enum):
    PDF = "PDF"
    VIDEO = "VIDEO"
    LINK = "LINK"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


class _Serializable:
    """Shared dict conversion for the content dataclasses."""

    _enums: dict[str, type[Enum]] = {}

    def to_dict(self) -> dict[str, Any]:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        kwargs = {k: v for k, v in data.items() if k in known}
        for name, enum_type in cls._enums.items():
            if name in kwargs:
                kwargs[name] = enum_type(kwargs[name])
        if "id" in kwargs:
            kwargs["id"] = str(kwargs["id"])
        return cls(**kwargs)


@dataclass
class Lesson(_Serializable):
    id: str
    title: str
    description: str = ""
    content: str = ""
    video_url: str | None = None
    xp_reward: int = 10
    homework_type: HomeworkType = HomeworkType.TEXT
    homework_task: str = ""
    ai_grading_instruction: str = ""
    order: int = 0

    _enums = {"homework_type": HomeworkType}


@dataclass
class Module(_Serializable):
    id: str
    title: str
    description: str = ""
    category: ModuleCategory = ModuleCategory.GENERAL
    min_level: int = 1
    image_url: str | None = None
    video_url: str | None = None
    order: int = 0
    lessons: list[Lesson] = field(default_factory=list)

    _enums = {"category": ModuleCategory}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Module":
        lessons = [Lesson.from_dict(item) for item in data.get("lessons") or []]
        module = super().from_dict({k: v for k, v in data.items() if k != "lessons"})
        module.lessons = lessons
        return module


@dataclass
class Material(_Serializable):
    id: str
    title: str
    description: str = ""
    type: MaterialType = MaterialType.LINK
    url: str = ""

    _enums = {"type": MaterialType}


@dataclass
class Stream(_Serializable):
    id: str
    title: str
    date: str = ""
    youtube_url: str = ""
    status: StreamStatus = StreamStatus.UPCOMING

    _enums = {"status": StreamStatus}


@dataclass
class CalendarEvent(_Serializable):
    id: str
    title: str
    description: str = ""
    date: str = ""
    duration_minutes: int = 60
    type: str = "WEBINAR"


@dataclass
class Scenario(_Serializable):
    id: str
    title: str
    difficulty: str = "Easy"
    client_role: str = ""
    objective: str = ""
    initial_message: str = ""


@dataclass
class AppNotification(_Serializable):
    id: str
    title: str
    message: str = ""
    type: str = "INFO"
    date: str = ""
    target_role: str | None = None


@dataclass
class ContentBundle:
    """All read-mostly collections resolved in one pass."""

    modules: list[Module] = field(default_factory=list)
    materials: list[Material] = field(default_factory=list)
    streams: list[Stream] = field(default_factory=list)
    events: list[CalendarEvent] = field(default_factory=list)
    scenarios: list[Scenario] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "modules": [m.to_dict() for m in self.modules],
            "materials": [m.to_dict() for m in self.materials],
            "streams": [s.to_dict() for s in self.streams],
            "events": [e.to_dict() for e in self.events],
            "scenarios": [s.to_dict() for s in self.scenarios],
        }
