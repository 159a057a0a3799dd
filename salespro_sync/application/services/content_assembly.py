"""Rebuilds hierarchical content from flat remote rows.

Lessons and modules arrive as independent row sets linked only through
backend-internal row ids. ``assemble_modules`` resolves those links into
``Module.lessons`` and drops duplicate placeholder modules. Backend
enumerations are mapped through explicit lookup tables; anything unmapped
falls back to one default per enumeration.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from salespro_sync.domain.entities import (
    HomeworkType,
    Lesson,
    Material,
    MaterialType,
    Module,
    ModuleCategory,
    RemoteRow,
    Stream,
    StreamStatus,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)
T = TypeVar("T")

# ── Enumeration lookup tables (keys are lower-cased backend labels) ──

CATEGORY_LOOKUP: dict[str, ModuleCategory] = {
    "sales": ModuleCategory.SALES,
    "продажи": ModuleCategory.SALES,
    "psychology": ModuleCategory.PSYCHOLOGY,
    "психология": ModuleCategory.PSYCHOLOGY,
    "tactics": ModuleCategory.TACTICS,
    "тактика": ModuleCategory.TACTICS,
    "negotiation": ModuleCategory.TACTICS,
    "general": ModuleCategory.GENERAL,
    "basics": ModuleCategory.GENERAL,
    "база": ModuleCategory.GENERAL,
}

HOMEWORK_LOOKUP: dict[str, HomeworkType] = {
    "text": HomeworkType.TEXT,
    "текст": HomeworkType.TEXT,
    "photo": HomeworkType.PHOTO,
    "image": HomeworkType.PHOTO,
    "фото": HomeworkType.PHOTO,
    "video": HomeworkType.VIDEO,
    "видео": HomeworkType.VIDEO,
    "file": HomeworkType.FILE,
    "document": HomeworkType.FILE,
    "файл": HomeworkType.FILE,
}

STREAM_STATUS_LOOKUP: dict[str, StreamStatus] = {
    "upcoming": StreamStatus.UPCOMING,
    "scheduled": StreamStatus.UPCOMING,
    "скоро": StreamStatus.UPCOMING,
    "live": StreamStatus.LIVE,
    "в эфире": StreamStatus.LIVE,
    "past": StreamStatus.PAST,
    "ended": StreamStatus.PAST,
    "recorded": StreamStatus.PAST,
    "запись": StreamStatus.PAST,
}

MATERIAL_TYPE_LOOKUP: dict[str, MaterialType] = {
    "pdf": MaterialType.PDF,
    "video": MaterialType.VIDEO,
    "видео": MaterialType.VIDEO,
    "link": MaterialType.LINK,
    "ссылка": MaterialType.LINK,
}

# ── Remote field names ──

LESSON_MODULE_LINK = "Module"
MODULE_LESSONS_LINK = "Lessons"


def map_enum(value: Any, lookup: dict[str, E], default: E) -> E:
    """Map a backend label (or single-select list) to the closed enum set."""
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return default
    return lookup.get(str(value).strip().lower(), default)


def _link_ids(value: Any) -> list[str]:
    """Normalise a multi-valued link field to a list of row ids."""
    if isinstance(value, list):
        return [str(v) for v in value if v]
    if isinstance(value, str) and value:
        return [value]
    return []


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _url(value: Any) -> str | None:
    """Accept a plain URL or an attachment list ``[{"url": ...}]``."""
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict) and item.get("url"):
                return str(item["url"])
        return None
    return str(value) if value else None


# ── Row mappers ──


def lesson_from_row(row: RemoteRow) -> Lesson:
    f = row.fields
    return Lesson(
        id=_text(f.get("LessonId")) or row.id,
        title=_text(f.get("Title"), "Untitled lesson"),
        description=_text(f.get("Description")),
        content=_text(f.get("Content")),
        video_url=_url(f.get("VideoUrl")),
        xp_reward=_as_int(f.get("XP"), 10),
        homework_type=map_enum(f.get("HomeworkType"), HOMEWORK_LOOKUP, HomeworkType.TEXT),
        homework_task=_text(f.get("HomeworkTask")),
        ai_grading_instruction=_text(f.get("AIGradingInstruction")),
        order=_as_int(f.get("Order"), 0),
    )


def module_from_row(row: RemoteRow, lessons: list[Lesson]) -> Module:
    f = row.fields
    return Module(
        id=_text(f.get("ModuleId")) or row.id,
        title=_text(f.get("Title"), "Untitled module"),
        description=_text(f.get("Description")),
        category=map_enum(f.get("Category"), CATEGORY_LOOKUP, ModuleCategory.GENERAL),
        min_level=_as_int(f.get("MinLevel"), 1),
        image_url=_url(f.get("ImageUrl")),
        video_url=_url(f.get("VideoUrl")),
        order=_as_int(f.get("Order"), 0),
        lessons=lessons,
    )


def material_from_row(row: RemoteRow) -> Material:
    f = row.fields
    return Material(
        id=_text(f.get("MaterialId")) or row.id,
        title=_text(f.get("Title"), "Untitled material"),
        description=_text(f.get("Description")),
        type=map_enum(f.get("Type"), MATERIAL_TYPE_LOOKUP, MaterialType.LINK),
        url=_url(f.get("Url")) or "",
    )


def stream_from_row(row: RemoteRow) -> Stream:
    f = row.fields
    return Stream(
        id=_text(f.get("StreamId")) or row.id,
        title=_text(f.get("Title"), "Untitled stream"),
        date=_text(f.get("Date")),
        youtube_url=_url(f.get("YoutubeUrl")) or "",
        status=map_enum(f.get("Status"), STREAM_STATUS_LOOKUP, StreamStatus.UPCOMING),
    )


def map_rows(rows: list[RemoteRow], mapper: Callable[[RemoteRow], T], kind: str) -> list[T]:
    """Map every row, skipping (and logging) rows that cannot be mapped."""
    items: list[T] = []
    for row in rows:
        try:
            items.append(mapper(row))
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed %s row %s: %s", kind, row.id, exc)
    return items


# ── Assembly ──


def assemble_modules(module_rows: list[RemoteRow], lesson_rows: list[RemoteRow]) -> list[Module]:
    """Join flat module and lesson rows into modules with nested lessons.

    1. Every lesson is appended to the bucket of each module row it links
       to, so one lesson may appear in several modules.
    2. A module with an empty bucket falls back to its own lesson link field,
       resolved against the full lesson row set.
    3. Zero-lesson modules are kept only for the first occurrence of their
       title; modules with lessons are always kept.
    """
    lessons_by_row: dict[str, Lesson] = {}
    buckets: dict[str, list[Lesson]] = {}

    for row in lesson_rows:
        try:
            lesson = lesson_from_row(row)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed lesson row %s: %s", row.id, exc)
            continue
        lessons_by_row[row.id] = lesson
        for module_row_id in dict.fromkeys(_link_ids(row.fields.get(LESSON_MODULE_LINK))):
            buckets.setdefault(module_row_id, []).append(lesson)

    modules: list[Module] = []
    empty_titles: set[str] = set()

    for row in module_rows:
        try:
            lessons = buckets.get(row.id, [])
            if not lessons:
                lessons = [
                    lessons_by_row[lesson_row_id]
                    for lesson_row_id in dict.fromkeys(_link_ids(row.fields.get(MODULE_LESSONS_LINK)))
                    if lesson_row_id in lessons_by_row
                ]
            lessons = sorted(lessons, key=lambda lesson: lesson.order)
            module = module_from_row(row, lessons)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed module row %s: %s", row.id, exc)
            continue

        if not module.lessons:
            title_key = (module.title or module.id).strip().lower()
            if title_key in empty_titles:
                logger.debug("Dropping duplicate empty module '%s' (row %s)", module.title, row.id)
                continue
            empty_titles.add(title_key)

        modules.append(module)

    return sorted(modules, key=lambda module: module.order)
