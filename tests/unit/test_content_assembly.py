"""Unit tests for rebuilding modules and lessons from flat remote rows."""

from salespro_sync.application.services.content_assembly import (
    CATEGORY_LOOKUP,
    assemble_modules,
    map_enum,
    map_rows,
    material_from_row,
    stream_from_row,
)
from salespro_sync.domain.entities import (
    HomeworkType,
    MaterialType,
    ModuleCategory,
    RemoteRow,
    StreamStatus,
)


def _module(row_id: str, module_id: str, title: str, order: int = 0, **extra) -> RemoteRow:
    return RemoteRow(id=row_id, fields={"ModuleId": module_id, "Title": title, "Order": order, **extra})


def _lesson(row_id: str, lesson_id: str, order: int = 0, **extra) -> RemoteRow:
    return RemoteRow(id=row_id, fields={"LessonId": lesson_id, "Title": lesson_id, "Order": order, **extra})


def test_lessons_are_bucketed_by_their_module_links():
    """A lesson linked to two modules appears in both."""
    modules = [_module("recM1", "m1", "One", order=1), _module("recM2", "m2", "Two", order=2)]
    lessons = [
        _lesson("recL1", "l1", order=1, Module=["recM1"]),
        _lesson("recL2", "l2", order=2, Module=["recM1", "recM2"]),
    ]

    result = assemble_modules(modules, lessons)

    assert [m.id for m in result] == ["m1", "m2"]
    assert [lesson.id for lesson in result[0].lessons] == ["l1", "l2"]
    assert [lesson.id for lesson in result[1].lessons] == ["l2"]


def test_lessons_within_a_module_are_sorted_by_order():
    modules = [_module("recM1", "m1", "One")]
    lessons = [
        _lesson("recL3", "l3", order=3, Module=["recM1"]),
        _lesson("recL1", "l1", order=1, Module=["recM1"]),
        _lesson("recL2", "l2", order=2, Module=["recM1"]),
    ]

    result = assemble_modules(modules, lessons)

    assert [lesson.id for lesson in result[0].lessons] == ["l1", "l2", "l3"]


def test_module_lesson_link_is_used_when_no_lesson_points_back():
    modules = [_module("recM1", "m1", "One", Lessons=["recL2", "recL1", "recMissing"])]
    lessons = [_lesson("recL1", "l1", order=1), _lesson("recL2", "l2", order=2)]

    result = assemble_modules(modules, lessons)

    assert [lesson.id for lesson in result[0].lessons] == ["l1", "l2"]


def test_duplicate_empty_modules_are_dropped_by_title():
    modules = [
        _module("recA", "a", "Placeholder", order=1),
        _module("recB", "b", "placeholder ", order=2),
        _module("recC", "c", "Placeholder", order=3),
    ]
    lessons = [_lesson("recL1", "l1", Module=["recC"])]

    result = assemble_modules(modules, lessons)

    # The first empty copy and the one with lessons survive
    assert [m.id for m in result] == ["a", "c"]


def test_modules_are_sorted_by_order():
    modules = [_module("recB", "b", "B", order=2), _module("recA", "a", "A", order=1)]

    result = assemble_modules(modules, [])

    assert [m.id for m in result] == ["a", "b"]


def test_row_id_is_used_when_external_id_is_missing():
    result = assemble_modules([RemoteRow(id="recM1", fields={"Title": "No id"})], [])

    assert result[0].id == "recM1"


def test_unmapped_enum_values_fall_back_to_defaults():
    modules = [_module("recM1", "m1", "One", Category="Cooking")]
    lessons = [_lesson("recL1", "l1", Module=["recM1"], HomeworkType="Interpretive dance")]

    result = assemble_modules(modules, lessons)

    assert result[0].category is ModuleCategory.GENERAL
    assert result[0].lessons[0].homework_type is HomeworkType.TEXT


def test_enum_labels_are_case_insensitive_and_localized():
    assert map_enum("Продажи", CATEGORY_LOOKUP, ModuleCategory.GENERAL) is ModuleCategory.SALES
    assert map_enum(["Psychology"], CATEGORY_LOOKUP, ModuleCategory.GENERAL) is ModuleCategory.PSYCHOLOGY
    assert map_enum(None, CATEGORY_LOOKUP, ModuleCategory.GENERAL) is ModuleCategory.GENERAL


def test_malformed_rows_are_skipped():
    modules = [_module("recM1", "m1", "One"), RemoteRow(id="recBad", fields=None)]
    lessons = [_lesson("recL1", "l1", Module=["recM1"]), RemoteRow(id="recBadL", fields=None)]

    result = assemble_modules(modules, lessons)

    assert [m.id for m in result] == ["m1"]
    assert [lesson.id for lesson in result[0].lessons] == ["l1"]


def test_material_and_stream_mappers():
    material = material_from_row(
        RemoteRow(id="recA", fields={"MaterialId": "x", "Title": "Deck", "Type": "Video", "Url": [{"url": "https://cdn/v.mp4"}]})
    )
    stream = stream_from_row(RemoteRow(id="recS", fields={"Title": "Replay", "Status": "ended"}))

    assert material.type is MaterialType.VIDEO
    assert material.url == "https://cdn/v.mp4"
    assert stream.id == "recS"
    assert stream.status is StreamStatus.PAST


def test_map_rows_skips_rows_that_fail_to_map():
    rows = [RemoteRow(id="recA", fields={"Title": "Ok"}), RemoteRow(id="recB", fields=None)]

    result = map_rows(rows, material_from_row, "material")

    assert [m.id for m in result] == ["recA"]
