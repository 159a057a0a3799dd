"""Unit tests for the JSON-file local store."""

import logging

from salespro_sync.application.interfaces import StorageKey
from salespro_sync.infrastructure.storage import json_file_store
from salespro_sync.infrastructure.storage.json_file_store import JsonFileLocalStore


def test_get_returns_default_for_missing_key(tmp_path):
    store = JsonFileLocalStore(tmp_path)

    assert store.get(StorageKey.CURRENT_USER, None) is None
    assert store.get(StorageKey.ROSTER, []) == []


def test_set_then_get_returns_the_value(tmp_path):
    store = JsonFileLocalStore(tmp_path / "nested" / "store")
    value = {"external_id": "42", "name": "Аня", "completed_lesson_ids": ["l1-1"]}

    store.set(StorageKey.CURRENT_USER, value)

    assert store.get(StorageKey.CURRENT_USER, None) == value
    assert (tmp_path / "nested" / "store" / "progress.json").exists()


def test_set_overwrites_previous_value(tmp_path):
    store = JsonFileLocalStore(tmp_path)

    store.set(StorageKey.MODULES, [{"id": "m1"}])
    store.set(StorageKey.MODULES, [{"id": "m2"}])

    assert store.get(StorageKey.MODULES, []) == [{"id": "m2"}]
    assert not list(tmp_path.glob("*.tmp"))


def test_unparseable_file_yields_default(tmp_path):
    store = JsonFileLocalStore(tmp_path)
    (tmp_path / "appConfig.json").write_text("{broken", encoding="utf-8")

    assert store.get(StorageKey.APP_CONFIG, {"fallback": True}) == {"fallback": True}


def test_keys_are_sanitised_into_file_names(tmp_path):
    store = JsonFileLocalStore(tmp_path)

    store.set("../escape/attempt", 1)

    assert store.get("../escape/attempt", None) == 1
    assert [p.parent for p in tmp_path.glob("*.json")] == [tmp_path]


def test_two_handles_on_one_directory_share_state(tmp_path):
    writer, reader = JsonFileLocalStore(tmp_path), JsonFileLocalStore(tmp_path)

    writer.set(StorageKey.ROSTER, [{"external_id": "1"}])

    assert reader.get(StorageKey.ROSTER, []) == [{"external_id": "1"}]


def test_set_into_a_vanished_directory_is_logged_not_raised(tmp_path, caplog):
    store_dir = tmp_path / "store"
    store = JsonFileLocalStore(store_dir)
    store_dir.rmdir()
    store_dir.write_text("now a file", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        store.set(StorageKey.CURRENT_USER, {"external_id": "42"})

    assert "Could not store local key 'progress'" in caplog.text
    assert store.get(StorageKey.CURRENT_USER, None) is None


def test_unserializable_value_keeps_previous_value_and_leaves_no_tmp(tmp_path):
    store = JsonFileLocalStore(tmp_path)
    store.set(StorageKey.MODULES, [{"id": "m1"}])

    store.set(StorageKey.MODULES, [{"id": object()}])

    assert store.get(StorageKey.MODULES, []) == [{"id": "m1"}]
    assert not list(tmp_path.glob("*.tmp"))


def test_failed_replace_removes_the_temporary_file(tmp_path, monkeypatch):
    store = JsonFileLocalStore(tmp_path)

    def _refuse(src, dst):
        raise PermissionError("read-only volume")

    monkeypatch.setattr(json_file_store.os, "replace", _refuse)
    store.set(StorageKey.ROSTER, [{"external_id": "1"}])

    assert store.get(StorageKey.ROSTER, []) == []
    assert not list(tmp_path.glob("*.tmp"))
