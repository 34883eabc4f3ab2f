from __future__ import annotations

import pytest

from expense_core.exceptions import PersistenceError
from expense_core.storage import JSONStorage


def test_absent_key_loads_as_empty_list(tmp_path) -> None:
    storage = JSONStorage(tmp_path)
    assert storage.load("expenseTrackerData") == []
    assert not storage.exists("expenseTrackerData")


def test_save_overwrites_whole_value(tmp_path) -> None:
    storage = JSONStorage(tmp_path)
    storage.save("expenseTrackerData", [{"id": "1"}, {"id": "2"}])
    storage.save("expenseTrackerData", [{"id": "3"}])

    assert storage.load("expenseTrackerData") == [{"id": "3"}]
    assert (tmp_path / "expenseTrackerData.json").exists()
    assert not (tmp_path / "expenseTrackerData.json.tmp").exists()


def test_corrupted_file_raises_persistence_error(tmp_path) -> None:
    (tmp_path / "expenseTrackerData.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JSONStorage(tmp_path).load("expenseTrackerData")


def test_non_list_payload_raises_persistence_error(tmp_path) -> None:
    (tmp_path / "expenseTrackerData.json").write_text('{"id": "1"}', encoding="utf-8")
    with pytest.raises(PersistenceError):
        JSONStorage(tmp_path).load("expenseTrackerData")


@pytest.mark.parametrize("key", ["", "../escape", "nested/key", ".hidden"])
def test_rejects_unsafe_keys(tmp_path, key) -> None:
    with pytest.raises(PersistenceError):
        JSONStorage(tmp_path).load(key)
