"""
Tests for collection storage.

Tests:
- missing and corrupted files read as empty collections
- corrupted files are moved to the backup directory
- writes replace the file in one step
- in-memory store isolation
"""

import json

import pytest

from database.manager import COMPLETION_TIMES, HABIT_GROUPS, InMemoryStore, JsonFileStore
from utils.exceptions import StorageError


class TestJsonFileStore:

    def test_missing_file_is_empty(self, file_store):
        assert file_store.read_all(COMPLETION_TIMES) == {}

    def test_write_then_read(self, file_store):
        file_store.set(HABIT_GROUPS, "g1", {"id": "g1", "name": "Evening", "habit_ids": ["h1"]})

        assert file_store.get(HABIT_GROUPS, "g1")["name"] == "Evening"
        on_disk = json.loads((file_store.data_dir / "habit_groups.json").read_text(encoding="utf-8"))
        assert list(on_disk) == ["g1"]

    def test_no_temp_files_left(self, file_store):
        file_store.write_all(COMPLETION_TIMES, {"h1": {"habit_id": "h1"}})

        assert [path.name for path in file_store.data_dir.iterdir()] == ["completion_times.json"]

    def test_corrupted_file_is_backed_up(self, file_store):
        path = file_store.data_dir / "completion_times.json"
        path.write_text("{not json", encoding="utf-8")

        assert file_store.read_all(COMPLETION_TIMES) == {}
        assert not path.exists()
        backups = list(file_store.backup_dir.glob("corrupted_completion_times_*.json"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == "{not json"

    def test_wrong_shape_is_empty(self, file_store):
        (file_store.data_dir / "habit_groups.json").write_text("[1, 2, 3]", encoding="utf-8")
        assert file_store.read_all(HABIT_GROUPS) == {}

    def test_non_object_entries_are_dropped(self, file_store):
        (file_store.data_dir / "habit_groups.json").write_text(
            json.dumps({"g1": {"id": "g1"}, "g2": "broken"}), encoding="utf-8"
        )
        assert list(file_store.read_all(HABIT_GROUPS)) == ["g1"]

    def test_unserializable_write_raises_storage_error(self, file_store):
        file_store.write_all(COMPLETION_TIMES, {"h1": {"habit_id": "h1"}})

        with pytest.raises(StorageError):
            file_store.write_all(COMPLETION_TIMES, {"h1": {"value": object()}})

        assert file_store.read_all(COMPLETION_TIMES) == {"h1": {"habit_id": "h1"}}
        assert len(list(file_store.data_dir.iterdir())) == 1

    def test_unknown_collection(self, file_store):
        with pytest.raises(StorageError):
            file_store.read_all("habits")

    def test_custom_file_names(self, tmp_path):
        store = JsonFileStore(tmp_path, collection_files={COMPLETION_TIMES: "times.json"})
        store.set(COMPLETION_TIMES, "h1", {"habit_id": "h1"})

        assert (tmp_path / "times.json").exists()

    def test_delete(self, file_store):
        file_store.set(HABIT_GROUPS, "g1", {"id": "g1"})

        assert file_store.delete(HABIT_GROUPS, "g1")
        assert not file_store.delete(HABIT_GROUPS, "g1")
        assert file_store.read_all(HABIT_GROUPS) == {}

    def test_export(self, file_store):
        file_store.set(HABIT_GROUPS, "g1", {"id": "g1"})
        export = file_store.export_data()

        assert export[HABIT_GROUPS] == {"g1": {"id": "g1"}}
        assert export[COMPLETION_TIMES] == {}
        assert "export_date" in export


class TestInMemoryStore:

    def test_returns_copies(self):
        store = InMemoryStore()
        store.set(HABIT_GROUPS, "g1", {"id": "g1", "habit_ids": ["h1"]})

        loaded = store.read_all(HABIT_GROUPS)
        loaded["g1"]["habit_ids"].append("h2")

        assert store.get(HABIT_GROUPS, "g1")["habit_ids"] == ["h1"]

    def test_initial_data(self):
        store = InMemoryStore({COMPLETION_TIMES: {"h1": {"habit_id": "h1"}}})
        assert store.get(COMPLETION_TIMES, "h1") == {"habit_id": "h1"}
        assert store.read_all(HABIT_GROUPS) == {}
