from __future__ import annotations
import json
import logging
import os

from jobform.errors import StorageError
from jobform.schemas import JobApplicationRecord
from jobform.storage.draft_storage import (
    DEFAULT_DRAFT_KEY,
    DraftStore,
    FileKeyValueStore,
    MemoryKeyValueStore,
)

import pytest

from conftest import make_application


class BrokenStore:
    """Every operation fails as an unavailable or full backend would."""

    def get_item(self, key):
        raise OSError("storage unavailable")

    def set_item(self, key, value):
        raise OSError("quota exceeded")

    def remove_item(self, key):
        raise OSError("storage unavailable")


def test_load_returns_none_when_nothing_saved(draft_store):
    assert draft_store.load() is None
    assert draft_store.has_draft() is False


def test_save_then_load_round_trips(draft_store):
    record = JobApplicationRecord(role_title="Bob", company_name="Café Ltd", is_linked_in_connection=True)
    assert draft_store.save(record) is True
    assert draft_store.load() == record


def test_full_record_round_trips(draft_store):
    record = JobApplicationRecord.model_validate(make_application(roleTitle="<b>raw</b>"))
    draft_store.save(record)
    assert draft_store.load() == record


def test_draft_is_camel_case_json_under_fixed_key(memory_store, draft_store):
    draft_store.save(JobApplicationRecord(role_title="Bob"))
    stored = json.loads(memory_store.get_item("job-application-draft"))
    assert stored["roleTitle"] == "Bob"
    assert stored["isLinkedInConnection"] is False
    assert DEFAULT_DRAFT_KEY == "job-application-draft"


def test_save_overwrites_previous_snapshot(draft_store):
    draft_store.save(JobApplicationRecord(role_title="First"))
    draft_store.save(JobApplicationRecord(role_title="Second"))
    assert draft_store.load().role_title == "Second"


@pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]", '"a string"', '{"roleTitle": 5}'])
def test_corrupted_draft_is_discarded(memory_store, draft_store, raw):
    memory_store.set_item(DEFAULT_DRAFT_KEY, raw)
    assert draft_store.load() is None
    assert memory_store.get_item(DEFAULT_DRAFT_KEY) is None
    # later saves are unaffected
    draft_store.save(JobApplicationRecord(role_title="Bob"))
    assert draft_store.load().role_title == "Bob"


def test_partial_draft_fills_defaults(memory_store, draft_store):
    memory_store.set_item(DEFAULT_DRAFT_KEY, json.dumps({"roleTitle": "Bob", "salary": None, "extra": 1}))
    record = draft_store.load()
    assert record.role_title == "Bob"
    assert record.salary == ""
    assert record.is_linked_in_connection is False


def test_clear_removes_snapshot(draft_store):
    draft_store.save(JobApplicationRecord(role_title="Bob"))
    draft_store.clear()
    assert draft_store.load() is None


def test_storage_failures_are_logged_not_raised(caplog):
    store = DraftStore(BrokenStore())
    with caplog.at_level(logging.WARNING, logger="jobform.storage.draft_storage"):
        assert store.save(JobApplicationRecord(role_title="Bob")) is False
        assert store.load() is None
        store.clear()
        assert store.has_draft() is False
    assert "quota exceeded" in caplog.text


def test_file_store_survives_reload(tmp_path):
    record = JobApplicationRecord(role_title="Bob", location="Zürich")
    DraftStore(FileKeyValueStore(str(tmp_path))).save(record)

    path = tmp_path / "job-application-draft.json"
    assert json.loads(path.read_text(encoding="utf-8"))["location"] == "Zürich"

    reloaded = DraftStore(FileKeyValueStore(str(tmp_path)))
    assert reloaded.load() == record
    reloaded.clear()
    assert not path.exists()


def test_file_store_leaves_no_temp_files(tmp_path):
    store = DraftStore(FileKeyValueStore(str(tmp_path)))
    store.save(JobApplicationRecord(role_title="One"))
    store.save(JobApplicationRecord(role_title="Two"))
    assert os.listdir(tmp_path) == ["job-application-draft.json"]


def test_file_store_errors_become_storage_errors(tmp_path):
    blocked = tmp_path / "blocked"
    blocked.write_text("not a directory", encoding="utf-8")
    backend = FileKeyValueStore(str(blocked))
    with pytest.raises(StorageError):
        backend.set_item("draft", "{}")
    assert DraftStore(backend).save(JobApplicationRecord()) is False


def test_memory_store_can_be_seeded():
    store = MemoryKeyValueStore({"k": "v"})
    assert store.get_item("k") == "v"
    store.remove_item("k")
    store.remove_item("k")
    assert store.get_item("k") is None
