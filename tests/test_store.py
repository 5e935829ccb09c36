"""Tests for the JSON-file record store."""

import json
import os
import re

import pytest

from mdp_dashboard.core.records import validate_submission
from mdp_dashboard.core.store import NotFoundFault, RecordStore, StorageFault, new_record_id


@pytest.fixture
def submission(valid_form):
    return validate_submission(valid_form)


class TestAppend:

    def test_ensure_creates_empty_envelope(self, store):
        with open(store.path, encoding="utf-8") as f:
            raw = json.load(f)
        assert raw["responses"] == []
        assert raw["metadata"]["version"] == "1.0.0"
        assert raw["metadata"]["totalResponses"] == 0
        assert store.list_all() == []

    def test_append_assigns_id_timestamp_and_score(self, store, submission):
        record = store.append(submission)
        assert re.fullmatch(r"mdp_\d+_[0-9a-z]{9}", record.id)
        assert record.timestamp.endswith("Z")
        assert record.composite_score == 3.05
        assert record.mdp_name == "Jordan Lee"
        assert record.rotation == "2"

    def test_append_persists_in_insertion_order(self, store, submission, valid_form):
        first = store.append(submission)
        valid_form["mdpName"] = "Riley Park"
        second = store.append(validate_submission(valid_form))
        reopened = RecordStore(store.path)
        assert [r.id for r in reopened.list_all()] == [first.id, second.id]

    def test_metadata_tracks_count_and_keeps_created(self, store, submission):
        with open(store.path, encoding="utf-8") as f:
            created = json.load(f)["metadata"]["created"]
        store.append(submission)
        store.append(submission)
        with open(store.path, encoding="utf-8") as f:
            meta = json.load(f)["metadata"]
        assert meta["totalResponses"] == 2
        assert meta["created"] == created

    def test_ids_are_unique(self, store, submission):
        ids = {store.append(submission).id for _ in range(5)}
        assert len(ids) == 5

    def test_id_collision_is_retried(self, store, submission, monkeypatch):
        existing = store.append(submission)
        fresh = iter([existing.id, "mdp_1_abcdefghi"])
        monkeypatch.setattr("mdp_dashboard.core.store.new_record_id", lambda: next(fresh))
        assert store.append(submission).id == "mdp_1_abcdefghi"


class TestDelete:

    def test_delete_removes_record(self, store, submission):
        keep = store.append(submission)
        drop = store.append(submission)
        removed = store.delete_by_id(drop.id)
        assert removed == drop
        assert [r.id for r in store.list_all()] == [keep.id]

    def test_delete_unknown_id(self, store, submission):
        store.append(submission)
        with pytest.raises(NotFoundFault):
            store.delete_by_id("mdp_missing")
        assert len(store.list_all()) == 1

    def test_delete_twice(self, store, submission):
        record = store.append(submission)
        store.delete_by_id(record.id)
        with pytest.raises(NotFoundFault):
            store.delete_by_id(record.id)


class TestFileLayouts:

    def test_reads_bare_array(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps([
            {"id": "mdp_1", "mdpName": "Casey", "function": "Planning", "managerName": "Alice",
             "rotation": 1, "jobKnowledge": 4, "qualityOfWork": 3, "communication": 2, "initiative": 1,
             "compositeScore": 3.05, "timestamp": "2026-01-01T00:00:00.000Z"},
        ]), encoding="utf-8")
        records = RecordStore(path).list_all()
        assert len(records) == 1
        assert records[0].rotation == "1"

    def test_append_to_bare_array_rewrites_envelope(self, tmp_path, submission):
        path = tmp_path / "data.json"
        path.write_text("[]", encoding="utf-8")
        RecordStore(path).append(submission)
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert len(raw["responses"]) == 1
        assert raw["metadata"]["totalResponses"] == 1

    def test_missing_file_reads_empty(self, tmp_path):
        assert RecordStore(tmp_path / "nope.json").list_all() == []

    def test_null_sections_read_as_empty(self, tmp_path, submission):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"responses": None, "metadata": None}), encoding="utf-8")
        store = RecordStore(path)
        assert store.list_all() == []
        store.append(submission)
        assert len(store.list_all()) == 1

    @pytest.mark.parametrize("content", [
        {"responses": [{"id": "x", "compositeScore": "N/A"}]},
        {"responses": [{"mdpName": "No Id", "compositeScore": 3.0}]},
        {"responses": ["not a record"]},
        {"responses": {"id": "x"}},
        {"responses": [], "metadata": ["not", "a", "dict"]},
        "just a string",
    ])
    def test_malformed_content_raises_storage_fault(self, tmp_path, submission, content):
        path = tmp_path / "data.json"
        path.write_text(json.dumps(content), encoding="utf-8")
        store = RecordStore(path)
        with pytest.raises(StorageFault):
            store.list_all()
        with pytest.raises(StorageFault):
            store.append(submission)
        with pytest.raises(StorageFault):
            store.delete_by_id("x")
        assert json.loads(path.read_text(encoding="utf-8")) == content

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageFault):
            RecordStore(path).list_all()


class TestFailedWrite:

    def test_failed_write_leaves_previous_state(self, store, submission, monkeypatch):
        first = store.append(submission)
        before = store.path.read_text(encoding="utf-8")

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(StorageFault):
            store.append(submission)
        monkeypatch.undo()

        assert store.path.read_text(encoding="utf-8") == before
        assert [r.id for r in store.list_all()] == [first.id]
        leftovers = [p for p in store.path.parent.iterdir() if p.name.startswith(".survey-")]
        assert leftovers == []

    def test_failed_delete_keeps_record(self, store, submission, monkeypatch):
        record = store.append(submission)

        def broken_replace(src, dst):
            raise OSError("read-only")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(StorageFault):
            store.delete_by_id(record.id)
        monkeypatch.undo()
        assert [r.id for r in store.list_all()] == [record.id]


def test_new_record_id_format():
    assert re.fullmatch(r"mdp_\d{13}_[0-9a-z]{9}", new_record_id())
