"""Tests for scan result persistence."""

import json
import threading
import uuid
from datetime import datetime, timezone

import pytest

from libhealth.models import HealthIssue, IssueSeverity, IssueType, ScanResult
from libhealth.store import ResultStore


def _make_result(library_id=None, issue_count=2, name="Movies") -> ScanResult:
    library_id = library_id or uuid.uuid4()
    issues = [
        HealthIssue(
            item_id=uuid.uuid4(),
            item_name=f"Item {i}",
            library_name=name,
            type=IssueType.MISSING_POSTER,
            severity=IssueSeverity.WARNING,
        )
        for i in range(issue_count)
    ]
    return ScanResult(
        library_id=library_id,
        library_name=name,
        started_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        completed_at=datetime(2024, 5, 1, 12, 5, tzinfo=timezone.utc),
        total_items=10,
        issues_found=len(issues),
        issues=issues,
    )


@pytest.fixture
def store(tmp_path):
    return ResultStore(tmp_path / "data" / "scan_results.json")


def test_store_creates_data_directory(tmp_path):
    ResultStore(tmp_path / "nested" / "dir" / "scan_results.json")
    assert (tmp_path / "nested" / "dir").is_dir()


def test_store_rejects_path_without_filename():
    with pytest.raises(ValueError):
        ResultStore("")


def test_empty_store(store):
    assert store.get_all() == []
    assert store.get(uuid.uuid4()) is None


def test_save_then_get_round_trip(store):
    result = _make_result()
    store.save(result)

    loaded = store.get(result.library_id)
    assert loaded.model_dump() == result.model_dump()
    assert loaded.issues_found == len(loaded.issues)


def test_round_trip_survives_new_store_instance(store):
    result = _make_result()
    store.save(result)

    reopened = ResultStore(store.path)
    assert reopened.get(result.library_id).model_dump() == result.model_dump()


def test_save_replaces_result_for_same_library(store):
    library_id = uuid.uuid4()
    first = _make_result(library_id, issue_count=1)
    second = _make_result(library_id, issue_count=3)

    store.save(first)
    store.save(second)

    stored = store.get_all()
    assert len(stored) == 1
    assert stored[0].id == second.id
    assert store.get(library_id).issues_found == 3


def test_results_for_different_libraries_coexist(store):
    a, b = _make_result(name="Movies"), _make_result(name="Shows")
    store.save(a)
    store.save(b)
    assert {r.library_id for r in store.get_all()} == {a.library_id, b.library_id}


def test_delete_missing_returns_false(store):
    store.save(_make_result())
    assert store.delete(uuid.uuid4()) is False
    assert len(store.get_all()) == 1


def test_delete_existing_removes_it(store):
    result = _make_result()
    store.save(result)

    assert store.delete(result.library_id) is True
    assert store.get(result.library_id) is None
    assert store.get_all() == []


def test_document_uses_camel_case_keys(store):
    store.save(_make_result(issue_count=1))

    document = json.loads(store.path.read_text())
    assert set(document[0]) >= {"id", "libraryId", "libraryName", "issuesFound", "issues"}
    assert document[0]["issues"][0]["type"] == "MissingPoster"
    assert document[0]["issues"][0]["severity"] == "Warning"


def test_corrupt_document_reads_as_empty(store):
    store.path.write_text("{not json")
    assert store.get_all() == []
    assert store.get(uuid.uuid4()) is None


def test_wrong_shape_document_reads_as_empty(store):
    store.path.write_text(json.dumps({"libraryId": "nope"}))
    assert store.get_all() == []


def test_save_over_corrupt_document_recovers(store):
    store.path.write_text("garbage")
    result = _make_result()
    store.save(result)
    assert [r.model_dump() for r in store.get_all()] == [result.model_dump()]


def test_write_leaves_no_temp_files(store):
    store.save(_make_result())
    store.save(_make_result())
    assert [p.name for p in store.data_dir.iterdir()] == ["scan_results.json"]


def test_failed_write_propagates_and_keeps_previous_document(store, monkeypatch):
    original = _make_result()
    store.save(original)

    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("libhealth.store.os.replace", _boom)

    with pytest.raises(OSError):
        store.save(_make_result())

    monkeypatch.undo()
    assert [r.model_dump() for r in store.get_all()] == [original.model_dump()]
    assert [p.name for p in store.data_dir.iterdir()] == ["scan_results.json"]


def test_concurrent_saves_keep_every_library(store):
    results = [_make_result(issue_count=1) for _ in range(20)]
    threads = [threading.Thread(target=store.save, args=(r,)) for r in results]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert {r.library_id for r in store.get_all()} == {r.library_id for r in results}
