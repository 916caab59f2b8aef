import pytest

from prompter.constants.statuses import GenerationStatus
from prompter.core import AppError, ErrorCode
from prompter.schemas.history import HistoryRecord
from prompter.services.history_service import HistoryService


class FailingStore:
    """Store whose every write blows up."""

    def __init__(self, records=None):
        self.records = list(records or [])

    def list(self):
        return list(self.records)

    def get(self, record_id):
        return None

    def insert(self, record):
        raise OSError("disk full")

    def update(self, record):
        raise OSError("disk full")

    def delete(self, record_id):
        raise OSError("disk full")

    def find_by_prompt_text(self, normalized_text):
        return None

    def clear(self):
        raise OSError("disk full")


def test_load_recovers_generating_records_to_pending(sql_store):
    stuck = HistoryRecord(prompt_text="was running", status=GenerationStatus.GENERATING)
    sql_store.insert(stuck)

    svc = HistoryService(sql_store)
    recovered = svc.load()

    assert recovered == 1
    assert svc.get(stuck.id).status == GenerationStatus.PENDING
    assert svc.get(stuck.id).error_message is None
    assert sql_store.get(stuck.id).status == GenerationStatus.PENDING


def test_list_filters_archived(history):
    a = history.create("a")
    b = history.create("b")
    history.set_archived(b.id, True)

    assert [r.id for r in history.list()] == [a.id]
    assert [r.id for r in history.list("true")] == [b.id]
    assert {r.id for r in history.list("all")} == {a.id, b.id}


def test_favorite_and_select_version_write_through(history, sql_store):
    record = history.create("fav me")
    record.add_version("one")
    record.add_version("two")
    record.status = GenerationStatus.COMPLETED
    history.save(record)

    history.set_favorite(record.id, True)
    history.select_version(record.id, 0)

    stored = sql_store.get(record.id)
    assert stored.is_favorite is True
    assert stored.selected_version_index == 0


def test_select_version_out_of_range(history):
    record = history.create("short")
    with pytest.raises(AppError) as exc:
        history.select_version(record.id, 3)
    assert exc.value.code == ErrorCode.VERSION_OUT_OF_RANGE
    assert exc.value.status_code == 422


def test_require_unknown_is_404(history):
    with pytest.raises(AppError) as exc:
        history.require("missing")
    assert exc.value.status_code == 404
    assert exc.value.code == ErrorCode.HISTORY_NOT_FOUND


def test_store_failures_are_swallowed_and_memory_stays_authoritative():
    svc = HistoryService(FailingStore())
    svc.load()

    record = svc.create("still works")
    svc.set_favorite(record.id, True)

    assert svc.get(record.id).is_favorite is True
    assert svc.find_by_prompt_text("still works").id == record.id
    assert svc.delete(record.id) is True
    assert svc.get(record.id) is None


def test_clear_empties_memory_and_store(history, sql_store):
    history.create("one")
    history.create("two")

    assert history.clear() == 2
    assert history.list("all") == []
    assert sql_store.list() == []
