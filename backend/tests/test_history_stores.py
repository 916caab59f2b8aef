import json
from datetime import datetime, timedelta, timezone

import pytest

from prompter.constants.statuses import GenerationStatus
from prompter.repos.history.json_store import DOCUMENT_VERSION, JsonHistoryStore
from prompter.repos.history.store import SqlHistoryStore
from prompter.schemas.history import HistoryRecord


def _three_version_record() -> HistoryRecord:
    record = HistoryRecord(prompt_text="Round trip me", is_archived=True, is_favorite=False)
    for i in range(3):
        record.add_version(f"output {i}")
    record.status = GenerationStatus.COMPLETED
    record.select_version(1)
    return record


@pytest.fixture(params=["sql", "json"])
def store(request, session_factory, tmp_path):
    if request.param == "sql":
        return SqlHistoryStore(session_factory)
    return JsonHistoryStore(tmp_path / "history.json")


def test_round_trip_preserves_record(store):
    record = _three_version_record()
    store.insert(record)

    loaded = store.get(record.id)

    assert loaded == record
    assert loaded.is_archived is True
    assert loaded.is_favorite is False
    assert [v.output for v in loaded.versions] == ["output 0", "output 1", "output 2"]
    assert loaded.selected_version_index == 1


def test_update_appends_versions_and_replaces_fields(store):
    record = HistoryRecord(prompt_text="Grow")
    store.insert(record)

    record.add_version("first")
    record.status = GenerationStatus.COMPLETED
    store.update(record)
    record.add_version("second")
    record.is_favorite = True
    store.update(record)

    loaded = store.get(record.id)
    assert [v.output for v in loaded.versions] == ["first", "second"]
    assert [v.id for v in loaded.versions] == [v.id for v in record.versions]
    assert loaded.is_favorite is True
    assert loaded.selected_version_index == 1


def test_update_unknown_record_inserts_it(store):
    record = HistoryRecord(prompt_text="Upsert")
    store.update(record)
    assert store.get(record.id) == record


def test_list_is_newest_first(store):
    now = datetime.now(timezone.utc)
    old = HistoryRecord(prompt_text="old", created_at=now - timedelta(days=1))
    new = HistoryRecord(prompt_text="new", created_at=now)
    store.insert(old)
    store.insert(new)

    assert [r.prompt_text for r in store.list()] == ["new", "old"]


def test_find_by_prompt_text_skips_archived(store):
    archived = HistoryRecord(prompt_text="Same", is_archived=True)
    store.insert(archived)
    assert store.find_by_prompt_text("Same") is None

    live = HistoryRecord(prompt_text="Same")
    store.insert(live)
    assert store.find_by_prompt_text("Same").id == live.id
    assert store.find_by_prompt_text("same") is None


def test_delete_and_clear(store):
    a = _three_version_record()
    b = HistoryRecord(prompt_text="b")
    store.insert(a)
    store.insert(b)

    assert store.delete(a.id) is True
    assert store.delete(a.id) is False
    assert store.get(a.id) is None

    assert store.clear() == 1
    assert store.list() == []


def test_sql_delete_cascades_versions(session_factory):
    from prompter.models.prompt_version import PromptVersion

    store = SqlHistoryStore(session_factory)
    record = _three_version_record()
    store.insert(record)
    store.delete(record.id)

    with session_factory() as db:
        assert db.query(PromptVersion).count() == 0


def test_json_store_survives_reopen(tmp_path):
    path = tmp_path / "history.json"
    record = _three_version_record()
    JsonHistoryStore(path).insert(record)

    reopened = JsonHistoryStore(path)

    assert reopened.get(record.id) == record
    assert json.loads(path.read_text())["version"] == DOCUMENT_VERSION
    # atomic write leaves no temp files behind
    assert [p.name for p in tmp_path.iterdir()] == ["history.json"]


def test_json_store_migrates_legacy_document(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "legacy-1",
                    "prompt": "Explain recursion",
                    "timestamp": "2024-03-01T10:00:00Z",
                    "generatedOutput": "Recursion is ...",
                    "isFavorite": True,
                },
                {
                    "id": "legacy-2",
                    "prompt": "Nothing yet",
                    "timestamp": "2024-03-02T10:00:00Z",
                    "generationStatus": "completed",
                },
            ]
        )
    )

    store = JsonHistoryStore(path)

    first = store.get("legacy-1")
    assert [v.output for v in first.versions] == ["Recursion is ..."]
    assert first.status == GenerationStatus.COMPLETED
    assert first.is_favorite is True
    assert store.get("legacy-2").status == GenerationStatus.PENDING

    doc = json.loads(path.read_text())
    assert doc["version"] == DOCUMENT_VERSION
    assert {r["id"] for r in doc["records"]} == {"legacy-1", "legacy-2"}
    assert all("generatedOutput" not in r for r in doc["records"])


def test_json_store_migrates_reference_date_timestamps(tmp_path):
    # 730980000.0 seconds after 2001-01-01 is 2024-03-01T10:00:00Z
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "swift-1",
                    "prompt": "Idea",
                    "mode": "Primary",
                    "timestamp": 730980000.0,
                    "isFavorite": False,
                    "versions": [{"id": "v-1", "output": "Better idea", "timestamp": 730980000.0}],
                },
                {
                    "id": "swift-2",
                    "prompt": "Another idea",
                    "timestamp": 730980000,
                    "generatedOutput": "Another, improved",
                },
            ]
        )
    )
    expected = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    store = JsonHistoryStore(path)
    first = store.get("swift-1")
    second = store.get("swift-2")

    assert first.created_at == expected
    assert first.versions[0].created_at == expected
    assert second.created_at == expected
    assert second.versions[0].created_at == expected

    # written back as ISO strings, so a reload does not shift again
    reopened = JsonHistoryStore(path)
    assert reopened.get("swift-1").created_at == expected
    assert reopened.get("swift-1").versions[0].created_at == expected
    assert all("mode" not in r for r in json.loads(path.read_text())["records"])


def test_json_store_sets_aside_unreadable_file(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json")

    store = JsonHistoryStore(path)

    assert store.list() == []
    assert not path.exists()
    aside = [p for p in tmp_path.iterdir() if p.name.startswith("history.json.corrupt-")]
    assert len(aside) == 1
    assert aside[0].read_text() == "{not json"

    store.insert(HistoryRecord(prompt_text="fresh start"))
    assert [r.prompt_text for r in JsonHistoryStore(path).list()] == ["fresh start"]


def test_json_store_skips_invalid_records_and_keeps_a_copy(tmp_path):
    path = tmp_path / "history.json"
    good = HistoryRecord(prompt_text="keep me").model_dump(mode="json")
    bad = {"id": "broken", "prompt_text": "bad date", "created_at": "not a date", "versions": []}
    path.write_text(json.dumps({"version": DOCUMENT_VERSION, "records": [good, bad]}))

    store = JsonHistoryStore(path)

    assert [r.id for r in store.list()] == [good["id"]]
    assert [r["id"] for r in json.loads(path.read_text())["records"]] == [good["id"]]
    aside = [p for p in tmp_path.iterdir() if p.name.startswith("history.json.corrupt-")]
    assert len(aside) == 1
    assert "broken" in aside[0].read_text()
