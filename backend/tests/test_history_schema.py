from datetime import datetime, timezone

import pytest

from prompter.constants.statuses import GenerationStatus
from prompter.schemas.history import HistoryRecord


def test_legacy_generated_output_becomes_single_version():
    record = HistoryRecord.model_validate(
        {
            "id": "a1",
            "prompt": "Explain recursion",
            "timestamp": "2024-03-01T10:00:00Z",
            "generatedOutput": "Recursion is ...",
            "isFavorite": True,
        }
    )

    assert record.prompt_text == "Explain recursion"
    assert record.is_favorite is True
    assert record.status == GenerationStatus.COMPLETED
    assert [v.output for v in record.versions] == ["Recursion is ..."]
    assert record.versions[0].created_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


def test_legacy_without_output_is_pending():
    record = HistoryRecord.model_validate({"id": "a2", "prompt": "Idea", "timestamp": 1709287200})

    assert record.status == GenerationStatus.PENDING
    assert record.versions == []
    assert record.created_at.tzinfo is not None


def test_legacy_camel_case_status_is_parsed():
    record = HistoryRecord.model_validate(
        {
            "id": "a3",
            "promptText": "Idea",
            "generationStatus": "FAILED",
            "errorMessage": "Network error",
            "isArchived": True,
        }
    )

    assert record.status == GenerationStatus.FAILED
    assert record.error_message == "Network error"
    assert record.is_archived is True


def test_completed_without_versions_is_downgraded():
    record = HistoryRecord(prompt_text="Idea", status=GenerationStatus.COMPLETED)
    assert record.status == GenerationStatus.PENDING


def test_selected_index_is_clamped_to_last_version():
    record = HistoryRecord.model_validate(
        {
            "prompt_text": "Idea",
            "status": "completed",
            "versions": [{"output": "one"}, {"output": "two"}],
            "selected_version_index": 7,
        }
    )
    assert record.selected_version_index == 1
    assert record.selected_version.output == "two"


def test_add_version_selects_newest_and_select_version_bounds():
    record = HistoryRecord(prompt_text="Idea")
    record.add_version("one")
    record.add_version("two")

    assert record.selected_version_index == 1
    assert record.latest_output == "two"

    record.select_version(0)
    assert record.selected_version.output == "one"

    with pytest.raises(IndexError):
        record.select_version(2)


def test_unknown_status_value_parses_to_pending():
    assert GenerationStatus.parse("weird") == GenerationStatus.PENDING
    assert GenerationStatus.parse(None) == GenerationStatus.PENDING
    assert GenerationStatus.parse(" Generating ") == GenerationStatus.GENERATING
