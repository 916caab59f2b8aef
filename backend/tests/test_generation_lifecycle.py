import asyncio

import pytest

from conftest import FakeGenerationClient, settle
from prompter.constants.statuses import GenerationStatus
from prompter.core import AppError, ErrorCode
from prompter.llm.errors import LLMTimeoutError
from prompter.llm.types import StreamChunk
from prompter.services.generation_service import GenerationOrchestrator


def test_submit_success_creates_completed_record_with_one_version(orchestrator, history, fake_client):
    async def scenario():
        rid = orchestrator.submit("Explain recursion")
        assert history.get(rid).status == GenerationStatus.GENERATING
        assert orchestrator.is_active(rid)
        await settle(orchestrator, rid)
        return rid

    rid = asyncio.run(scenario())
    record = history.get(rid)

    assert record.status == GenerationStatus.COMPLETED
    assert [v.output for v in record.versions] == ["Improved: Explain recursion"]
    assert record.selected_version_index == 0
    assert record.error_message is None
    assert not orchestrator.is_active(rid)
    assert fake_client.calls == [("Explain recursion", "SYSTEM")]


def test_retry_after_success_appends_second_version(orchestrator, history, fake_client):
    fake_client.outputs = ["first", "second"]

    async def scenario():
        rid = orchestrator.submit("Explain recursion")
        await settle(orchestrator, rid)
        assert orchestrator.retry(rid) == rid
        await settle(orchestrator, rid)
        return rid

    record = history.get(asyncio.run(scenario()))

    assert record.status == GenerationStatus.COMPLETED
    assert [v.output for v in record.versions] == ["first", "second"]
    assert record.selected_version_index == 1


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_submit_is_a_noop(orchestrator, history, text):
    async def scenario():
        return orchestrator.submit(text)

    assert asyncio.run(scenario()) is None
    assert history.list("all") == []
    assert orchestrator.active_ids() == []


def test_dedup_is_trimmed_and_case_sensitive(orchestrator, history):
    async def scenario():
        a = orchestrator.submit("Foo ")
        await settle(orchestrator, a)
        b = orchestrator.submit("Foo")
        await settle(orchestrator, b)
        c = orchestrator.submit("foo")
        await settle(orchestrator, c)
        return a, b, c

    a, b, c = asyncio.run(scenario())

    assert a == b
    assert a != c
    assert len(history.list("all")) == 2
    assert history.get(a).prompt_text == "Foo"
    assert len(history.get(a).versions) == 2


def test_archived_record_is_not_reused(orchestrator, history):
    async def scenario():
        a = orchestrator.submit("Draft an email")
        await settle(orchestrator, a)
        history.set_archived(a, True)
        b = orchestrator.submit("Draft an email")
        await settle(orchestrator, b)
        return a, b

    a, b = asyncio.run(scenario())
    assert a != b


def test_versions_are_append_only(orchestrator, history, fake_client):
    fake_client.outputs = ["v1", "v2", "v3"]

    async def scenario():
        rid = orchestrator.submit("Summarize logs")
        await settle(orchestrator, rid)
        before = list(history.get(rid).versions)
        for _ in range(2):
            orchestrator.submit("Summarize logs")
            await settle(orchestrator, rid)
        return rid, before

    rid, before = asyncio.run(scenario())
    versions = history.get(rid).versions

    assert len(versions) == 3
    assert versions[0] == before[0]
    assert [v.output for v in versions] == ["v1", "v2", "v3"]


def test_second_submit_while_in_flight_is_rejected(history):
    client = FakeGenerationClient(delay=10)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("slow one")
        await asyncio.sleep(0)
        with pytest.raises(AppError) as exc:
            orchestrator.submit("slow one ")
        await asyncio.sleep(0)
        orchestrator.cancel(rid)
        await asyncio.sleep(0)
        return rid, exc.value

    rid, err = asyncio.run(scenario())

    assert err.status_code == 409
    assert err.code == ErrorCode.GENERATION_IN_PROGRESS
    assert len(client.calls) == 1
    assert history.get(rid).status == GenerationStatus.CANCELLED


def test_cancel_then_late_success_is_ignored(history):
    client = FakeGenerationClient(delay=10)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("x")
        await asyncio.sleep(0)
        task = orchestrator.task_for(rid)
        assert orchestrator.cancel(rid) is True
        results = await asyncio.gather(task, return_exceptions=True)
        assert isinstance(results[0], asyncio.CancelledError)
        applied = orchestrator.on_generation_success(rid, "late output")
        return rid, applied

    rid, applied = asyncio.run(scenario())
    record = history.get(rid)

    assert applied is False
    assert record.status == GenerationStatus.CANCELLED
    assert record.versions == []


def test_callback_from_superseded_attempt_is_dropped(history):
    client = FakeGenerationClient(delay=10)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("x")
        orchestrator.cancel(rid)
        orchestrator.retry(rid)
        stale = orchestrator.on_generation_success(rid, "stale", attempt="not-the-current-attempt")
        stale_failure = orchestrator.on_generation_failure(rid, "stale", attempt="not-the-current-attempt")
        state = history.get(rid).status
        orchestrator.cancel(rid)
        await asyncio.sleep(0)
        return rid, stale, stale_failure, state

    rid, stale, stale_failure, state = asyncio.run(scenario())

    assert stale is False
    assert stale_failure is False
    assert state == GenerationStatus.GENERATING
    assert history.get(rid).versions == []


def test_cancel_then_retry_completes_with_one_version(history):
    client = FakeGenerationClient(delay=10)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("x")
        await asyncio.sleep(0)
        orchestrator.cancel(rid)
        assert history.get(rid).status == GenerationStatus.CANCELLED
        assert history.get(rid).versions == []

        client.delay = 0
        orchestrator.retry(rid)
        await settle(orchestrator, rid)
        return rid

    record = history.get(asyncio.run(scenario()))

    assert record.status == GenerationStatus.COMPLETED
    assert len(record.versions) == 1


def test_cancel_on_terminal_or_unknown_record_is_noop(orchestrator, history):
    async def scenario():
        rid = orchestrator.submit("done soon")
        await settle(orchestrator, rid)
        return rid

    rid = asyncio.run(scenario())

    assert orchestrator.cancel(rid) is False
    assert orchestrator.cancel("missing") is False
    assert history.get(rid).status == GenerationStatus.COMPLETED


def test_llm_error_marks_failed_and_retry_clears_error(history):
    client = FakeGenerationClient(error=LLMTimeoutError("claude_cli request timed out after 120s"))
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("Write a haiku")
        await settle(orchestrator, rid)
        failed = history.get(rid).model_copy(deep=True)

        client.error = None
        orchestrator.retry(rid)
        assert history.get(rid).error_message is None
        await settle(orchestrator, rid)
        return failed, history.get(rid)

    failed, record = asyncio.run(scenario())

    assert failed.status == GenerationStatus.FAILED
    assert failed.error_message == "claude_cli request timed out after 120s"
    assert failed.versions == []
    assert record.status == GenerationStatus.COMPLETED
    assert record.error_message is None


def test_unexpected_exception_is_recorded_as_failure(history):
    client = FakeGenerationClient(error=RuntimeError("boom"))
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("anything")
        await settle(orchestrator, rid)
        return rid

    record = history.get(asyncio.run(scenario()))
    assert record.status == GenerationStatus.FAILED
    assert record.error_message == "boom"


def test_empty_model_output_is_a_failure(history):
    client = FakeGenerationClient(outputs=["   "])
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("anything")
        await settle(orchestrator, rid)
        return rid

    record = history.get(asyncio.run(scenario()))
    assert record.status == GenerationStatus.FAILED
    assert record.versions == []


def test_retry_rejects_in_flight_and_unknown_records(history):
    client = FakeGenerationClient(delay=10)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("busy")
        with pytest.raises(AppError) as busy:
            orchestrator.retry(rid)
        with pytest.raises(AppError) as missing:
            orchestrator.retry("nope")
        orchestrator.cancel(rid)
        await asyncio.sleep(0)
        return busy.value, missing.value

    busy, missing = asyncio.run(scenario())
    assert busy.status_code == 409
    assert busy.code == ErrorCode.GENERATION_INVALID_STATE
    assert missing.status_code == 404


def test_retry_reuses_last_instruction(orchestrator, fake_client):
    async def scenario():
        rid = orchestrator.submit("Plan a trip", "Be brief")
        await settle(orchestrator, rid)
        orchestrator.retry(rid)
        await settle(orchestrator, rid)
        orchestrator.retry(rid, "Be thorough")
        await settle(orchestrator, rid)

    asyncio.run(scenario())
    assert [c[1] for c in fake_client.calls] == ["Be brief", "Be brief", "Be thorough"]


def test_distinct_records_generate_in_parallel(history):
    client = FakeGenerationClient(delay=0.05)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        a = orchestrator.submit("first")
        b = orchestrator.submit("second")
        assert set(orchestrator.active_ids()) == {a, b}
        await asyncio.gather(settle(orchestrator, a), settle(orchestrator, b))
        return a, b

    a, b = asyncio.run(scenario())
    assert history.get(a).status == GenerationStatus.COMPLETED
    assert history.get(b).status == GenerationStatus.COMPLETED


def test_streaming_preview_then_final_version(history):
    client = FakeGenerationClient(chunks=["Hel", "lo ", "world"])
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        client.gate = asyncio.Event()
        rid = orchestrator.submit("stream me", stream=True)
        for _ in range(100):
            if orchestrator.preview(rid):
                break
            await asyncio.sleep(0.01)
        mid = orchestrator.preview(rid)
        client.gate.set()
        await settle(orchestrator, rid)
        return rid, mid

    rid, mid = asyncio.run(scenario())
    record = history.get(rid)

    assert mid == "Hel"
    assert orchestrator.preview(rid) is None
    assert record.status == GenerationStatus.COMPLETED
    assert record.versions[-1].output == "Hello world"


def test_snapshot_chunks_replace_preview_instead_of_appending(history):
    client = FakeGenerationClient(
        chunks=[
            StreamChunk("Draft", snapshot=True),
            StreamChunk("Draft, revised", snapshot=True),
        ]
    )
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        client.gate = asyncio.Event()
        rid = orchestrator.submit("stream me", stream=True)
        for _ in range(100):
            if orchestrator.preview(rid):
                break
            await asyncio.sleep(0.01)
        mid = orchestrator.preview(rid)
        client.gate.set()
        await settle(orchestrator, rid)
        return rid, mid

    rid, mid = asyncio.run(scenario())

    assert mid == "Draft"
    # no final chunk: the last snapshot is the output, not the concatenation
    assert history.get(rid).versions[-1].output == "Draft, revised"


def test_cancelled_stream_discards_partial_output(history):
    client = FakeGenerationClient(chunks=["partial", " rest"])
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        client.gate = asyncio.Event()
        rid = orchestrator.submit("stream me", stream=True)
        for _ in range(100):
            if orchestrator.preview(rid):
                break
            await asyncio.sleep(0.01)
        task = orchestrator.task_for(rid)
        orchestrator.cancel(rid)
        await asyncio.gather(task, return_exceptions=True)
        return rid

    rid = asyncio.run(scenario())
    record = history.get(rid)

    assert record.status == GenerationStatus.CANCELLED
    assert record.versions == []
    assert orchestrator.preview(rid) is None


def test_delete_cancels_in_flight_generation(history):
    client = FakeGenerationClient(delay=10)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        rid = orchestrator.submit("to be deleted")
        await asyncio.sleep(0)
        task = orchestrator.task_for(rid)
        assert orchestrator.delete(rid) is True
        await asyncio.gather(task, return_exceptions=True)
        return rid, task

    rid, task = asyncio.run(scenario())
    assert task.cancelled()
    assert history.get(rid) is None
    assert not orchestrator.is_active(rid)


def test_shutdown_cancels_everything(history):
    client = FakeGenerationClient(delay=10)
    orchestrator = GenerationOrchestrator(history, lambda: client)

    async def scenario():
        a = orchestrator.submit("a")
        b = orchestrator.submit("b")
        await asyncio.sleep(0)
        await orchestrator.shutdown()
        return a, b

    a, b = asyncio.run(scenario())
    assert orchestrator.active_ids() == []
    # left as generating on disk; the next startup recovers it
    assert history.get(a).status == GenerationStatus.GENERATING
