import asyncio

import pytest

from prompter.db.session import create_db_engine, create_session_factory, init_db
from prompter.llm.types import StreamChunk
from prompter.repos.history.store import SqlHistoryStore
from prompter.services.generation_service import GenerationOrchestrator
from prompter.services.history_service import HistoryService


class FakeGenerationClient:
    """
    Scripted Generation Client.
    - outputs: returned in order, then "Improved: <prompt>"
    - error: raised instead of returning
    - delay: seconds to sleep before answering (lets tests cancel mid-call)
    - chunks: streamed deltas (str) or ready-made StreamChunks; `gate`
      (asyncio.Event) pauses after the first one
    """

    def __init__(self, outputs=None, *, error=None, delay=0.0, chunks=None):
        self.outputs = list(outputs or [])
        self.error = error
        self.delay = delay
        self.chunks = list(chunks or [])
        self.gate = None
        self.calls = []

    async def generate(self, prompt_text, system_instruction):
        self.calls.append((prompt_text, system_instruction))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.outputs:
            return self.outputs.pop(0)
        return f"Improved: {prompt_text}"

    async def generate_stream(self, prompt_text, system_instruction):
        self.calls.append((prompt_text, system_instruction))
        for i, chunk in enumerate(self.chunks):
            yield chunk if isinstance(chunk, StreamChunk) else StreamChunk(chunk)
            if i == 0 and self.gate is not None:
                await self.gate.wait()
        if self.error is not None:
            raise self.error


async def settle(orchestrator, record_id):
    """Wait for the record's in-flight task (if any) to finish."""
    task = orchestrator.task_for(record_id)
    if task is not None:
        await asyncio.gather(task, return_exceptions=True)


@pytest.fixture
def session_factory():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return SqlHistoryStore(session_factory)


@pytest.fixture
def history(sql_store):
    svc = HistoryService(sql_store)
    svc.load()
    return svc


@pytest.fixture
def fake_client():
    return FakeGenerationClient()


@pytest.fixture
def orchestrator(history, fake_client):
    return GenerationOrchestrator(history, lambda: fake_client, default_instruction="SYSTEM")
