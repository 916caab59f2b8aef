"""
generation_service.py
- Purpose: Generation request lifecycle (submit / cancel / retry / callbacks).
- Design:
  - One asyncio task per in-flight record. The active table maps
    record id -> (task, attempt token) and is only touched from the event loop
    thread, so every transition below runs without interleaving.
  - Success/failure callbacks apply only while their attempt is still the
    active one; a cancelled or superseded attempt's late result is dropped.
  - Status changes land in the HistoryService first (authoritative), the
    store write behind it is best-effort.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from prompter.constants.statuses import RETRYABLE_STATUSES, GenerationStatus
from prompter.core import AppError, ErrorCode, ErrorReason
from prompter.core.errors import conflict
from prompter.core.request_context import set_context
from prompter.llm.client import GenerationClient
from prompter.llm.errors import LLMError
from prompter.llm.prompts.registry import DEFAULT_SYSTEM_PROMPT, get_prompt
from prompter.schemas.history import HistoryRecord
from prompter.services.history_service import HistoryService
from prompter.validations.prompt_validators import normalize_prompt_text, validate_prompt_text

logger = logging.getLogger("prompter.generation")


@dataclass
class _Attempt:
    task: asyncio.Task
    token: str
    stream: bool = False


class GenerationOrchestrator:
    def __init__(
        self,
        history: HistoryService,
        client_factory: Callable[[], GenerationClient],
        *,
        default_instruction: Optional[str] = None,
    ):
        self.history = history
        self._client_factory = client_factory
        self._default_instruction = default_instruction or get_prompt(DEFAULT_SYSTEM_PROMPT).template
        self._active: dict[str, _Attempt] = {}
        self._previews: dict[str, str] = {}
        # last instruction per record, reused by retry()
        self._instructions: dict[str, str] = {}

    # ----------------------------
    # Lifecycle entry points
    # ----------------------------
    def submit(self, prompt_text: str, system_instruction: Optional[str] = None, *, stream: bool = False) -> Optional[str]:
        """
        Start a generation for `prompt_text`, reusing the non-archived record
        with identical trimmed text if there is one. Blank input is a no-op
        and returns None. Must be called from inside the running event loop.
        """
        text = normalize_prompt_text(prompt_text)
        if not text:
            return None
        validate_prompt_text(text)

        record = self.history.find_by_prompt_text(text)
        if record is not None and record.id in self._active:
            raise conflict(
                ErrorReason.GENERATION_IN_PROGRESS,
                code=ErrorCode.GENERATION_IN_PROGRESS,
                details={"id": record.id},
            )
        if record is None:
            record = self.history.create(text)
            logger.info("generation.record_created", extra={"record_id": record.id})

        self._start(record, system_instruction, stream=stream)
        return record.id

    def cancel(self, record_id: str) -> bool:
        """Stop an in-flight (or pending) generation. False for terminal/unknown records."""
        record = self.history.get(record_id)
        if record is None or not record.status.is_cancellable:
            return False

        entry = self._active.pop(record_id, None)
        if entry is not None:
            entry.task.cancel()
        self._previews.pop(record_id, None)

        record.status = GenerationStatus.CANCELLED
        record.error_message = None
        self.history.save(record)

        logger.info("generation.cancelled", extra={"record_id": record_id, "had_task": entry is not None})
        return True

    def retry(self, record_id: str, system_instruction: Optional[str] = None, *, stream: bool = False) -> str:
        record = self.history.require(record_id)
        if record_id in self._active or record.status not in RETRYABLE_STATUSES:
            raise conflict(
                ErrorReason.GENERATION_INVALID_STATE,
                code=ErrorCode.GENERATION_INVALID_STATE,
                details={"id": record_id, "status": record.status.value},
            )
        logger.info("generation.retry", extra={"record_id": record_id, "from_status": record.status.value})
        self._start(record, system_instruction, stream=stream)
        return record.id

    def delete(self, record_id: str) -> bool:
        self._abort(record_id)
        self._instructions.pop(record_id, None)
        return self.history.delete(record_id)

    def clear(self) -> int:
        for record_id in list(self._active):
            self._abort(record_id)
        self._instructions.clear()
        return self.history.clear()

    # ----------------------------
    # Completion callbacks
    # ----------------------------
    def on_generation_success(self, record_id: str, output_text: str, *, attempt: Optional[str] = None) -> bool:
        if not self._finish(record_id, attempt):
            logger.info("generation.late_result_dropped", extra={"record_id": record_id, "outcome": "success"})
            return False

        record = self.history.get(record_id)
        if record is None:
            return False

        version = record.add_version(output_text)
        record.status = GenerationStatus.COMPLETED
        record.error_message = None
        self.history.save(record)

        logger.info(
            "generation.completed",
            extra={"record_id": record_id, "version_id": version.id, "version_count": len(record.versions)},
        )
        return True

    def on_generation_failure(self, record_id: str, error_message: str, *, attempt: Optional[str] = None) -> bool:
        if not self._finish(record_id, attempt):
            logger.info("generation.late_result_dropped", extra={"record_id": record_id, "outcome": "failure"})
            return False

        record = self.history.get(record_id)
        if record is None:
            return False

        record.status = GenerationStatus.FAILED
        record.error_message = error_message
        self.history.save(record)

        logger.warning("generation.failed", extra={"record_id": record_id, "error": error_message})
        return True

    # ----------------------------
    # Introspection
    # ----------------------------
    def is_active(self, record_id: str) -> bool:
        return record_id in self._active

    def active_ids(self) -> list[str]:
        return list(self._active)

    def preview(self, record_id: str) -> Optional[str]:
        """Streamed text so far for an in-flight streaming generation."""
        return self._previews.get(record_id)

    def task_for(self, record_id: str) -> Optional[asyncio.Task]:
        entry = self._active.get(record_id)
        return entry.task if entry else None

    async def shutdown(self) -> None:
        """
        Cancel every in-flight task and wait for them to unwind. Records keep
        their persisted `generating` status; the next startup recovers them.
        """
        tasks = [entry.task for entry in self._active.values()]
        self._active.clear()
        self._previews.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("generation.shutdown", extra={"cancelled": len(tasks)})

    # ----------------------------
    # Internals
    # ----------------------------
    def _start(self, record: HistoryRecord, system_instruction: Optional[str], *, stream: bool) -> None:
        loop = asyncio.get_running_loop()

        instruction = (
            (system_instruction or "").strip()
            or self._instructions.get(record.id)
            or self._default_instruction
        )
        self._instructions[record.id] = instruction

        token = uuid.uuid4().hex
        record.error_message = None
        record.status = GenerationStatus.GENERATING
        self.history.save(record)

        task = loop.create_task(
            self._run(record.id, record.prompt_text, instruction, token, stream),
            name=f"generation:{record.id}",
        )
        self._active[record.id] = _Attempt(task=task, token=token, stream=stream)

        logger.info(
            "generation.submitted",
            extra={"record_id": record.id, "attempt": token, "stream": stream},
        )

    def _finish(self, record_id: str, attempt: Optional[str]) -> bool:
        entry = self._active.get(record_id)
        if entry is None:
            return False
        if attempt is not None and entry.token != attempt:
            return False
        del self._active[record_id]
        self._previews.pop(record_id, None)
        return True

    def _abort(self, record_id: str) -> None:
        entry = self._active.pop(record_id, None)
        self._previews.pop(record_id, None)
        if entry is not None:
            entry.task.cancel()
            logger.info("generation.aborted", extra={"record_id": record_id})

    async def _run(self, record_id: str, prompt_text: str, instruction: str, token: str, stream: bool) -> None:
        # runs in a copy of the submitting context; these don't leak back
        set_context(record_id=record_id, attempt=token)
        logger.info("generation.start", extra={"stream": stream})

        try:
            client = self._client_factory()
            if stream:
                output = await self._consume_stream(client, record_id, prompt_text, instruction, token)
            else:
                output = await client.generate(prompt_text, instruction)
        except asyncio.CancelledError:
            logger.info("generation.task_cancelled")
            raise
        except LLMError as e:
            self.on_generation_failure(record_id, str(e), attempt=token)
            return
        except AppError as e:
            self.on_generation_failure(record_id, str(e), attempt=token)
            return
        except Exception as e:
            logger.exception("generation.unexpected_error")
            self.on_generation_failure(record_id, str(e) or type(e).__name__, attempt=token)
            return

        if not (output or "").strip():
            self.on_generation_failure(record_id, "The model returned an empty response", attempt=token)
            return

        self.on_generation_success(record_id, output, attempt=token)

    async def _consume_stream(
        self,
        client: GenerationClient,
        record_id: str,
        prompt_text: str,
        instruction: str,
        token: str,
    ) -> str:
        parts: list[str] = []
        final: Optional[str] = None

        async for chunk in client.generate_stream(prompt_text, instruction):
            if chunk.final:
                final = chunk.text
                continue
            if chunk.snapshot:
                parts = [chunk.text]
            else:
                parts.append(chunk.text)
            entry = self._active.get(record_id)
            if entry is not None and entry.token == token:
                self._previews[record_id] = "".join(parts)

        return final if final is not None else "".join(parts)
