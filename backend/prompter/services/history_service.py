"""
history_service.py
- Purpose: Authoritative in-memory history for the running process.
- Design: Loaded once from the History Store at startup. Every mutation updates
  memory first, then writes through to the store best-effort: a store failure is
  logged and swallowed so the session keeps working on in-memory state.
"""

from __future__ import annotations

import logging
from typing import Literal

from prompter.constants.statuses import GenerationStatus
from prompter.core import ErrorCode
from prompter.core.errors import not_found, unprocessable
from prompter.repos.history.store import HistoryStore
from prompter.schemas.history import HistoryRecord

logger = logging.getLogger("prompter.history")

ArchivedFilter = Literal["false", "true", "all"]


class HistoryService:
    def __init__(self, store: HistoryStore):
        self.store = store
        self._records: dict[str, HistoryRecord] = {}

    # ----------------------------
    # Startup
    # ----------------------------
    def load(self) -> int:
        """
        Load every record from the store and apply startup recovery:
        anything persisted as `generating` cannot still be running, so it
        goes back to `pending` with no error.
        """
        try:
            records = self.store.list()
        except Exception:
            logger.exception("history.load_failed")
            records = []

        self._records = {r.id: r for r in records}

        recovered = 0
        for record in self._records.values():
            if record.status == GenerationStatus.GENERATING:
                record.status = GenerationStatus.PENDING
                record.error_message = None
                self._write(record)
                recovered += 1

        logger.info("history.loaded", extra={"count": len(self._records), "recovered": recovered})
        return recovered

    # ----------------------------
    # Reads
    # ----------------------------
    def list(self, archived: ArchivedFilter = "false") -> list[HistoryRecord]:
        records = sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)
        if archived == "all":
            return records
        want = archived == "true"
        return [r for r in records if r.is_archived == want]

    def get(self, record_id: str) -> HistoryRecord | None:
        return self._records.get(record_id)

    def require(self, record_id: str) -> HistoryRecord:
        record = self._records.get(record_id)
        if record is None:
            raise not_found(ErrorCode.HISTORY_NOT_FOUND, "History record not found", details={"id": record_id})
        return record

    def find_by_prompt_text(self, normalized_text: str) -> HistoryRecord | None:
        """Exact (case-sensitive) match on trimmed text, non-archived only."""
        for record in self._records.values():
            if not record.is_archived and record.prompt_text.strip() == normalized_text:
                return record
        return None

    # ----------------------------
    # Writes
    # ----------------------------
    def create(self, prompt_text: str) -> HistoryRecord:
        record = HistoryRecord(prompt_text=prompt_text)
        self._records[record.id] = record
        try:
            self.store.insert(record)
        except Exception:
            logger.exception("history.persist_failed", extra={"record_id": record.id, "op": "insert"})
        return record

    def save(self, record: HistoryRecord) -> None:
        self._records[record.id] = record
        self._write(record)

    def delete(self, record_id: str) -> bool:
        if self._records.pop(record_id, None) is None:
            return False
        try:
            self.store.delete(record_id)
        except Exception:
            logger.exception("history.persist_failed", extra={"record_id": record_id, "op": "delete"})
        return True

    def clear(self) -> int:
        count = len(self._records)
        self._records.clear()
        try:
            self.store.clear()
        except Exception:
            logger.exception("history.persist_failed", extra={"op": "clear"})
        return count

    def set_archived(self, record_id: str, archived: bool) -> HistoryRecord:
        record = self.require(record_id)
        record.is_archived = archived
        self._write(record)
        return record

    def set_favorite(self, record_id: str, favorite: bool) -> HistoryRecord:
        record = self.require(record_id)
        record.is_favorite = favorite
        self._write(record)
        return record

    def select_version(self, record_id: str, index: int) -> HistoryRecord:
        record = self.require(record_id)
        try:
            record.select_version(index)
        except IndexError as e:
            raise unprocessable(
                ErrorCode.VERSION_OUT_OF_RANGE,
                str(e),
                details={"id": record_id, "index": index, "version_count": len(record.versions)},
            ) from e
        self._write(record)
        return record

    def _write(self, record: HistoryRecord) -> None:
        try:
            self.store.update(record)
        except Exception:
            logger.exception("history.persist_failed", extra={"record_id": record.id, "op": "update"})
