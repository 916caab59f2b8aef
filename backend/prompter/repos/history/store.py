"""
history/store.py
- Purpose: History Store contract + the SQL-backed implementation.
- Design: Synchronous from the caller's point of view. Each operation runs in
  its own session/transaction obtained from the injected session factory.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.orm import Session, sessionmaker

from prompter.repos.history.read import HistoryReadRepo, to_record
from prompter.repos.history.write import HistoryWriteRepo
from prompter.schemas.history import HistoryRecord


class HistoryStore(Protocol):
    def list(self) -> list[HistoryRecord]:
        """All records, newest first by created_at."""
        ...

    def get(self, record_id: str) -> HistoryRecord | None: ...

    def insert(self, record: HistoryRecord) -> None: ...

    def update(self, record: HistoryRecord) -> None: ...

    def delete(self, record_id: str) -> bool: ...

    def find_by_prompt_text(self, normalized_text: str) -> HistoryRecord | None:
        """Non-archived record whose trimmed prompt equals `normalized_text`."""
        ...

    def clear(self) -> int: ...


class SqlHistoryStore:
    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def list(self) -> list[HistoryRecord]:
        with self._session_factory() as db:
            return [to_record(row) for row in HistoryReadRepo(db).list_all()]

    def get(self, record_id: str) -> HistoryRecord | None:
        with self._session_factory() as db:
            row = HistoryReadRepo(db).get_by_id(record_id)
            return to_record(row) if row else None

    def insert(self, record: HistoryRecord) -> None:
        with self._session_factory() as db:
            HistoryWriteRepo(db).insert(record)
            db.commit()

    def update(self, record: HistoryRecord) -> None:
        with self._session_factory() as db:
            row = HistoryReadRepo(db).get_by_id(record.id)
            write = HistoryWriteRepo(db)
            if row is None:
                write.insert(record)
            else:
                write.replace(row, record)
            db.commit()

    def delete(self, record_id: str) -> bool:
        with self._session_factory() as db:
            deleted = HistoryWriteRepo(db).delete_by_id(record_id)
            db.commit()
            return deleted

    def find_by_prompt_text(self, normalized_text: str) -> HistoryRecord | None:
        with self._session_factory() as db:
            row = HistoryReadRepo(db).find_by_prompt_text(normalized_text.strip())
            return to_record(row) if row else None

    def clear(self) -> int:
        with self._session_factory() as db:
            count = HistoryWriteRepo(db).delete_all()
            db.commit()
            return count
