"""
history/write.py
- Purpose: Write-side DB operations for prompt history.
- Design: No business logic; persistence only. The caller controls the transaction.
"""

from sqlalchemy.orm import Session

from prompter.models.prompt_history import PromptHistory
from prompter.models.prompt_version import PromptVersion
from prompter.schemas.history import HistoryRecord


class HistoryWriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def insert(self, record: HistoryRecord) -> PromptHistory:
        row = PromptHistory(id=record.id, prompt_text=record.prompt_text, created_at=record.created_at)
        self._apply_fields(row, record)
        self.db.add(row)
        self._append_versions(row, record)
        self.db.flush()
        return row

    def replace(self, row: PromptHistory, record: HistoryRecord) -> PromptHistory:
        """
        Whole-record replace of the mutable fields.
        Versions are append-only: rows already stored are never touched.
        """
        self._apply_fields(row, record)
        self._append_versions(row, record)
        self.db.flush()
        return row

    def delete_by_id(self, record_id: str) -> bool:
        row = self.db.get(PromptHistory, record_id)
        if not row:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    def delete_all(self) -> int:
        # ORM-level delete so version rows cascade even without FK enforcement
        rows = self.db.query(PromptHistory).all()
        for row in rows:
            self.db.delete(row)
        self.db.flush()
        return len(rows)

    def _apply_fields(self, row: PromptHistory, record: HistoryRecord) -> None:
        row.is_archived = record.is_archived
        row.is_favorite = record.is_favorite
        row.status = record.status.value
        row.error_message = record.error_message
        row.selected_version_index = record.selected_version_index

    def _append_versions(self, row: PromptHistory, record: HistoryRecord) -> None:
        stored = {v.id for v in row.versions}
        for position, version in enumerate(record.versions):
            if version.id in stored:
                continue
            row.versions.append(
                PromptVersion(
                    id=version.id,
                    position=position,
                    output=version.output,
                    created_at=version.created_at,
                )
            )
