"""
history/read.py
- Purpose: Read-side DB operations for prompt history.
- Design: Keeps query access patterns centralized; returns domain records.
"""

from sqlalchemy.orm import Session, selectinload

from prompter.constants.statuses import GenerationStatus
from prompter.models.prompt_history import PromptHistory
from prompter.schemas.history import GenerationVersion, HistoryRecord, as_utc


def to_record(row: PromptHistory) -> HistoryRecord:
    return HistoryRecord.model_validate(
        {
            "id": row.id,
            "prompt_text": row.prompt_text,
            "created_at": as_utc(row.created_at),
            "is_archived": row.is_archived,
            "is_favorite": row.is_favorite,
            "status": GenerationStatus.parse(row.status),
            "error_message": row.error_message,
            "selected_version_index": row.selected_version_index,
            "versions": [
                GenerationVersion(id=v.id, output=v.output, created_at=as_utc(v.created_at))
                for v in row.versions
            ],
        }
    )


class HistoryReadRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, record_id: str) -> PromptHistory | None:
        return (
            self.db.query(PromptHistory)
            .options(selectinload(PromptHistory.versions))
            .filter(PromptHistory.id == record_id)
            .first()
        )

    def list_all(self) -> list[PromptHistory]:
        return (
            self.db.query(PromptHistory)
            .options(selectinload(PromptHistory.versions))
            .order_by(PromptHistory.created_at.desc())
            .all()
        )

    def find_by_prompt_text(self, prompt_text: str) -> PromptHistory | None:
        return (
            self.db.query(PromptHistory)
            .options(selectinload(PromptHistory.versions))
            .filter(PromptHistory.prompt_text == prompt_text, PromptHistory.is_archived == False)  # noqa: E712
            .order_by(PromptHistory.created_at.desc())
            .first()
        )
