"""
prompt_history.py
- Purpose: One row per submitted prompt idea + its generation status.
- Generated outputs live in prompt_versions (append-only, ordered by position).
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prompter.models.base import Base, utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class PromptHistory(Base):
    __tablename__ = "prompt_history"
    __table_args__ = (
        # Default list view: non-archived, newest first
        Index("ix_prompt_history_archived_created_at", "is_archived", "created_at"),
        # Dedup lookup on submit
        Index("ix_prompt_history_prompt_text", "prompt_text"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    prompt_text: Mapped[str] = mapped_column(Text, nullable=False)

    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_version_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    versions: Mapped[list["PromptVersion"]] = relationship(
        back_populates="history",
        cascade="all, delete-orphan",
        order_by="PromptVersion.position",
        passive_deletes=True,
    )
