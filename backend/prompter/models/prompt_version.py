"""
prompt_version.py
- Purpose: One generated output for a prompt. Rows are inserted, never updated.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prompter.models.base import Base, utcnow
from prompter.models.prompt_history import new_id


class PromptVersion(Base):
    __tablename__ = "prompt_versions"
    __table_args__ = (
        UniqueConstraint("history_id", "position", name="uq_prompt_versions_history_position"),
        Index("ix_prompt_versions_history_id", "history_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    history_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("prompt_history.id", ondelete="CASCADE"), nullable=False
    )

    # 0-based; insertion order == chronological order
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    output: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    history: Mapped["PromptHistory"] = relationship(back_populates="versions")
