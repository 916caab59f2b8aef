"""
statuses.py
- Purpose: Central source of truth for generation statuses.
- Design: Keep client-facing statuses stable and explicit (lowercase wire values).
"""

from enum import Enum


class GenerationStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_cancellable(self) -> bool:
        return self in (GenerationStatus.PENDING, GenerationStatus.GENERATING)

    @classmethod
    def parse(cls, value: str | None) -> "GenerationStatus":
        """Lenient parse for persisted values; unknown or missing -> PENDING."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.PENDING


TERMINAL_STATUSES = frozenset(
    {GenerationStatus.COMPLETED, GenerationStatus.FAILED, GenerationStatus.CANCELLED}
)

# States retry() accepts; anything but an in-flight generation.
RETRYABLE_STATUSES = frozenset(
    {
        GenerationStatus.FAILED,
        GenerationStatus.CANCELLED,
        GenerationStatus.COMPLETED,
        GenerationStatus.PENDING,
    }
)
