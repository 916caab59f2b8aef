"""
error_reasons.py
- Purpose: Human-friendly "reason" strings.
- Keep these stable; they are surfaced in the UI next to the record.
"""

from enum import Enum


class ErrorReason(str, Enum):
    UNKNOWN = "Unknown error"

    INVALID_INPUT = "Invalid input"
    RESOURCE_NOT_FOUND = "Resource not found"
    ALREADY_EXISTS = "Resource already exists"

    DATABASE_UNAVAILABLE = "Database unavailable"
    LLM_FAILED = "LLM request failed"
    LLM_UNAVAILABLE = "LLM backend unavailable"
    GENERATION_IN_PROGRESS = "A generation is already running for this prompt"
    GENERATION_INVALID_STATE = "Operation not allowed in the current generation state"
    INTERNAL_ERROR = "Internal server error"

    def __str__(self) -> str:
        return self.value
