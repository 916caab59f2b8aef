# prompter/core/error_codes.py
from enum import Enum

class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    DB_ERROR = "DB_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Generation lifecycle
    GENERATION_IN_PROGRESS = "GENERATION_IN_PROGRESS"
    GENERATION_INVALID_STATE = "GENERATION_INVALID_STATE"
    HISTORY_NOT_FOUND = "HISTORY_NOT_FOUND"
    VERSION_OUT_OF_RANGE = "VERSION_OUT_OF_RANGE"

    # Templates / settings
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_INVALID = "TEMPLATE_INVALID"
    SETTINGS_INVALID = "SETTINGS_INVALID"

    # LLM backend
    LLM_UNAVAILABLE = "LLM_UNAVAILABLE"

    def __str__(self) -> str:
        return self.value
