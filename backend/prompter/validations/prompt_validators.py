"""
prompt_validators.py
- Purpose: Validations for user-submitted prompt text and template fields.
- Design: Normalize + validate at the boundary, keep services clean.
"""

from prompter.core import ErrorCode
from prompter.core.errors import unprocessable

MAX_PROMPT_CHARS = 20_000
MAX_TEMPLATE_NAME_CHARS = 120


def normalize_prompt_text(text: str | None) -> str:
    """Trimmed text. Blank input normalizes to "" (callers treat it as a no-op)."""
    return (text or "").strip()


def validate_prompt_text(text: str) -> None:
    if len(text) > MAX_PROMPT_CHARS:
        raise unprocessable(ErrorCode.VALIDATION_ERROR, f"Prompt text exceeds {MAX_PROMPT_CHARS} characters")


def normalize_template_name(name: str | None) -> str:
    n = (name or "").strip()
    if not n or len(n) > MAX_TEMPLATE_NAME_CHARS:
        raise unprocessable(ErrorCode.TEMPLATE_INVALID, f"Template name must be 1-{MAX_TEMPLATE_NAME_CHARS} characters")
    return n


def validate_template_content(content: str | None) -> str:
    if not (content or "").strip():
        raise unprocessable(ErrorCode.TEMPLATE_INVALID, "Template content must not be empty")
    return content
