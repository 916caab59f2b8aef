"""
generation.py (schemas)
- Purpose: Request/response DTOs for the generation lifecycle endpoints.
"""

from typing import Literal

from pydantic import BaseModel, Field

from prompter.constants.statuses import GenerationStatus

PromptMode = Literal["improve", "short", "long", "variants"]


class SubmitGenerationRequest(BaseModel):
    prompt_text: str = Field(max_length=20_000)
    mode: PromptMode = "improve"
    # Explicit instruction wins over `mode`
    system_instruction: str | None = None
    template_id: str | None = None
    stream: bool = False


class RetryGenerationRequest(BaseModel):
    mode: PromptMode | None = None
    system_instruction: str | None = None
    stream: bool = False


class SubmitGenerationResponse(BaseModel):
    """`id` is None when the input was blank and nothing was started."""
    id: str | None
    status: GenerationStatus | None


class GenerationStateResponse(BaseModel):
    id: str
    status: GenerationStatus
    error_message: str | None = None
    is_active: bool
    preview: str | None = None
    version_count: int
    selected_version_index: int
