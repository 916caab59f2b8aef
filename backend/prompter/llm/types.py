# prompter/llm/types.py
from dataclasses import dataclass
from typing import Any

JsonDict = dict[str, Any]

@dataclass(frozen=True)
class LLMRequest:
    trace_id: str
    provider: str                   # "claude_cli" | "openai" | "gemini"
    model: str                      # e.g. "sonnet", "gpt-4o"

    system_instruction: str
    user_prompt: str                # already framed ("Improve this prompt: ...")

    temperature: float
    max_output_tokens: int
    timeout_seconds: int

@dataclass(frozen=True)
class LLMResponse:
    trace_id: str
    provider: str
    model: str
    output_text: str

    # Optional metadata (provider-dependent)
    latency_ms: int
    raw: JsonDict | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None

@dataclass(frozen=True)
class StreamChunk:
    """
    Incremental text. A chunk with final=True carries the provider's own
    aggregate result and replaces whatever deltas were collected so far.
    A chunk with snapshot=True is the whole output so far (not a delta) and
    replaces the preview.
    """
    text: str
    final: bool = False
    snapshot: bool = False
