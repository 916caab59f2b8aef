# prompter/llm/telemetry.py

import logging
import time
from dataclasses import dataclass

logger = logging.getLogger("prompter.llm")

@dataclass
class LLMCallLog:
    trace_id: str
    provider: str
    model: str
    streaming: bool
    latency_ms: int
    ok: bool
    output_chars: int = 0
    error_type: str | None = None

def now_ms() -> int:
    return int(time.time() * 1000)

def log_llm_call(item: LLMCallLog) -> None:
    logger.info(
        "llm_call trace_id=%s provider=%s model=%s streaming=%s latency_ms=%s ok=%s chars=%s error=%s",
        item.trace_id,
        item.provider,
        item.model,
        item.streaming,
        item.latency_ms,
        item.ok,
        item.output_chars,
        item.error_type,
    )
