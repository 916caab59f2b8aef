# prompter/llm/client.py
"""
Generation Client: the orchestrator's only view of an LLM backend.

- Frames the user's text with the registered user template.
- Enforces LLM_TIMEOUT_SECONDS over the whole call (or the whole stream).
- Logs one telemetry line per call. No automatic retries.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import AsyncIterator, Optional, Protocol

from prompter.core.config import Settings
from prompter.llm.errors import LLMError, LLMNotFoundError, LLMParseError, LLMTimeoutError
from prompter.llm.prompts.registry import get_prompt, render_template
from prompter.llm.providers.claude_cli import ClaudeCliProvider
from prompter.llm.providers.gemini import GeminiProvider
from prompter.llm.providers.openai import OpenAIProvider
from prompter.llm.telemetry import LLMCallLog, log_llm_call, now_ms
from prompter.llm.types import LLMRequest, LLMResponse, StreamChunk
from prompter.schemas.settings import UserSettings

logger = logging.getLogger("prompter.llm.client")


class Provider(Protocol):
    name: str

    def availability(self) -> Optional[str]: ...

    async def generate(self, req: LLMRequest) -> LLMResponse: ...

    def stream(self, req: LLMRequest) -> AsyncIterator[StreamChunk]: ...


class GenerationClient(Protocol):
    async def generate(self, prompt_text: str, system_instruction: str) -> str: ...

    def generate_stream(self, prompt_text: str, system_instruction: str) -> AsyncIterator[StreamChunk]: ...


class LLMClient:
    def __init__(
        self,
        provider: Provider,
        *,
        model: str,
        timeout_seconds: int = 120,
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
        user_prompt_name: str = "user_improve",
        log_prompts: bool = False,
    ):
        self.provider = provider
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.user_prompt_name = user_prompt_name
        self.log_prompts = log_prompts

    def _request(self, prompt_text: str, system_instruction: str) -> LLMRequest:
        user_prompt = render_template(get_prompt(self.user_prompt_name).template, {"prompt": prompt_text})
        req = LLMRequest(
            trace_id=str(uuid.uuid4()),
            provider=self.provider.name,
            model=self.model,
            system_instruction=system_instruction,
            user_prompt=user_prompt,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            timeout_seconds=self.timeout_seconds,
        )
        if self.log_prompts:
            logger.info("llm.prompt", extra={"trace_id": req.trace_id, "system": system_instruction, "user": user_prompt})
        return req

    def _log(self, req: LLMRequest, *, streaming: bool, start_ms: int, ok: bool, chars: int = 0, error: Exception | None = None) -> None:
        log_llm_call(
            LLMCallLog(
                trace_id=req.trace_id,
                provider=req.provider,
                model=req.model,
                streaming=streaming,
                latency_ms=now_ms() - start_ms,
                ok=ok,
                output_chars=chars,
                error_type=type(error).__name__ if error else None,
            )
        )

    async def generate(self, prompt_text: str, system_instruction: str) -> str:
        req = self._request(prompt_text, system_instruction)
        start_ms = now_ms()
        try:
            resp = await asyncio.wait_for(self.provider.generate(req), timeout=self.timeout_seconds)
            text = (resp.output_text or "").strip()
            if not text:
                raise LLMParseError(f"{self.provider.name} returned an empty response")
        except asyncio.TimeoutError as e:
            err = LLMTimeoutError(f"{self.provider.name} request timed out after {self.timeout_seconds}s")
            self._log(req, streaming=False, start_ms=start_ms, ok=False, error=err)
            raise err from e
        except LLMError as e:
            self._log(req, streaming=False, start_ms=start_ms, ok=False, error=e)
            raise

        self._log(req, streaming=False, start_ms=start_ms, ok=True, chars=len(text))
        return text

    async def generate_stream(self, prompt_text: str, system_instruction: str) -> AsyncIterator[StreamChunk]:
        req = self._request(prompt_text, system_instruction)
        start_ms = now_ms()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds
        chunks = self.provider.stream(req).__aiter__()
        chars = 0
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise asyncio.TimeoutError()
                try:
                    chunk = await asyncio.wait_for(chunks.__anext__(), timeout=remaining)
                except StopAsyncIteration:
                    break
                chars += len(chunk.text)
                yield chunk
        except asyncio.TimeoutError as e:
            err = LLMTimeoutError(f"{self.provider.name} request timed out after {self.timeout_seconds}s")
            self._log(req, streaming=True, start_ms=start_ms, ok=False, error=err)
            raise err from e
        except LLMError as e:
            self._log(req, streaming=True, start_ms=start_ms, ok=False, error=e)
            raise
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()

        self._log(req, streaming=True, start_ms=start_ms, ok=True, chars=chars)


def build_provider(config: Settings, user: UserSettings) -> Provider:
    if user.provider == "claude_cli":
        return ClaudeCliProvider(model=user.model, cli_path=config.CLAUDE_CLI_PATH)
    if user.provider == "openai":
        return OpenAIProvider(api_key=user.api_key, model=user.model, base_url=config.OPENAI_BASE_URL)
    if user.provider == "gemini":
        return GeminiProvider(api_key=user.api_key, model=user.model)
    raise LLMNotFoundError(f"Unsupported provider: {user.provider}")


def build_generation_client(config: Settings, user: UserSettings) -> LLMClient:
    provider = build_provider(config, user)
    return LLMClient(
        provider,
        model=user.model,
        timeout_seconds=config.LLM_TIMEOUT_SECONDS,
        temperature=config.LLM_TEMPERATURE,
        max_output_tokens=config.LLM_MAX_OUTPUT_TOKENS,
        log_prompts=config.LLM_LOG_PROMPTS,
    )
