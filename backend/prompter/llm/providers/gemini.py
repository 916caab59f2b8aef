# prompter/llm/providers/gemini.py
from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from prompter.llm.errors import LLMNetworkError, LLMNotFoundError, LLMTimeoutError
from prompter.llm.telemetry import now_ms
from prompter.llm.types import LLMRequest, LLMResponse, StreamChunk


@dataclass
class GeminiProvider:
    """
    Gemini provider using Google Gen AI SDK (google-genai), async surface.
    Single-attempt.
    """
    api_key: Optional[str]
    model: str
    _client: Optional[genai.Client] = None

    name = "gemini"

    def availability(self) -> Optional[str]:
        if not (self.api_key or "").strip():
            return "GEMINI_API_KEY is missing"
        return None

    def _get_client(self) -> genai.Client:
        if not (self.api_key or "").strip():
            raise LLMNotFoundError("GEMINI_API_KEY is missing")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _config(self, req: LLMRequest) -> types.GenerateContentConfig:
        # HttpOptions timeout is milliseconds
        return types.GenerateContentConfig(
            system_instruction=req.system_instruction,
            temperature=req.temperature,
            max_output_tokens=req.max_output_tokens,
            http_options=types.HttpOptions(timeout=int(req.timeout_seconds * 1000)),
        )

    async def generate(self, req: LLMRequest) -> LLMResponse:
        client = self._get_client()
        start_ms = now_ms()

        try:
            resp = await client.aio.models.generate_content(
                model=req.model,
                contents=req.user_prompt,
                config=self._config(req),
            )
        except (httpx.TimeoutException, TimeoutError) as e:
            raise LLMTimeoutError(f"Gemini call timed out: {e}") from e
        except (httpx.HTTPError, genai_errors.APIError) as e:
            raise LLMNetworkError(f"Gemini request failed: {e}") from e

        text = (getattr(resp, "text", None) or "").strip()

        # Token usage: best-effort, won't break if missing
        input_tokens = None
        output_tokens = None
        usage = getattr(resp, "usage_metadata", None)
        if usage is not None:
            input_tokens = getattr(usage, "prompt_token_count", None)
            output_tokens = getattr(usage, "candidates_token_count", None)

        return LLMResponse(
            trace_id=req.trace_id,
            provider=self.name,
            model=req.model,
            output_text=text,
            latency_ms=now_ms() - start_ms,
            raw={"sdk_response_type": str(type(resp))},
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def stream(self, req: LLMRequest) -> AsyncIterator[StreamChunk]:
        client = self._get_client()
        try:
            chunks = await client.aio.models.generate_content_stream(
                model=req.model,
                contents=req.user_prompt,
                config=self._config(req),
            )
            async for chunk in chunks:
                text = getattr(chunk, "text", None)
                if text:
                    yield StreamChunk(text)
        except (httpx.TimeoutException, TimeoutError) as e:
            raise LLMTimeoutError(f"Gemini call timed out: {e}") from e
        except (httpx.HTTPError, genai_errors.APIError) as e:
            raise LLMNetworkError(f"Gemini request failed: {e}") from e
