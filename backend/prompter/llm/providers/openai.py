# prompter/llm/providers/openai.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from prompter.llm.errors import LLMNetworkError, LLMNotFoundError, LLMParseError, LLMTimeoutError
from prompter.llm.telemetry import now_ms
from prompter.llm.types import LLMRequest, LLMResponse, StreamChunk

CONNECT_TIMEOUT_SECONDS = 30.0


def _error_message(resp: httpx.Response) -> str:
    try:
        message = resp.json()["error"]["message"]
        if message:
            return str(message)
    except (ValueError, KeyError, TypeError):
        pass
    return f"HTTP {resp.status_code}: {resp.reason_phrase}"


@dataclass
class OpenAIProvider:
    """
    OpenAI-compatible /chat/completions backend (plain + SSE streaming).
    Single attempt; failures surface to the orchestrator as-is.
    """
    api_key: Optional[str]
    model: str
    base_url: str = "https://api.openai.com/v1"
    transport: Optional[httpx.AsyncBaseTransport] = None

    name = "openai"

    def availability(self) -> Optional[str]:
        if not (self.api_key or "").strip():
            return "API key not configured"
        return None

    def _client(self, timeout_seconds: int) -> httpx.AsyncClient:
        if not (self.api_key or "").strip():
            raise LLMNotFoundError("API key not configured")
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds, connect=CONNECT_TIMEOUT_SECONDS),
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self.transport,
        )

    def _payload(self, req: LLMRequest, *, stream: bool) -> dict:
        return {
            "model": req.model,
            "messages": [
                {"role": "system", "content": req.system_instruction},
                {"role": "user", "content": req.user_prompt},
            ],
            "stream": stream,
            "temperature": req.temperature,
            "max_tokens": req.max_output_tokens,
        }

    async def generate(self, req: LLMRequest) -> LLMResponse:
        start_ms = now_ms()
        async with self._client(req.timeout_seconds) as client:
            try:
                resp = await client.post("/chat/completions", json=self._payload(req, stream=False))
            except httpx.TimeoutException as e:
                raise LLMTimeoutError(f"Request timed out: {e}") from e
            except httpx.HTTPError as e:
                raise LLMNetworkError(f"Network error: {e}") from e

            if resp.status_code >= 400:
                raise LLMNetworkError(_error_message(resp))

            try:
                data = resp.json()
                content = data["choices"][0]["message"]["content"]
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise LLMParseError(f"Failed to parse response: {e}") from e

        if not content or not str(content).strip():
            raise LLMParseError("No response content")

        usage = data.get("usage") or {}
        return LLMResponse(
            trace_id=req.trace_id,
            provider=self.name,
            model=data.get("model") or req.model,
            output_text=str(content).strip(),
            latency_ms=now_ms() - start_ms,
            raw={"id": data.get("id")},
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
        )

    async def stream(self, req: LLMRequest) -> AsyncIterator[StreamChunk]:
        async with self._client(req.timeout_seconds) as client:
            try:
                async with client.stream(
                    "POST",
                    "/chat/completions",
                    json=self._payload(req, stream=True),
                    headers={"Accept": "text/event-stream"},
                ) as resp:
                    if resp.status_code >= 400:
                        await resp.aread()
                        raise LLMNetworkError(_error_message(resp))

                    async for line in resp.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            break
                        try:
                            content = json.loads(data)["choices"][0]["delta"].get("content")
                        except (ValueError, KeyError, IndexError, TypeError, AttributeError):
                            # skip malformed chunks
                            continue
                        if content:
                            yield StreamChunk(content)
            except httpx.TimeoutException as e:
                raise LLMTimeoutError(f"Request timed out: {e}") from e
            except httpx.HTTPError as e:
                raise LLMNetworkError(f"Network error: {e}") from e
