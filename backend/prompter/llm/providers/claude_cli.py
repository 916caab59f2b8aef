# prompter/llm/providers/claude_cli.py
from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from prompter.llm.errors import LLMNotFoundError, LLMParseError, LLMProcessError
from prompter.llm.types import LLMRequest, LLMResponse, StreamChunk
from prompter.llm.telemetry import now_ms

logger = logging.getLogger("prompter.llm.claude_cli")

KNOWN_PATHS = (
    "/usr/local/bin/claude",
    "/opt/homebrew/bin/claude",
    "~/.local/bin/claude",
    "/usr/bin/claude",
)

# stream-json lines can carry the whole result
STREAM_LINE_LIMIT = 8 * 1024 * 1024


def find_claude_path(configured: Optional[str] = None) -> Optional[str]:
    """Configured path, then well-known install locations, then PATH."""
    if configured:
        expanded = os.path.expanduser(configured)
        if os.path.isfile(expanded):
            return expanded
        return shutil.which(configured)

    for candidate in KNOWN_PATHS:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded) and os.access(expanded, os.X_OK):
            return expanded
    return shutil.which("claude")


def parse_cli_output(stdout: str) -> str:
    """
    `--output-format json` wraps the answer as {"type": "result", "result": ..., "is_error": ...}.
    Plain text (older CLIs / `--print` only) is accepted as-is.
    """
    text = stdout.strip()
    if not text:
        raise LLMParseError("Claude returned an empty response")

    try:
        data = json.loads(text)
    except ValueError:
        return text

    if not isinstance(data, dict):
        raise LLMParseError(f"Unexpected response: {text[:200]}")
    if data.get("is_error") or data.get("error"):
        raise LLMProcessError(f"Claude execution failed: {data.get('error') or data.get('result') or 'unknown error'}")

    result = data.get("result")
    if not isinstance(result, str) or not result.strip():
        raise LLMParseError(f"Could not parse: {text[:200]}")
    return result.strip()


def _assistant_text(event: dict) -> str:
    message = event.get("message") or {}
    parts = []
    for block in message.get("content") or []:
        if isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text") or "")
    return "".join(parts)


def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.terminate()
        except ProcessLookupError:
            pass


@dataclass
class ClaudeCliProvider:
    """
    Claude Code CLI as a generation backend (one subprocess per call).
    Cancelling the awaiting task terminates the subprocess.
    """
    model: str = "sonnet"
    cli_path: Optional[str] = None

    name = "claude_cli"

    def availability(self) -> Optional[str]:
        if find_claude_path(self.cli_path) is None:
            return "Claude CLI not found. Please install Claude Code."
        return None

    def _args(self, req: LLMRequest, output_format: str) -> list[str]:
        args = [
            "--print",
            "--output-format", output_format,
            "--model", req.model,
            "--system-prompt", req.system_instruction,
            "--dangerously-skip-permissions",
        ]
        if output_format == "stream-json":
            args.append("--verbose")
        args.append(req.user_prompt)
        return args

    async def _spawn(self, req: LLMRequest, output_format: str) -> asyncio.subprocess.Process:
        path = find_claude_path(self.cli_path)
        if path is None:
            raise LLMNotFoundError("Claude CLI not found. Please install Claude Code.")
        try:
            return await asyncio.create_subprocess_exec(
                path,
                *self._args(req, output_format),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LINE_LIMIT,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise LLMNotFoundError(f"Claude CLI not runnable at {path}: {e}") from e

    async def generate(self, req: LLMRequest) -> LLMResponse:
        start_ms = now_ms()
        proc = await self._spawn(req, "json")
        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            _terminate(proc)
            raise

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() or f"exit code {proc.returncode}"
            raise LLMProcessError(f"Claude execution failed: {detail}")

        text = parse_cli_output(stdout.decode("utf-8", errors="replace"))
        return LLMResponse(
            trace_id=req.trace_id,
            provider=self.name,
            model=req.model,
            output_text=text,
            latency_ms=now_ms() - start_ms,
        )

    async def stream(self, req: LLMRequest) -> AsyncIterator[StreamChunk]:
        proc = await self._spawn(req, "stream-json")
        try:
            assert proc.stdout is not None
            async for raw in proc.stdout:
                line = raw.decode("utf-8", errors="replace").strip()
                if not line:
                    continue
                try:
                    event = json.loads(line)
                except ValueError:
                    logger.debug("claude_cli.stream.skip_line")
                    continue
                if not isinstance(event, dict):
                    continue

                kind = event.get("type")
                if kind == "assistant":
                    text = _assistant_text(event)
                    if text:
                        yield StreamChunk(text, snapshot=True)
                elif kind == "result":
                    if event.get("is_error"):
                        raise LLMProcessError(f"Claude execution failed: {event.get('result') or 'unknown error'}")
                    result = event.get("result")
                    if isinstance(result, str) and result.strip():
                        yield StreamChunk(result.strip(), final=True)

            returncode = await proc.wait()
            if returncode != 0:
                assert proc.stderr is not None
                detail = (await proc.stderr.read()).decode("utf-8", errors="replace").strip()
                raise LLMProcessError(f"Claude execution failed: {detail or f'exit code {returncode}'}")
        finally:
            # cancellation, timeout or early close
            _terminate(proc)
