"""
Request/Task context helpers.

We keep a small context (request_id, record_id, attempt) in ContextVars.
The HTTP middleware sets the request id; generation tasks set the record id
and attempt token so logs from a background generation stay correlatable
with the request that started it.

No external dependencies.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Dict, Optional


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_record_id: ContextVar[Optional[str]] = ContextVar("record_id", default=None)
_attempt: ContextVar[Optional[str]] = ContextVar("attempt", default=None)


def set_context(
    *,
    request_id: Optional[str] = None,
    record_id: Optional[str] = None,
    attempt: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if record_id is not None:
        _record_id.set(record_id)
    if attempt is not None:
        _attempt.set(attempt)


def clear_context() -> None:
    _request_id.set(None)
    _record_id.set(None)
    _attempt.set(None)


def get_context() -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    rid = _request_id.get()
    record = _record_id.get()
    attempt = _attempt.get()

    if rid:
        ctx["request_id"] = rid
    if record:
        ctx["record_id"] = record
    if attempt:
        ctx["attempt"] = attempt
    return ctx
