from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from prompter.core.request_context import clear_context, set_context


logger = logging.getLogger("prompter.http")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns/propagates x-request-id and logs one line per request and response.
    Generation tasks started by the request inherit the request id.
    """

    async def dispatch(self, request: Request, call_next):
        # Accept upstream request id if present, else create one
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        set_context(request_id=rid)

        t0 = time.perf_counter()
        try:
            logger.info(
                "http.request",
                extra={"method": request.method, "path": request.url.path, "query": str(request.url.query)},
            )
            try:
                response: Response = await call_next(request)
            except Exception:
                logger.exception(
                    "http.error",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "duration_ms": int((time.perf_counter() - t0) * 1000),
                    },
                )
                raise

            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "http.response",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": int((time.perf_counter() - t0) * 1000),
                },
            )

            response.headers["x-request-id"] = rid
            return response
        finally:
            clear_context()
