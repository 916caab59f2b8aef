"""
exception_handlers.py
- Purpose: Convert AppError, request validation errors and unexpected
  exceptions into the one `{"error": {...}}` envelope clients parse.

Every body carries the request id so a UI error can be matched to the logs.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from prompter.core import AppError, ErrorCode, ErrorReason
from prompter.core.request_context import get_context

logger = logging.getLogger("prompter.exceptions")


def _request_id() -> str | None:
    return get_context().get("request_id")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "app_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "code": str(exc.code),
            "error_message": str(exc),
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(_request_id()))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_error", extra={"path": request.url.path, "method": request.method})
    err = AppError(
        code=ErrorCode.VALIDATION_ERROR,
        reason=str(ErrorReason.INVALID_INPUT),
        status_code=422,
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(status_code=422, content=err.to_dict(_request_id()))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        extra={"path": request.url.path, "method": request.method},
    )
    err = AppError(
        code=ErrorCode.INTERNAL_ERROR,
        reason=str(ErrorReason.INTERNAL_ERROR),
        status_code=500,
    )
    return JSONResponse(status_code=500, content=err.to_dict(_request_id()))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
