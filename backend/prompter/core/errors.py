"""
errors.py
- Purpose: AppError used across services/repos for consistent errors.
- Pattern: raise AppError(...) in service/repo, handler converts to JSON response.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import status as http_status
from prompter.core.error_codes import ErrorCode
from prompter.core.error_reasons import ErrorReason


@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def __str__(self) -> str:
        return self.message or str(self.reason)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": str(self.code),
                "reason": str(self.reason),
                "message": self.message if self.message else str(self.reason),
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        if request_id:
            payload["error"]["request_id"] = request_id
        return payload


# Convenience constructors (keep services readable)
def not_found(code: ErrorCode, message: str, *, details: dict | None = None) -> AppError:
    return AppError(
        code=code,
        reason=str(ErrorReason.RESOURCE_NOT_FOUND),
        status_code=http_status.HTTP_404_NOT_FOUND,
        details=details,
        message=message,
    )


def conflict(reason: ErrorReason, *, code: ErrorCode = ErrorCode.CONFLICT, details: dict | None = None, message: str | None = None) -> AppError:
    return AppError(code=code, reason=str(reason), status_code=http_status.HTTP_409_CONFLICT, details=details, message=message)


def unprocessable(code: ErrorCode, message: str, *, details: dict | None = None) -> AppError:
    return AppError(
        code=code,
        reason=str(ErrorReason.INVALID_INPUT),
        status_code=http_status.HTTP_422_UNPROCESSABLE_ENTITY,
        details=details,
        message=message,
    )
