# prompter/core/__init__.py
from prompter.core.errors import AppError
from prompter.core.error_codes import ErrorCode
from prompter.core.error_reasons import ErrorReason

__all__ = ["AppError", "ErrorCode", "ErrorReason"]
