"""
Central logging configuration.

Goals:
- One shared logging setup for the API process and its generation tasks.
- JSON logs to stdout for easy aggregation.
- Correlate logs with request_id / record_id / attempt.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.config import dictConfig

from prompter.core.request_context import get_context

_RESERVED = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        # Include contextvars (request/record/attempt)
        base.update(get_context())

        # Include any `extra={...}` fields (best-effort)
        for k, v in record.__dict__.items():
            if k in _RESERVED or k.startswith("_") or k in base:
                continue
            try:
                json.dumps(v)
                base[k] = v
            except (TypeError, ValueError):
                base[k] = str(v)

        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False)


def configure_logging(level: str | None = None) -> None:
    """
    Call once at process startup. `level` overrides LOG_LEVEL (default INFO).
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "prompter.core.logging_config.JsonFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": sys.stdout,
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            # Uvicorn loggers
            "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
            # httpx logs every request at INFO
            "httpx": {"level": "WARNING", "handlers": ["console"], "propagate": False},
            # SQL echo only when explicitly asked for
            "sqlalchemy.engine": {"level": os.getenv("SQL_LOG_LEVEL", "WARNING").upper(), "handlers": ["console"], "propagate": False},
        },
    }

    dictConfig(logging_config)
