"""
Central logging configuration.

- One shared logging setup for the API process and Celery workers.
- JSON logs to stdout.
- Every line carries request_id / task_id / document_id when known.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.config import dictConfig

from attendance_ocr.core.request_context import get_context


_RESERVED_ATTRS = {
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

        base.update(get_context())

        # `extra={...}` fields; anything not JSON-able is stringified
        for k, v in record.__dict__.items():
            if k in _RESERVED_ATTRS or k.startswith("_") or k in base:
                continue
            try:
                json.dumps(v)
                base[k] = v
            except (TypeError, ValueError):
                base[k] = str(v)

        if record.exc_info:
            base["exc"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False)


def configure_logging() -> None:
    """
    Call once at process startup (FastAPI + Celery).
    """
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "attendance_ocr.core.logging_config.JsonFormatter"},
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
            "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
            "celery": {"level": level, "handlers": ["console"], "propagate": False},
            # pytesseract/PIL are chatty at DEBUG
            "PIL": {"level": "WARNING"},
        },
    }

    dictConfig(logging_config)
