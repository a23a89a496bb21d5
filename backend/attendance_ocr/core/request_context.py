"""
Request/Task context helpers.

We keep a small context (request_id, task_id, document_id, user_id) in
ContextVars. Both FastAPI middleware and Celery tasks set these values so
logs from the OCR pipeline can be correlated with the scan being processed.

No external dependencies.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Dict, Optional


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_task_id: ContextVar[Optional[str]] = ContextVar("task_id", default=None)
_document_id: ContextVar[Optional[str]] = ContextVar("document_id", default=None)
_user_id: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


def set_context(
    *,
    request_id: Optional[str] = None,
    task_id: Optional[str] = None,
    document_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if task_id is not None:
        _task_id.set(task_id)
    if document_id is not None:
        _document_id.set(document_id)
    if user_id is not None:
        _user_id.set(user_id)


def clear_context() -> None:
    _request_id.set(None)
    _task_id.set(None)
    _document_id.set(None)
    _user_id.set(None)


def get_context() -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    values = {
        "request_id": _request_id.get(),
        "task_id": _task_id.get(),
        "document_id": _document_id.get(),
        "user_id": _user_id.get(),
    }
    for key, value in values.items():
        if value:
            ctx[key] = value
    return ctx
