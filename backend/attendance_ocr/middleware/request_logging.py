"""
request_logging.py
- Purpose: One request/response log pair per HTTP call, correlated by
  x-request-id. The caller's x-user-id lands in the log context so OCR and
  validation-event logs can be traced back to the uploader.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from attendance_ocr.core.request_context import clear_context, set_context

logger = logging.getLogger("attendance_ocr.http")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        set_context(request_id=rid, user_id=request.headers.get("x-user-id"))
        where = {"method": request.method, "path": request.url.path}

        started = time.perf_counter()
        try:
            logger.info("http.request", extra={**where, "content_length": request.headers.get("content-length")})
            response = await call_next(request)

            level = logging.WARNING if response.status_code >= 400 else logging.INFO
            logger.log(
                level,
                "http.response",
                extra={
                    **where,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000),
                },
            )
            response.headers["x-request-id"] = rid
            return response
        finally:
            clear_context()
