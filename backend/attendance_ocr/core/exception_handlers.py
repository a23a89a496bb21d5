"""
exception_handlers.py
- Purpose: Every error leaves the API as {"error": {code, reason, message}}.

AppError carries its own status. FastAPI's request validation errors (a
missing `file` or `roster` form field) are reshaped to the same envelope;
anything else is a 500 with the traceback in the logs only.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from attendance_ocr.core import AppError, ErrorCode, ErrorReason

logger = logging.getLogger("attendance_ocr.exceptions")


def _where(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "app_error",
        extra={
            **_where(request),
            "status_code": exc.status_code,
            "code": exc.code.value,
            "reason": str(getattr(exc.reason, "value", exc.reason)),
            "cause": repr(exc.__cause__) if exc.__cause__ else None,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    logger.warning("request_invalid", extra={**_where(request), "fields": fields})
    err = AppError(
        code=ErrorCode.VALIDATION_ERROR,
        reason=ErrorReason.INVALID_INPUT.value,
        status_code=422,
        message="Request is missing or has malformed fields",
        details={"fields": fields},
    )
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", extra=_where(request))
    return JSONResponse(
        status_code=500,
        content={"error": {"code": ErrorCode.INTERNAL_ERROR.value, "reason": "Unhandled exception"}},
    )
