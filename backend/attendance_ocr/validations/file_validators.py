"""
file_validators.py
- Purpose: Centralized validation for scan uploads and roster payloads.
- Design: Raise AppError with stable error codes for UI + logs.
"""

import json

from fastapi import UploadFile
from pydantic import TypeAdapter, ValidationError

from attendance_ocr.core import AppError, ErrorCode, ErrorReason
from attendance_ocr.core.config import settings
from attendance_ocr.ocr.recognizer import SUPPORTED_MIME_TYPES
from attendance_ocr.schemas.attendance_schema import RosterStudent

_ROSTER_ADAPTER = TypeAdapter(list[RosterStudent])


def validate_scan_upload(upload: UploadFile | None) -> None:
    if upload is None or not upload.filename:
        raise AppError(
            code=ErrorCode.FILE_MISSING,
            reason=ErrorReason.INVALID_INPUT,
            message="No file uploaded",
            status_code=422,
        )

    content_type = (upload.content_type or "").lower()
    if content_type not in SUPPORTED_MIME_TYPES:
        raise AppError(
            code=ErrorCode.INVALID_FILE_TYPE,
            reason=ErrorReason.UNSUPPORTED_FILE,
            message=f"Unsupported content type: {content_type or 'unknown'}",
            status_code=415,
            details={"content_type": content_type, "allowed": sorted(SUPPORTED_MIME_TYPES)},
        )


def read_scan_bytes(upload: UploadFile, *, max_bytes: int | None = None) -> bytes:
    limit = max_bytes or settings.OCR_MAX_UPLOAD_BYTES
    content = upload.file.read(limit + 1)
    if not content:
        raise AppError(
            code=ErrorCode.FILE_MISSING,
            reason=ErrorReason.INVALID_INPUT,
            message="Uploaded file is empty",
            status_code=422,
        )
    if len(content) > limit:
        raise AppError(
            code=ErrorCode.FILE_TOO_LARGE,
            reason=ErrorReason.INVALID_INPUT,
            message=f"File exceeds {limit} bytes",
            status_code=413,
        )
    return content


def parse_roster(raw: str) -> list[RosterStudent]:
    try:
        roster = _ROSTER_ADAPTER.validate_python(json.loads(raw))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise AppError(
            code=ErrorCode.INVALID_ROSTER,
            reason=ErrorReason.INVALID_INPUT,
            message="roster must be a JSON list of {id, registrationNumber, name}",
            status_code=422,
            details={"error": str(e)[:500]},
        ) from e
    return roster
