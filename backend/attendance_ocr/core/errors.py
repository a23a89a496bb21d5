"""
errors.py
- Purpose: AppError used across services/repos for consistent errors.
- Pattern: raise AppError(...) in service/repo, handler converts to JSON response.
"""



from dataclasses import dataclass
from typing import Any

from fastapi import status as http_status
from attendance_ocr.core.error_codes import ErrorCode
from attendance_ocr.core.error_reasons import ErrorReason



@dataclass
class AppError(Exception):
    code: ErrorCode
    reason: str
    status_code: int = http_status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] | None = None
    message: str | None = None  # Optional human-readable message

    def __str__(self) -> str:
        return self.message or str(getattr(self.reason, "value", self.reason))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": {
                "code": self.code,
                "reason": self.reason,
                "message": self.message if self.message else self.reason,
            }
        }
        if self.details:
            payload["error"]["details"] = self.details
        return payload


def extraction_failed(reason: str = ErrorReason.RECOGNITION_FAILED, *, status_code: int = http_status.HTTP_500_INTERNAL_SERVER_ERROR, message: str | None = None, details: dict | None = None) -> AppError:
    return AppError(code=ErrorCode.OCR_EXTRACTION_FAILED, reason=getattr(reason, "value", reason), status_code=status_code, message=message, details=details)
