# attendance_ocr/core/__init__.py
from attendance_ocr.core.errors import AppError
from attendance_ocr.core.error_codes import ErrorCode
from attendance_ocr.core.error_reasons import ErrorReason

__all__ = ["AppError", "ErrorCode", "ErrorReason"]
