# attendance_ocr/core/error_codes.py
from enum import Enum

class ErrorCode(str, Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"

    # Upload / scan
    FILE_MISSING = "FILE_MISSING"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    INVALID_ROSTER = "INVALID_ROSTER"

    # OCR
    OCR_EXTRACTION_FAILED = "OCR_EXTRACTION_FAILED"

    # Supabase / Storage
    STORAGE_ERROR = "STORAGE_ERROR"
    STORAGE_UPLOAD_FAILED = "STORAGE_UPLOAD_FAILED"
