"""
error_reasons.py
- Purpose: Human-friendly "reason" strings.
- Keep these stable; they may be surfaced in UI and notifications.
"""

from enum import Enum


class ErrorReason(str, Enum):
    INVALID_INPUT = "Invalid input"

    STORAGE_UNAVAILABLE = "Storage unavailable"
    UPLOAD_FAILED = "Upload failed"
    DOWNLOAD_FAILED = "Download failed"
    SIGNED_URL_FAILED = "Signed URL generation failed"
    MISSING_DEPENDENCY = "Missing dependency"

    UNSUPPORTED_FILE = "Unsupported file format"
    RECOGNIZER_UNAVAILABLE = "Text recognizer unavailable"
    RECOGNITION_FAILED = "Text recognition failed"
