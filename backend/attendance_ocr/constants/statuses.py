"""
statuses.py
- Purpose: Central source of truth for pipeline enums.
- Design: Keep FE-facing values stable and explicit; they end up in
  validation events consumed by the notification subsystem.
"""

from enum import Enum


class DocumentType(str, Enum):
    UNKNOWN = "unknown"
    ACADEMIC = "academic"
    FORM = "form"
    CERTIFICATE = "certificate"
    ADMINISTRATIVE = "administrative"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    SICK = "sick"
    PERMISSION = "permission"
    ABSENT = "absent"


class ValidationSeverity(str, Enum):
    FAILURE = "failure"
    WARNING = "warning"
    SUCCESS = "success"


class ParseTier(str, Enum):
    AI = "ai"
    REGEX = "regex"
    NONE = "none"


class ScanPhase(str, Enum):
    INITIALIZING = "initializing"
    EXTRACTING = "extracting"
    PARSING = "parsing"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
