"""
models package
- Purpose: Import all ORM models so Base.metadata sees every table.
"""

from attendance_ocr.models.base import Base
from attendance_ocr.models.validation_event import ValidationEventRow

__all__ = [
    "Base",
    "ValidationEventRow",
]
