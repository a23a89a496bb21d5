"""
db/base.py
- Purpose: Provide Base + ensure models are imported before create_all().
"""

from attendance_ocr.models.base import Base
import attendance_ocr.models  # noqa: F401  (ensures models are imported)

__all__ = ["Base", "init_db"]


def init_db(engine) -> None:
    Base.metadata.create_all(bind=engine)
