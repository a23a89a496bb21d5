"""
validation_event.py
- Purpose: Append-only log of OCR validation events (bounded, oldest rows evicted).
- `seq` orders the log; `event_id` is deterministic per (severity, document)
  and repeats when the same document is validated again.
"""

from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, Float, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from attendance_ocr.models.base import Base


def utcnow() -> datetime:
    return datetime.utcnow()


class ValidationEventRow(Base):
    __tablename__ = "validation_events"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[str] = mapped_column(String(255), nullable=False)

    severity: Mapped[str] = mapped_column(String(16), nullable=False)  # failure, warning, success
    document_id: Mapped[str] = mapped_column(String(255), nullable=False)
    document_type: Mapped[str] = mapped_column(String(32), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    issues: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    user_role: Mapped[str] = mapped_column(String(64), nullable=False)
    action_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_validation_events_document_id", "document_id"),
    )
