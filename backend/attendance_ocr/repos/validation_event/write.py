from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from attendance_ocr.models.validation_event import ValidationEventRow
from attendance_ocr.schemas.validation_event_schema import ValidationEvent


class ValidationEventWriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def append(self, event: ValidationEvent) -> ValidationEventRow:
        row = ValidationEventRow(
            event_id=event.id,
            severity=event.severity.value,
            document_id=event.document_id,
            document_type=event.document_type,
            confidence=event.confidence,
            issues=list(event.issues),
            user_id=event.user_id,
            user_role=event.user_role,
            action_url=event.action_url,
            timestamp=event.timestamp,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def evict_beyond(self, capacity: int) -> int:
        """Delete everything older than the newest `capacity` rows (FIFO)."""
        cutoff = self.db.execute(
            select(ValidationEventRow.seq)
            .order_by(ValidationEventRow.seq.desc())
            .offset(capacity)
            .limit(1)
        ).scalar_one_or_none()
        if cutoff is None:
            return 0

        res = self.db.execute(
            delete(ValidationEventRow).where(ValidationEventRow.seq <= cutoff)
        )
        self.db.flush()
        return res.rowcount or 0
