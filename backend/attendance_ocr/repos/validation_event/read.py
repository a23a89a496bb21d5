from sqlalchemy import func, select
from sqlalchemy.orm import Session

from attendance_ocr.constants.statuses import ValidationSeverity
from attendance_ocr.models.validation_event import ValidationEventRow
from attendance_ocr.schemas.validation_event_schema import ValidationEvent


def row_to_event(row: ValidationEventRow) -> ValidationEvent:
    return ValidationEvent(
        id=row.event_id,
        severity=ValidationSeverity(row.severity),
        document_id=row.document_id,
        document_type=row.document_type,
        confidence=row.confidence,
        issues=list(row.issues or []),
        timestamp=row.timestamp,
        user_id=row.user_id,
        user_role=row.user_role,
        action_url=row.action_url,
    )


class ValidationEventReadRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_recent(self, *, limit: int = 50, document_id: str | None = None) -> list[ValidationEvent]:
        stmt = select(ValidationEventRow).order_by(ValidationEventRow.seq.desc()).limit(limit)
        if document_id:
            stmt = stmt.where(ValidationEventRow.document_id == document_id)
        return [row_to_event(r) for r in self.db.execute(stmt).scalars().all()]

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(ValidationEventRow)).scalar_one()
