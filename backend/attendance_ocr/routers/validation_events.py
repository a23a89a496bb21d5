from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from attendance_ocr.api.deps import get_db
from attendance_ocr.repos.validation_event.read import ValidationEventReadRepo

router = APIRouter(prefix="/api/validation-events", tags=["Validation events"])


@router.get("")
def list_validation_events(
    limit: int = Query(50, ge=1, le=500),
    document_id: str | None = Query(None, alias="documentId"),
    db: Session = Depends(get_db),
):
    """Newest first."""
    events = ValidationEventReadRepo(db).list_recent(limit=limit, document_id=document_id)
    return [e.model_dump(mode="json", by_alias=True) for e in events]
