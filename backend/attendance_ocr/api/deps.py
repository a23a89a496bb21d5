from functools import lru_cache
from typing import Generator

from fastapi import Form
from sqlalchemy.orm import Session

from attendance_ocr.core.config import settings
from attendance_ocr.core.request_context import get_context
from attendance_ocr.db.session import SessionLocal
from attendance_ocr.events.emitter import ValidationEventEmitter
from attendance_ocr.events.store import SqlValidationEventStore
from attendance_ocr.ocr.cache import ExtractionCache
from attendance_ocr.ocr.gateway import OCRGateway
from attendance_ocr.ocr.recognizer import TesseractRecognizer
from attendance_ocr.schemas.attendance_schema import DocumentMetadata
from attendance_ocr.services.attendance_service import AttendanceService
from attendance_ocr.services.ocr_service import OCRService
from attendance_ocr.services.storage.supabase_storage import SupabaseStorage


def get_db() -> Generator[Session, None, None]:
    """
    Yields a DB session per request.
    Ensures the session is closed even on exceptions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage() -> SupabaseStorage:
    """
    Provides the storage client.
    Using Depends(get_storage) allows for easy mocking of Supabase in tests.
    """
    return SupabaseStorage()


# Process-wide singletons: the cache and the recognizer are only useful if
# they outlive a single request.

@lru_cache(maxsize=1)
def get_extraction_cache() -> ExtractionCache:
    return ExtractionCache(max_entries=settings.OCR_CACHE_MAX_ENTRIES)


@lru_cache(maxsize=1)
def get_ocr_gateway() -> OCRGateway:
    return OCRGateway(
        cache=get_extraction_cache(),
        recognizer_factory=lambda: TesseractRecognizer(
            lang=settings.OCR_LANG,
            render_dpi=settings.OCR_RENDER_DPI,
        ),
    )


@lru_cache(maxsize=1)
def get_event_emitter() -> ValidationEventEmitter:
    store = SqlValidationEventStore(SessionLocal, capacity=settings.VALIDATION_EVENT_LOG_CAPACITY)
    return ValidationEventEmitter(store=store)


@lru_cache(maxsize=1)
def get_ocr_service() -> OCRService:
    return OCRService(gateway=get_ocr_gateway(), emitter=get_event_emitter())


@lru_cache(maxsize=1)
def get_attendance_service() -> AttendanceService:
    return AttendanceService(ocr_service=get_ocr_service())



def get_document_metadata(
    document_id: str | None = Form(None, alias="documentId"),
    user_id: str | None = Form(None, alias="userId"),
    user_role: str | None = Form(None, alias="userRole"),
    document_type: str | None = Form(None, alias="documentType"),
    action_url: str | None = Form(None, alias="actionUrl"),
) -> DocumentMetadata:
    """Optional metadata form fields shared by the upload endpoints."""
    return DocumentMetadata(
        document_id=document_id,
        user_id=user_id or get_context().get("user_id"),
        user_role=user_role,
        document_type=document_type,
        action_url=action_url,
    )
