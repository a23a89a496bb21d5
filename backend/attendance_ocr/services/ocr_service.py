# attendance_ocr/services/ocr_service.py
"""
ocr_service.py
- Purpose: One extraction call = gateway (cache/recognizer/quality) +
  per-extraction validation + validation event.
- Design: Validation and emission run on cache hits too, so every call
  leaves the same trace in the event log.
"""


import logging
from dataclasses import dataclass
from typing import Optional

from attendance_ocr.constants.statuses import ScanPhase
from attendance_ocr.core.errors import extraction_failed
from attendance_ocr.core.error_reasons import ErrorReason
from attendance_ocr.core.request_context import set_context
from attendance_ocr.events.emitter import ValidationEventEmitter, build_validation_event
from attendance_ocr.ocr.cache import content_digest
from attendance_ocr.ocr.errors import RecognitionFailure, RecognizerInitError, UnsupportedFileFormat
from attendance_ocr.ocr.gateway import OCRGateway
from attendance_ocr.ocr.types import ExtractionResult, ProgressCallback
from attendance_ocr.schemas.attendance_schema import DocumentMetadata, ExtractionValidation
from attendance_ocr.schemas.validation_event_schema import ValidationEvent
from attendance_ocr.validations.ocr_validators import validate_extraction

logger = logging.getLogger("attendance_ocr.ocr_service")

EXTRACT_START_PERCENT = 10.0
EXTRACT_SPAN_PERCENT = 40.0


@dataclass(frozen=True)
class ExtractionOutcome:
    result: ExtractionResult
    validation: ExtractionValidation
    cache_hit: bool
    cache_key: str
    event: Optional[ValidationEvent] = None


def report_progress(progress: Optional[ProgressCallback], status: str, phase: ScanPhase, percent: float) -> None:
    if progress is None:
        return
    try:
        progress(status, phase.value, round(percent, 1))
    except Exception:
        # a broken UI callback must not fail the scan
        logger.warning("ocr.progress_callback_failed", exc_info=True)


class OCRService:
    def __init__(self, gateway: OCRGateway, emitter: ValidationEventEmitter):
        self.gateway = gateway
        self.emitter = emitter

    def extract_text_from_image(
        self,
        content: bytes,
        *,
        mime_type: str | None = None,
        modified_at: str | int | float | None = None,
        metadata: Optional[DocumentMetadata] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ExtractionOutcome:
        meta = metadata or DocumentMetadata()
        if meta.document_id:
            set_context(document_id=meta.document_id)

        report_progress(progress, "Initializing OCR", ScanPhase.INITIALIZING, 5)

        def _on_recognizer_progress(status: str, fraction: float) -> None:
            pct = EXTRACT_START_PERCENT + max(0.0, min(1.0, fraction)) * EXTRACT_SPAN_PERCENT
            report_progress(progress, status, ScanPhase.EXTRACTING, pct)

        report_progress(progress, "Extracting text from image", ScanPhase.EXTRACTING, EXTRACT_START_PERCENT)

        try:
            out = self.gateway.extract(
                content,
                mime_type=mime_type,
                modified_at=modified_at,
                metadata=meta.cache_fields(),
                progress=_on_recognizer_progress,
            )
        except RecognizerInitError as e:
            logger.error("ocr.recognizer_init_failed", extra={"error": str(e)})
            raise extraction_failed(
                ErrorReason.RECOGNIZER_UNAVAILABLE, status_code=503, message=str(e)
            ) from e
        except UnsupportedFileFormat as e:
            raise extraction_failed(
                ErrorReason.UNSUPPORTED_FILE, status_code=422, message=str(e)
            ) from e
        except RecognitionFailure as e:
            logger.error("ocr.recognition_failed", extra={"error": str(e)})
            raise extraction_failed(ErrorReason.RECOGNITION_FAILED, message=str(e)) from e

        result = out.result
        validation = validate_extraction(result)

        event = None
        if validation.issues:
            event = self.emitter.emit(
                build_validation_event(
                    validation,
                    confidence=result.confidence,
                    document_id=content_digest(out.cache_key),
                    document_type=result.quality.document_type.value,
                    metadata=meta,
                )
            )

        logger.info(
            "ocr.validated",
            extra={
                "cache_hit": out.cache_hit,
                "confidence": result.confidence,
                "severity": validation.severity.value,
                "issues": len(validation.issues),
            },
        )
        return ExtractionOutcome(
            result=result,
            validation=validation,
            cache_hit=out.cache_hit,
            cache_key=out.cache_key,
            event=event,
        )
