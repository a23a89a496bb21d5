# attendance_ocr/services/attendance_service.py
"""
attendance_service.py
- Purpose: Scan an attendance sheet end to end: extract text, parse it
  (AI tier, then regex tier), match against the roster, validate.
- Design: The service never raises once text is extracted. Low confidence
  input yields an empty sheet; AI failures yield the regex tier.
"""


import logging
from datetime import date
from typing import Optional

from attendance_ocr.attendance.matching import resolve_entries
from attendance_ocr.attendance.parse import (
    AIParsed,
    CompleteFn,
    FallbackRegex,
    parse_with_ai,
    parse_with_regex,
)
from attendance_ocr.constants.statuses import ParseTier, ScanPhase
from attendance_ocr.core.config import settings
from attendance_ocr.llm.client import gemini_complete
from attendance_ocr.ocr.types import ProgressCallback
from attendance_ocr.schemas.attendance_schema import (
    AttendanceScanResult,
    AttendanceSheet,
    DocumentMetadata,
    ExtractionSummary,
    RosterStudent,
)
from attendance_ocr.services.ocr_service import OCRService, report_progress
from attendance_ocr.validations.ocr_validators import FAILURE_CONFIDENCE, validate_attendance_sheet

logger = logging.getLogger("attendance_ocr.attendance_service")


class AttendanceService:
    def __init__(
        self,
        ocr_service: OCRService,
        complete: Optional[CompleteFn] = gemini_complete,
        *,
        ai_timeout_seconds: Optional[float] = None,
        confidence_threshold: Optional[float] = None,
    ):
        self.ocr_service = ocr_service
        self._complete = complete
        self._ai_timeout = ai_timeout_seconds if ai_timeout_seconds is not None else settings.AI_PARSE_TIMEOUT_SECONDS
        self._threshold = (
            confidence_threshold if confidence_threshold is not None else settings.ATTENDANCE_CONFIDENCE_THRESHOLD
        )

    def parse_attendance(self, ocr_text: str, roster: list[RosterStudent]) -> tuple[ParseTier, AttendanceSheet]:
        if self._complete is not None:
            outcome = parse_with_ai(ocr_text, roster, self._complete, timeout=self._ai_timeout)
        else:
            outcome = FallbackRegex("ai_disabled")

        if isinstance(outcome, AIParsed):
            matched = resolve_entries(outcome.entries, roster)
            logger.info(
                "attendance.ai_parsed",
                extra={
                    "entries": len(outcome.entries),
                    "matched": len(matched.records),
                    "discarded": matched.discarded,
                    "duplicates": matched.duplicates,
                },
            )
            if matched.records:
                return ParseTier.AI, AttendanceSheet.from_records(outcome.date, matched.records)
            outcome = FallbackRegex("no_roster_matches")

        logger.info("attendance.fallback_regex", extra={"reason": outcome.reason})
        sheet_date, records = parse_with_regex(ocr_text, roster)
        return ParseTier.REGEX, AttendanceSheet.from_records(sheet_date, records)

    def scan_attendance_sheet(
        self,
        content: bytes,
        roster: list[RosterStudent],
        *,
        mime_type: str | None = None,
        modified_at: str | int | float | None = None,
        metadata: Optional[DocumentMetadata] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> AttendanceScanResult:
        extraction = self.ocr_service.extract_text_from_image(
            content,
            mime_type=mime_type,
            modified_at=modified_at,
            metadata=metadata,
            progress=progress,
        )
        result = extraction.result

        if result.confidence < FAILURE_CONFIDENCE or not result.text.strip():
            logger.warning(
                "attendance.unreadable_sheet",
                extra={"confidence": result.confidence, "text_chars": len(result.text)},
            )
            tier = ParseTier.NONE
            sheet = AttendanceSheet.empty(date.today().isoformat())
        else:
            report_progress(progress, "Parsing attendance data", ScanPhase.PARSING, 50)
            tier, sheet = self.parse_attendance(result.text, roster)

        report_progress(progress, "Analyzing results", ScanPhase.ANALYZING, 80)
        validation = validate_attendance_sheet(sheet, roster, confidence_threshold=self._threshold)
        if validation.errors or validation.warnings:
            logger.warning(
                "attendance.validation_issues",
                extra={"errors": validation.errors, "warnings": validation.warnings},
            )

        report_progress(progress, "Completed", ScanPhase.COMPLETED, 100)
        logger.info(
            "attendance.scanned",
            extra={
                "parse_tier": tier.value,
                "records": len(sheet.records),
                "is_valid": validation.is_valid,
                "avg_confidence": validation.confidence,
            },
        )

        return AttendanceScanResult(
            sheet=sheet,
            validation=validation,
            parse_tier=tier,
            extraction=ExtractionSummary(
                confidence=result.confidence,
                cache_hit=extraction.cache_hit,
                quality=result.quality.to_dict(),
                validation=extraction.validation,
            ),
        )

    def process_attendance_sheet(
        self,
        content: bytes,
        roster: list[RosterStudent],
        **kwargs,
    ) -> AttendanceSheet:
        return self.scan_attendance_sheet(content, roster, **kwargs).sheet
