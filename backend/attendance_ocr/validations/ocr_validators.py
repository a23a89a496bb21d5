"""
ocr_validators.py
- Purpose: Threshold checks on OCR output and on parsed attendance sheets.
- Design: Pure functions. Issues are additive; severity is resolved
  separately so a single weak signal does not hide the others.
"""

from typing import Iterable

from attendance_ocr.attendance.dates import ISO_DATE_PATTERN
from attendance_ocr.attendance.matching import unmatched_roster_members
from attendance_ocr.constants.statuses import DocumentType, ValidationSeverity
from attendance_ocr.ocr.types import ExtractionResult
from attendance_ocr.schemas.attendance_schema import (
    AttendanceSheet,
    AttendanceSheetValidation,
    ExtractionValidation,
    RosterStudent,
)

FAILURE_CONFIDENCE = 50.0
WARNING_CONFIDENCE = 70.0
MIN_WORD_COUNT = 20


def validate_extraction(result: ExtractionResult) -> ExtractionValidation:
    confidence = result.confidence
    quality = result.quality
    issues: list[str] = []

    if confidence < FAILURE_CONFIDENCE:
        issues.append(f"OCR confidence too low ({confidence:.0f}%)")
    elif confidence < WARNING_CONFIDENCE:
        issues.append(f"OCR confidence low ({confidence:.0f}%)")

    if not quality.is_high_quality:
        issues.append("Text quality is not high enough for automatic processing")
    if not quality.is_searchable:
        issues.append("Text is not searchable")
    if not quality.has_meaningful_content:
        issues.append("No meaningful content detected")
    if quality.word_count < MIN_WORD_COUNT:
        issues.append(f"Too few words detected ({quality.word_count})")
    if quality.document_type == DocumentType.UNKNOWN:
        issues.append("Document type could not be determined")

    if confidence < FAILURE_CONFIDENCE or not quality.is_searchable or not quality.has_meaningful_content:
        severity = ValidationSeverity.FAILURE
    elif confidence < WARNING_CONFIDENCE or not quality.is_high_quality or quality.word_count < MIN_WORD_COUNT:
        severity = ValidationSeverity.WARNING
    else:
        severity = ValidationSeverity.SUCCESS

    return ExtractionValidation(severity=severity, issues=issues)


def validate_attendance_sheet(
    sheet: AttendanceSheet,
    roster: Iterable[RosterStudent],
    *,
    confidence_threshold: float,
) -> AttendanceSheetValidation:
    errors: list[str] = []
    warnings: list[str] = []

    if not sheet.date or not ISO_DATE_PATTERN.match(sheet.date):
        errors.append("Invalid sheet date")

    if not sheet.records:
        errors.append("No student records detected")

    missing = unmatched_roster_members(sheet.records, roster)
    if missing:
        warnings.append(f"{len(missing)} roster members not detected on the sheet")

    avg_confidence = (
        sum(r.confidence for r in sheet.records) / len(sheet.records) if sheet.records else 0.0
    )
    if avg_confidence < confidence_threshold:
        warnings.append(
            f"Average confidence below {confidence_threshold:.0f}%, manual verification required"
        )

    return AttendanceSheetValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        confidence=round(avg_confidence, 2),
    )
