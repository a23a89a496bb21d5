from attendance_ocr.constants.statuses import AttendanceStatus, ValidationSeverity
from attendance_ocr.ocr.quality import assess_text_quality
from attendance_ocr.ocr.types import ExtractionResult
from attendance_ocr.schemas.attendance_schema import AttendanceRecord, AttendanceSheet
from attendance_ocr.validations.ocr_validators import validate_attendance_sheet, validate_extraction

from conftest import SHEET_TEXT


def _result(text, confidence):
    return ExtractionResult(text=text, confidence=confidence, quality=assess_text_quality(text, confidence))


def _record(student_id, confidence=90.0, status=AttendanceStatus.PRESENT):
    return AttendanceRecord(
        student_id=student_id,
        registration_number=f"nis-{student_id}",
        name=f"name-{student_id}",
        status=status,
        confidence=confidence,
    )


def test_clean_extraction_is_success():
    v = validate_extraction(_result(SHEET_TEXT, 92.0))

    assert v.severity == ValidationSeverity.SUCCESS
    assert v.issues == []


def test_low_confidence_is_failure():
    v = validate_extraction(_result(SHEET_TEXT, 40.0))

    assert v.severity == ValidationSeverity.FAILURE
    assert any("too low" in i for i in v.issues)


def test_medium_confidence_is_warning():
    v = validate_extraction(_result(SHEET_TEXT, 65.0))

    assert v.severity == ValidationSeverity.WARNING
    assert any("confidence low" in i for i in v.issues)
    assert any("quality" in i for i in v.issues)


def test_empty_text_collects_every_issue():
    v = validate_extraction(_result("", 95.0))

    assert v.severity == ValidationSeverity.FAILURE
    assert "Text is not searchable" in v.issues
    assert "No meaningful content detected" in v.issues
    assert "Document type could not be determined" in v.issues
    assert "Too few words detected (0)" in v.issues


def test_empty_sheet_is_invalid(roster):
    v = validate_attendance_sheet(AttendanceSheet.empty("2026-01-30"), roster, confidence_threshold=75)

    assert not v.is_valid
    assert "No student records detected" in v.errors
    assert v.confidence == 0.0


def test_missing_students_and_low_average_are_warnings(roster):
    sheet = AttendanceSheet.from_records("2026-01-30", [_record("s1", 70.0), _record("s2", 72.0)])

    v = validate_attendance_sheet(sheet, roster, confidence_threshold=75)

    assert v.is_valid
    assert v.errors == []
    assert "2 roster members not detected on the sheet" in v.warnings
    assert any("manual verification" in w for w in v.warnings)
    assert v.confidence == 71.0


def test_invalid_date_is_error(roster):
    sheet = AttendanceSheet.from_records("30-01-2026", [_record("s1")])

    v = validate_attendance_sheet(sheet, roster[:1], confidence_threshold=75)

    assert not v.is_valid
    assert v.errors == ["Invalid sheet date"]
    assert v.warnings == []


def test_summary_matches_records():
    records = [
        _record("a", status=AttendanceStatus.PRESENT),
        _record("b", status=AttendanceStatus.SICK),
        _record("c", status=AttendanceStatus.PERMISSION),
        _record("d", status=AttendanceStatus.ABSENT),
        _record("e", status=AttendanceStatus.ABSENT),
    ]

    sheet = AttendanceSheet.from_records("2026-01-30", records)

    assert (sheet.summary.present, sheet.summary.sick, sheet.summary.permission, sheet.summary.absent) == (1, 1, 1, 2)
    assert sheet.summary.total == len(sheet.records)
