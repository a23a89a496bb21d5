"""
attendance_schema.py (schemas)
- Purpose: Roster input, AI-tier payload and attendance sheet DTOs.
- Design: Records and sheets are frozen; a sheet is only built through
  AttendanceSheet.from_records so the summary always matches the records.
"""

from typing import List, Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from attendance_ocr.constants.statuses import AttendanceStatus, ParseTier, ValidationSeverity
from attendance_ocr.schemas.base import CamelModel


class RosterStudent(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    registration_number: str = Field(
        validation_alias=AliasChoices("registrationNumber", "registration_number", "nis"),
    )
    name: str
    class_name: Optional[str] = None

    @field_validator("id", "registration_number", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return str(v).strip() if v is not None else v


class AttendanceRecord(CamelModel):
    model_config = ConfigDict(frozen=True)

    student_id: str
    registration_number: str
    name: str
    status: AttendanceStatus
    notes: Optional[str] = None
    confidence: float = Field(ge=0, le=100)


class AttendanceSummary(CamelModel):
    model_config = ConfigDict(frozen=True)

    present: int = 0
    sick: int = 0
    permission: int = 0
    absent: int = 0

    @property
    def total(self) -> int:
        return self.present + self.sick + self.permission + self.absent


class AttendanceSheet(CamelModel):
    model_config = ConfigDict(frozen=True)

    date: str
    records: List[AttendanceRecord] = Field(default_factory=list)
    summary: AttendanceSummary = Field(default_factory=AttendanceSummary)

    @classmethod
    def from_records(cls, date: str, records: List[AttendanceRecord]) -> "AttendanceSheet":
        counts = {s: 0 for s in AttendanceStatus}
        for rec in records:
            counts[rec.status] += 1
        summary = AttendanceSummary(
            present=counts[AttendanceStatus.PRESENT],
            sick=counts[AttendanceStatus.SICK],
            permission=counts[AttendanceStatus.PERMISSION],
            absent=counts[AttendanceStatus.ABSENT],
        )
        return cls(date=date, records=list(records), summary=summary)

    @classmethod
    def empty(cls, date: str) -> "AttendanceSheet":
        return cls.from_records(date, [])


# ---- AI tier payload (lenient: models drift on key names and types) ----

class AIAttendanceEntry(CamelModel):
    student_id: Optional[str] = None
    registration_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("registrationNumber", "registration_number", "nis"),
    )
    name: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    confidence: Optional[float] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _strip_percent(cls, v):
        if isinstance(v, str):
            v = v.strip().rstrip("%").strip()
            return v or None
        return v

    @field_validator("student_id", "registration_number", "name", "status", "notes", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        if v is None:
            return v
        return str(v).strip()


class AIAttendancePayload(CamelModel):
    date: Optional[str] = None
    records: List[AIAttendanceEntry] = Field(
        default_factory=list,
        validation_alias=AliasChoices("records", "studentAttendance"),
    )

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, v):
        # unusable dates are replaced from the sheet text later
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)):
            return str(v)
        return None


# ---- validation / API results ----

class AttendanceSheetValidation(CamelModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    confidence: float = 0.0


class ExtractionValidation(CamelModel):
    severity: ValidationSeverity
    issues: List[str] = Field(default_factory=list)


class ExtractionSummary(CamelModel):
    confidence: float
    cache_hit: bool
    quality: dict
    validation: ExtractionValidation


class AttendanceScanResult(CamelModel):
    sheet: AttendanceSheet
    validation: AttendanceSheetValidation
    parse_tier: ParseTier
    extraction: ExtractionSummary


class DocumentMetadata(CamelModel):
    document_id: Optional[str] = None
    user_id: Optional[str] = None
    user_role: Optional[str] = None
    document_type: Optional[str] = None
    action_url: Optional[str] = None

    def cache_fields(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ExtractionResponse(CamelModel):
    text: str
    confidence: float
    quality: dict
    fields: dict
    cache_hit: bool
    validation: ExtractionValidation
