"""attendance_ocr/attendance/matching.py

Resolve parsed entries to roster students and score them.

Match priority (first hit wins):
  1. registration number (NIS), exact
  2. name, case-insensitive exact
  3. name, substring either way
Entries matching nobody are dropped from the sheet.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from attendance_ocr.attendance.status_aliases import normalize_status
from attendance_ocr.schemas.attendance_schema import AIAttendanceEntry, AttendanceRecord, RosterStudent

logger = logging.getLogger("attendance_ocr.attendance.matching")

DEFAULT_CONFIDENCE = 70.0
EXACT_NIS_BOOST = 15.0
EXACT_NAME_BOOST = 15.0
PARTIAL_NAME_PENALTY = 20.0


class MatchKind(str, Enum):
    REGISTRATION_NUMBER = "registration_number"
    EXACT_NAME = "exact_name"
    PARTIAL_NAME = "partial_name"
    NONE = "none"


@dataclass(frozen=True)
class MatchOutcome:
    records: list[AttendanceRecord] = field(default_factory=list)
    discarded: int = 0
    duplicates: int = 0


def _norm(s: Optional[str]) -> str:
    return " ".join((s or "").lower().split())


def find_matching_student(
    registration_number: Optional[str],
    name: Optional[str],
    roster: Iterable[RosterStudent],
) -> tuple[Optional[RosterStudent], MatchKind]:
    students = list(roster)
    nis = (registration_number or "").strip()

    if nis:
        for s in students:
            if s.registration_number == nis:
                return s, MatchKind.REGISTRATION_NUMBER

    wanted = _norm(name)
    if wanted:
        for s in students:
            if _norm(s.name) == wanted:
                return s, MatchKind.EXACT_NAME

        for s in students:
            candidate = _norm(s.name)
            if candidate and (wanted in candidate or candidate in wanted):
                return s, MatchKind.PARTIAL_NAME

    return None, MatchKind.NONE


def calculate_confidence(
    entry: AIAttendanceEntry,
    student: RosterStudent,
    kind: MatchKind,
) -> float:
    confidence = entry.confidence
    if confidence is None or math.isnan(confidence):
        confidence = DEFAULT_CONFIDENCE

    if (entry.registration_number or "").strip() == student.registration_number:
        confidence += EXACT_NIS_BOOST

    if _norm(entry.name) and _norm(entry.name) == _norm(student.name):
        confidence += EXACT_NAME_BOOST

    if kind == MatchKind.PARTIAL_NAME:
        confidence -= PARTIAL_NAME_PENALTY

    return float(max(0.0, min(100.0, confidence)))


def resolve_entries(entries: Iterable[AIAttendanceEntry], roster: list[RosterStudent]) -> MatchOutcome:
    records: list[AttendanceRecord] = []
    seen: set[str] = set()
    discarded = 0
    duplicates = 0

    for entry in entries:
        student, kind = find_matching_student(entry.registration_number, entry.name, roster)
        if student is None:
            discarded += 1
            logger.info(
                "attendance.entry_unmatched",
                extra={"entry_name": entry.name, "entry_nis": entry.registration_number},
            )
            continue

        # first occurrence wins when the model repeats a student
        if student.id in seen:
            duplicates += 1
            continue
        seen.add(student.id)

        records.append(
            AttendanceRecord(
                student_id=student.id,
                registration_number=student.registration_number,
                name=student.name,
                status=normalize_status(entry.status),
                notes=entry.notes or None,
                confidence=calculate_confidence(entry, student, kind),
            )
        )

    return MatchOutcome(records=records, discarded=discarded, duplicates=duplicates)


def unmatched_roster_members(records: Iterable[AttendanceRecord], roster: Iterable[RosterStudent]) -> list[RosterStudent]:
    matched = {r.student_id for r in records}
    return [s for s in roster if s.id not in matched]
