"""attendance_ocr/attendance/parse.py

Two-tier attendance parsing.

Tier 1 asks the language model for strict JSON. Every way that can go wrong
(timeout, transport error, empty answer, no JSON, bad JSON, zero records)
comes back as a FallbackRegex outcome instead of an exception, and tier 2
(line-by-line regex against the roster) runs instead.

The language model is an injected `complete(prompt) -> text` callable, so
both tiers run without network access in tests.
"""

from __future__ import annotations

import contextvars
import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Callable, Optional, Union

from pydantic import ValidationError

from attendance_ocr.attendance.dates import extract_date_from_text, is_iso_date
from attendance_ocr.attendance.status_aliases import (
    ALIAS_GLYPHS,
    ALIAS_WORDS,
    classify_status,
    status_alias_table,
    word_tokens,
)
from attendance_ocr.constants.statuses import AttendanceStatus
from attendance_ocr.llm.prompts.registry import get_prompt, render_template
from attendance_ocr.schemas.attendance_schema import (
    AIAttendanceEntry,
    AIAttendancePayload,
    AttendanceRecord,
    RosterStudent,
)

logger = logging.getLogger("attendance_ocr.attendance.parse")

CompleteFn = Callable[[str], str]

REGEX_TIER_CONFIDENCE = 70.0
PROMPT_NAME = "parse_attendance"
PROMPT_VERSION = "v1"

_HEADER_KEYWORDS = re.compile(r"\b(no|nis|nisn|nama|siswa|status|keterangan|ket|catatan)\b", re.IGNORECASE)
_LONG_NUMBER = re.compile(r"\d{3,}")
_NOTE_WORD = re.compile(r"[^\W\d_]+(?:['-][^\W\d_]+)*")

# Shared by all requests; a timed-out call keeps its worker until the
# provider's own HTTP timeout fires.
_AI_EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix="ai-parse")


@dataclass(frozen=True)
class AIParsed:
    date: str
    entries: list[AIAttendanceEntry]


@dataclass(frozen=True)
class FallbackRegex:
    reason: str


ParseOutcome = Union[AIParsed, FallbackRegex]


# ----------------------------
# Tier 1: AI delegate
# ----------------------------
def build_attendance_prompt(ocr_text: str, roster: list[RosterStudent]) -> str:
    roster_lines = "\n".join(f"- {s.id} | {s.registration_number} | {s.name}" for s in roster)
    tmpl = get_prompt(PROMPT_NAME, PROMPT_VERSION)
    return render_template(
        tmpl.template,
        {
            "roster": roster_lines or "(empty roster)",
            "status_aliases": status_alias_table(),
            "ocr_text": ocr_text,
        },
    )


def extract_first_json_object(text: str) -> Optional[str]:
    """
    First balanced {...} in `text`. Braces inside JSON string literals are
    ignored, so "notes": "izin {keluarga}" does not break the scan.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def _complete_with_timeout(complete: CompleteFn, prompt: str, timeout: float) -> str:
    ctx = contextvars.copy_context()
    future = _AI_EXECUTOR.submit(ctx.run, complete, prompt)
    try:
        return future.result(timeout=timeout)
    finally:
        future.cancel()


def parse_with_ai(
    ocr_text: str,
    roster: list[RosterStudent],
    complete: CompleteFn,
    *,
    timeout: float,
) -> ParseOutcome:
    prompt = build_attendance_prompt(ocr_text, roster)

    try:
        response = _complete_with_timeout(complete, prompt, timeout)
    except FutureTimeout:
        logger.warning("attendance.ai_timeout", extra={"timeout_s": timeout})
        return FallbackRegex("timeout")
    except Exception as e:
        # transport/provider errors of any kind end up in the regex tier
        logger.warning("attendance.ai_error", extra={"error_type": type(e).__name__, "error": str(e)})
        return FallbackRegex(f"error:{type(e).__name__}")

    if not response or not response.strip():
        return FallbackRegex("empty_response")

    blob = extract_first_json_object(response)
    if blob is None:
        return FallbackRegex("no_json_object")

    try:
        payload = AIAttendancePayload.model_validate(json.loads(blob))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("attendance.ai_malformed", extra={"error": str(e)[:300]})
        return FallbackRegex("malformed_json")

    if not payload.records:
        return FallbackRegex("no_records")

    sheet_date = payload.date if is_iso_date(payload.date) else extract_date_from_text(ocr_text)
    return AIParsed(date=sheet_date, entries=payload.records)


# ----------------------------
# Tier 2: regex fallback
# ----------------------------
# Row match strength; a stronger match for the same student replaces a weaker one.
MATCH_PARTIAL = 1
MATCH_EXACT_NAME = 2
MATCH_NIS = 3


def is_header_line(line: str) -> bool:
    return bool(_HEADER_KEYWORDS.search(line)) and not _LONG_NUMBER.search(line)


def _nis_pattern(nis: str) -> str:
    return rf"(?<!\d){re.escape(nis)}(?!\d)"


def _contains_phrase(phrase: str, text: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", text) is not None


def _strip(line: str, fragment: str) -> str:
    return re.sub(re.escape(fragment), " ", line, flags=re.IGNORECASE)


def locate_student(line: str, roster: list[RosterStudent]) -> tuple[Optional[RosterStudent], str, int]:
    """Roster student mentioned on `line`, the rest of the line and the match kind."""
    # Longest registration number wins so a short NIS cannot claim the row
    # index ("1.") of another student's row.
    by_nis = [s for s in roster if s.registration_number and re.search(_nis_pattern(s.registration_number), line)]
    if by_nis:
        s = max(by_nis, key=lambda r: len(r.registration_number))
        rest = re.sub(_nis_pattern(s.registration_number), " ", line)
        return s, _strip(rest, s.name) if s.name else rest, MATCH_NIS

    lowered = " ".join(line.lower().split())
    name_words = [w for w in word_tokens(line) if w not in ALIAS_WORDS]
    candidate = " ".join(name_words)

    for s in roster:
        name = " ".join(s.name.lower().split())
        if name and (lowered == name or candidate == name):
            return s, _strip(line, s.name), MATCH_EXACT_NAME

    for s in roster:
        name = " ".join(s.name.lower().split())
        if not name:
            continue
        if _contains_phrase(name, lowered):
            return s, _strip(line, s.name), MATCH_PARTIAL
        if len(candidate) >= 3 and _contains_phrase(candidate, name):
            rest = line
            for w in name_words:
                rest = re.sub(rf"\b{re.escape(w)}\b", " ", rest, flags=re.IGNORECASE)
            return s, rest, MATCH_PARTIAL

    return None, line, 0


def _notes_from(rest: str) -> Optional[str]:
    words = [w for w in _NOTE_WORD.findall(rest) if w.lower() not in ALIAS_WORDS]
    words = [w for w in words if w not in ALIAS_GLYPHS]
    return " ".join(words) or None


def parse_attendance_line(line: str, roster: list[RosterStudent]) -> tuple[Optional[AttendanceRecord], int]:
    if is_header_line(line):
        return None, 0

    student, rest, kind = locate_student(line, roster)
    if student is None:
        return None, 0

    status = classify_status(rest)
    if status is None:
        # unmarked row counts as absent
        status = AttendanceStatus.ABSENT
        logger.debug("attendance.default_absent", extra={"student_id": student.id})

    rec = AttendanceRecord(
        student_id=student.id,
        registration_number=student.registration_number,
        name=student.name,
        status=status,
        notes=_notes_from(rest),
        confidence=REGEX_TIER_CONFIDENCE,
    )
    return rec, kind


def parse_with_regex(ocr_text: str, roster: list[RosterStudent]) -> tuple[str, list[AttendanceRecord]]:
    """
    One record per roster student. Between rows naming the same student the
    strongest match (NIS, exact name, partial name) wins; ties keep the first.
    """
    sheet_date = extract_date_from_text(ocr_text)
    records: list[AttendanceRecord] = []
    slot: dict[str, tuple[int, int]] = {}  # student_id -> (index, match kind)

    for raw_line in (ocr_text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue
        rec, kind = parse_attendance_line(line, roster)
        if rec is None:
            continue
        prev = slot.get(rec.student_id)
        if prev is None:
            slot[rec.student_id] = (len(records), kind)
            records.append(rec)
        elif kind > prev[1]:
            logger.debug(
                "attendance.row_replaced",
                extra={"student_id": rec.student_id, "match_kind": kind},
            )
            records[prev[0]] = rec
            slot[rec.student_id] = (prev[0], kind)

    return sheet_date, records
