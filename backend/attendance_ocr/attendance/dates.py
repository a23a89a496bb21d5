"""attendance_ocr/attendance/dates.py

Sheet date detection. Attendance sheets from Indonesian schools write dates
as 30-01-2026, 30/01/2026, 2026-01-30 or "30 Januari 2026".
"""

import re
from datetime import date
from typing import Optional

INDONESIAN_MONTHS: dict[str, str] = {
    "januari": "01",
    "februari": "02",
    "maret": "03",
    "april": "04",
    "mei": "05",
    "juni": "06",
    "juli": "07",
    "agustus": "08",
    "september": "09",
    "oktober": "10",
    "november": "11",
    "desember": "12",
}

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_DAY_MONTH_YEAR = re.compile(r"(?<!\d)(\d{1,2})[-/](\d{1,2})[-/](\d{4})(?!\d)")
_YEAR_MONTH_DAY = re.compile(r"(?<!\d)(\d{4})[-/](\d{1,2})[-/](\d{1,2})(?!\d)")
_DAY_MONTHNAME_YEAR = re.compile(
    r"(?<!\d)(\d{1,2})\s*(" + "|".join(INDONESIAN_MONTHS) + r")\s*(\d{4})(?!\d)",
    re.IGNORECASE,
)


def _as_iso(year: str, month: str, day: str) -> Optional[str]:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def is_iso_date(value: Optional[str]) -> bool:
    if not value or not ISO_DATE_PATTERN.match(value):
        return False
    y, m, d = value.split("-")
    return _as_iso(y, m, d) is not None


def extract_date_from_text(text: str, *, today: Optional[date] = None) -> str:
    """
    First calendar-valid date found, tried format by format:
    DD-MM-YYYY, YYYY-MM-DD, DD <bulan> YYYY. Falls back to today.
    """
    t = text or ""

    for m in _DAY_MONTH_YEAR.finditer(t):
        iso = _as_iso(m.group(3), m.group(2), m.group(1))
        if iso:
            return iso

    for m in _YEAR_MONTH_DAY.finditer(t):
        iso = _as_iso(m.group(1), m.group(2), m.group(3))
        if iso:
            return iso

    for m in _DAY_MONTHNAME_YEAR.finditer(t):
        iso = _as_iso(m.group(3), INDONESIAN_MONTHS[m.group(2).lower()], m.group(1))
        if iso:
            return iso

    return (today or date.today()).isoformat()
