from datetime import date

import pytest

from attendance_ocr.attendance.dates import extract_date_from_text, is_iso_date

TODAY = date(2026, 10, 19)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Tanggal: 30 Januari 2026", "2026-01-30"),
        ("30-01-2026", "2026-01-30"),
        ("30/01/2026", "2026-01-30"),
        ("Hari: Senin, 2026-02-03", "2026-02-03"),
        ("5 mei 2026", "2026-05-05"),
        ("1 DESEMBER 2025", "2025-12-01"),
    ],
)
def test_extracts_supported_formats(text, expected):
    assert extract_date_from_text(text, today=TODAY) == expected


def test_unparsable_falls_back_to_today():
    assert extract_date_from_text("Daftar hadir tanpa tanggal", today=TODAY) == "2026-10-19"
    assert extract_date_from_text("", today=TODAY) == "2026-10-19"


def test_impossible_dates_are_skipped():
    assert extract_date_from_text("31-02-2026 diganti 2026-03-01", today=TODAY) == "2026-03-01"


def test_default_today_is_iso():
    assert is_iso_date(extract_date_from_text("no date here"))


@pytest.mark.parametrize(
    "value,ok",
    [("2026-01-30", True), ("2026-02-30", False), ("30-01-2026", False), (None, False), ("", False)],
)
def test_is_iso_date(value, ok):
    assert is_iso_date(value) is ok
