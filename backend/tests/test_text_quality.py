import pytest

from attendance_ocr.constants.statuses import DocumentType
from attendance_ocr.ocr.fields import extract_labeled_fields
from attendance_ocr.ocr.quality import assess_text_quality, classify_document_type, has_unlabelled_numbers

from conftest import SHEET_TEXT


def test_attendance_sheet_is_high_quality_form():
    q = assess_text_quality(SHEET_TEXT, 88.0)

    assert q.is_searchable
    assert q.is_high_quality
    assert q.has_meaningful_content
    assert q.word_count >= 20
    assert q.character_count == len(SHEET_TEXT)
    assert q.document_type == DocumentType.FORM


def test_short_text_penalty():
    q = assess_text_quality("Nilai ujian semester", 90.0)

    assert q.word_count == 3
    assert q.estimated_accuracy == 72.0
    assert not q.is_searchable
    assert not q.has_meaningful_content
    assert q.document_type == DocumentType.ACADEMIC


def test_unlabelled_number_penalty():
    text = "Nomor pokok 12345 tercatat di sini untuk arsip sekolah kami"
    q = assess_text_quality(text, 80.0)

    assert q.word_count == 10
    assert q.estimated_accuracy == 56.0


@pytest.mark.parametrize(
    "text",
    ["NIS 12345", "Tanggal 30-01-2026", "30 Januari 2026", "kelas 10", "tidak ada angka"],
)
def test_labelled_or_date_numbers_are_not_noise(text):
    assert has_unlabelled_numbers(text) is False


def test_symbols_only_is_not_meaningful():
    q = assess_text_quality("✓ ✓ ✓ ✓ ✓", 95.0)

    assert q.word_count == 5
    assert q.is_searchable
    assert not q.has_meaningful_content


def test_empty_text():
    q = assess_text_quality("", 0.0)

    assert q.word_count == 0
    assert q.estimated_accuracy == 0.0
    assert q.document_type == DocumentType.UNKNOWN


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Rapor semester ganjil", DocumentType.ACADEMIC),
        ("Nilai kehadiran siswa", DocumentType.ACADEMIC),
        ("Daftar Hadir Kelas X", DocumentType.FORM),
        ("Sertifikat penghargaan lomba", DocumentType.CERTIFICATE),
        ("Surat undangan rapat orang tua", DocumentType.ADMINISTRATIVE),
        ("lorem ipsum dolor", DocumentType.UNKNOWN),
    ],
)
def test_document_type_priority(text, expected):
    assert classify_document_type(text) == expected


def test_labeled_fields_from_sheet_header():
    assert extract_labeled_fields(SHEET_TEXT) == {"kelas": "X IPA 1", "tanggal": "30 Januari 2026"}


def test_labeled_fields_first_occurrence_wins():
    fields = extract_labeled_fields("Wali Kelas: Bu Sari\nwali kelas: Pak Budi")
    assert fields == {"wali_kelas": "Bu Sari"}
