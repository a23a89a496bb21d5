"""attendance_ocr/ocr/quality.py

Cheap, explainable heuristics to score OCR output.

The recognizer only gives us a mean word confidence. Everything else here
(searchability, document type, estimated accuracy) is derived from the text
itself so it can be recomputed for cached results without touching the image.
"""



import re

from attendance_ocr.constants.statuses import DocumentType
from attendance_ocr.ocr.types import TextQuality


HIGH_CONFIDENCE_THRESHOLD = 80.0
MEDIUM_CONFIDENCE_THRESHOLD = 60.0

HIGH_QUALITY_MIN_WORDS = 20
SEARCHABLE_MIN_WORDS = 5
SHORT_TEXT_WORDS = 10

SHORT_TEXT_PENALTY = 0.8
NUMERIC_NOISE_PENALTY = 0.7

# Checked in this order; first hit wins.
_DOCUMENT_TYPE_PATTERNS: list[tuple[DocumentType, list[str]]] = [
    (
        DocumentType.ACADEMIC,
        [
            r"\bnilai\b",
            r"\brapor(t)?\b",
            r"\bujian\b",
            r"\bulangan\b",
            r"\bmata pelajaran\b",
            r"\bsemester\b",
            r"\bgrades?\b",
            r"\bexams?\b",
            r"\bscores?\b",
            r"\btranscript\b",
        ],
    ),
    (
        DocumentType.FORM,
        [
            r"\bformulir\b",
            r"\bforms?\b",
            r"\bdaftar hadir\b",
            r"\bkehadiran\b",
            r"\babsensi\b",
            r"\bpresensi\b",
            r"\battendance\b",
            r"\bisian\b",
        ],
    ),
    (
        DocumentType.CERTIFICATE,
        [
            r"\bsertifikat\b",
            r"\bcertificates?\b",
            r"\bpiagam\b",
            r"\bijazah\b",
            r"\bpenghargaan\b",
        ],
    ),
    (
        DocumentType.ADMINISTRATIVE,
        [
            r"\bsurat\b",
            r"\bmemo\b",
            r"\bpengumuman\b",
            r"\bkeputusan\b",
            r"\badministrasi\b",
            r"\bundangan\b",
            r"\bletter\b",
            r"\bnotice\b",
        ],
    ),
]

# Labels that legitimately sit next to numbers on school forms.
_NUMERIC_FIELD_KEYWORDS = {
    "nis", "nisn", "no", "nomor", "kelas", "tanggal", "tgl", "nilai",
    "tahun", "halaman", "hal", "jam", "score", "grade", "date", "year",
    "page", "class", "januari", "februari", "maret", "april", "mei", "juni",
    "juli", "agustus", "september", "oktober", "november", "desember",
}

_DATE_LIKE = re.compile(r"\b\d{1,4}[-/.]\d{1,2}[-/.]\d{1,4}\b")
_TOKEN = re.compile(r"[^\W\d_]+|\d+")
_LETTER = re.compile(r"[^\W\d_]")


def _has_any_pattern(text: str, patterns: list[str]) -> bool:
    t = (text or "").lower()
    for p in patterns:
        if re.search(p, t):
            return True
    return False


def classify_document_type(text: str) -> DocumentType:
    for doc_type, patterns in _DOCUMENT_TYPE_PATTERNS:
        if _has_any_pattern(text, patterns):
            return doc_type
    return DocumentType.UNKNOWN


def has_unlabelled_numbers(text: str) -> bool:
    """True when a run of 2+ digits has no numeric-field keyword next to it."""
    cleaned = _DATE_LIKE.sub(" ", (text or "").lower())
    tokens = _TOKEN.findall(cleaned)
    for i, tok in enumerate(tokens):
        if not tok.isdigit() or len(tok) < 2:
            continue
        prev_tok = tokens[i - 1] if i > 0 else ""
        next_tok = tokens[i + 1] if i + 1 < len(tokens) else ""
        if prev_tok in _NUMERIC_FIELD_KEYWORDS or next_tok in _NUMERIC_FIELD_KEYWORDS:
            continue
        return True
    return False


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def assess_text_quality(text: str, confidence: float) -> TextQuality:
    raw = text or ""
    words = raw.split()
    word_count = len(words)
    character_count = len(raw)

    accuracy = float(confidence)
    if word_count < SHORT_TEXT_WORDS:
        accuracy *= SHORT_TEXT_PENALTY
    if has_unlabelled_numbers(raw):
        accuracy *= NUMERIC_NOISE_PENALTY

    has_letter = bool(_LETTER.search(raw))
    only_symbols = not any(ch.isalnum() for ch in raw)

    return TextQuality(
        is_searchable=confidence >= MEDIUM_CONFIDENCE_THRESHOLD and word_count >= SEARCHABLE_MIN_WORDS,
        is_high_quality=confidence >= HIGH_CONFIDENCE_THRESHOLD and word_count >= HIGH_QUALITY_MIN_WORDS,
        estimated_accuracy=round(_clamp(accuracy), 2),
        word_count=word_count,
        character_count=character_count,
        has_meaningful_content=word_count >= SEARCHABLE_MIN_WORDS and not only_symbols and has_letter,
        document_type=classify_document_type(raw),
    )
