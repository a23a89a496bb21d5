"""attendance_ocr/ocr/fields.py

Pull `Label: value` pairs out of recognized text (header area of forms:
"Tanggal: 30 Januari 2026", "Kelas: X IPA 1", ...).
"""

import re

_LABELLED_LINE = re.compile(r"^\s*([^\W\d_][\w .]{0,38}?)\s*:\s*(.+?)\s*$")


def extract_labeled_fields(text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in (text or "").splitlines():
        m = _LABELLED_LINE.match(line)
        if not m:
            continue
        key = re.sub(r"\s+", "_", m.group(1).strip().lower()).strip("._")
        if key and key not in fields:
            fields[key] = m.group(2)
    return fields
