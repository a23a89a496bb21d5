"""attendance_ocr/attendance/status_aliases.py

Status marks teachers actually write on paper sheets. Glyphs are matched
anywhere in the text; letters and words only as whole tokens, otherwise the
"a" in every name would read as alpa.
"""

import re
from typing import Optional

from attendance_ocr.constants.statuses import AttendanceStatus

# Checked in this order; first hit wins.
STATUS_ALIASES: dict[AttendanceStatus, dict[str, tuple[str, ...]]] = {
    AttendanceStatus.PRESENT: {
        "glyphs": ("✓", "√", "✔", "☑"),
        "words": ("hadir", "present", "h", "p", "v"),
    },
    AttendanceStatus.SICK: {
        "glyphs": (),
        "words": ("sakit", "sick", "s"),
    },
    AttendanceStatus.PERMISSION: {
        "glyphs": (),
        "words": ("izin", "ijin", "permission", "i"),
    },
    AttendanceStatus.ABSENT: {
        "glyphs": ("✗", "✖", "✘", "×"),
        "words": ("alpa", "alpha", "absent", "a", "x"),
    },
}

ALIAS_WORDS: frozenset[str] = frozenset(
    w for aliases in STATUS_ALIASES.values() for w in aliases["words"]
)
ALIAS_GLYPHS: frozenset[str] = frozenset(
    g for aliases in STATUS_ALIASES.values() for g in aliases["glyphs"]
)

_WORD = re.compile(r"[^\W\d_]+")


def word_tokens(text: str) -> list[str]:
    return _WORD.findall((text or "").lower())


def classify_status(text: str) -> Optional[AttendanceStatus]:
    """Status indicated in `text`, or None when no mark is present."""
    t = text or ""
    tokens = set(word_tokens(t))
    for status, aliases in STATUS_ALIASES.items():
        if any(g in t for g in aliases["glyphs"]):
            return status
        if tokens.intersection(aliases["words"]):
            return status
    return None


def normalize_status(value: Optional[str]) -> AttendanceStatus:
    """
    Map whatever the AI tier wrote (present / hadir / "S" / ✓) onto a status.
    Unrecognised values count as absent, same as an unmarked row.
    """
    v = (value or "").strip().lower()
    for status in AttendanceStatus:
        if v == status.value:
            return status
    return classify_status(v) or AttendanceStatus.ABSENT


def status_alias_table() -> str:
    lines = []
    for status, aliases in STATUS_ALIASES.items():
        marks = list(aliases["glyphs"]) + list(aliases["words"])
        lines.append(f"- {status.value}: " + ", ".join(marks))
    return "\n".join(lines)
