"""attendance_ocr/ocr/types.py

Lightweight dataclasses for recognition + quality assessment outputs.
Design goals:
- immutable once built (results are shared through the extraction cache)
- plain data, no behaviour
"""


from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from attendance_ocr.constants.statuses import DocumentType


# (status, phase, percent) -> None
ProgressCallback = Callable[[str, str, float], None]


@dataclass(frozen=True)
class RecognizedText:
    text: str
    confidence: float  # 0 - 100
    page_count: int = 1


@dataclass(frozen=True)
class TextQuality:
    is_searchable: bool
    is_high_quality: bool
    estimated_accuracy: float  # 0 - 100
    word_count: int
    character_count: int
    has_meaningful_content: bool
    document_type: DocumentType

    def to_dict(self) -> dict[str, Any]:
        return {
            "isSearchable": self.is_searchable,
            "isHighQuality": self.is_high_quality,
            "estimatedAccuracy": self.estimated_accuracy,
            "wordCount": self.word_count,
            "characterCount": self.character_count,
            "hasMeaningfulContent": self.has_meaningful_content,
            "documentType": self.document_type.value,
        }


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    confidence: float  # 0 - 100
    quality: TextQuality
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "quality": self.quality.to_dict(),
            "fields": dict(self.fields),
        }


@dataclass(frozen=True)
class GatewayResult:
    result: ExtractionResult
    cache_key: str
    cache_hit: bool
    strategy: Optional[str] = None  # None on cache hit


# (status, fraction 0.0 - 1.0) -> None, reported by the recognizer itself
RecognizerProgress = Callable[[str, float], None]
