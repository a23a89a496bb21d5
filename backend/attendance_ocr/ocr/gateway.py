"""attendance_ocr/ocr/gateway.py

Lifecycle wrapper around the recognizer.

- initialize once, reuse across calls (lazy on first extract)
- cache lookup before recognition, cache store after quality assessment
- anything the recognizer throws that is not already an OCRError is wrapped
  in RecognitionFailure with the original exception chained
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from attendance_ocr.ocr.cache import ExtractionCache, build_cache_key
from attendance_ocr.ocr.errors import OCRError, RecognitionFailure, RecognizerInitError
from attendance_ocr.ocr.fields import extract_labeled_fields
from attendance_ocr.ocr.quality import assess_text_quality
from attendance_ocr.ocr.recognizer import Recognizer, TesseractRecognizer
from attendance_ocr.ocr.types import ExtractionResult, GatewayResult, RecognizerProgress

logger = logging.getLogger("attendance_ocr.ocr.gateway")


class OCRGateway:
    def __init__(
        self,
        cache: ExtractionCache,
        recognizer_factory: Callable[[], Recognizer] = TesseractRecognizer,
    ):
        self.cache = cache
        self._recognizer_factory = recognizer_factory
        self._recognizer: Optional[Recognizer] = None
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._recognizer is not None

    def initialize(self) -> None:
        self._ensure_recognizer()

    def terminate(self) -> None:
        with self._lock:
            if self._recognizer is None:
                return
            try:
                self._recognizer.terminate()
            finally:
                self._recognizer = None
        logger.info("ocr.recognizer_terminated")

    def _ensure_recognizer(self) -> Recognizer:
        with self._lock:
            if self._recognizer is not None:
                return self._recognizer
            try:
                recognizer = self._recognizer_factory()
                recognizer.initialize()
            except RecognizerInitError:
                raise
            except Exception as e:
                raise RecognizerInitError(f"Recognizer failed to initialize: {e}") from e
            self._recognizer = recognizer
            return recognizer

    def extract(
        self,
        content: bytes,
        *,
        mime_type: str | None = None,
        modified_at: str | int | float | None = None,
        metadata: dict[str, Any] | None = None,
        progress: Optional[RecognizerProgress] = None,
    ) -> GatewayResult:
        key = build_cache_key(content, mime_type=mime_type, modified_at=modified_at, metadata=metadata)

        cached = self.cache.get(key)
        if cached is not None:
            logger.info("ocr.cache_hit", extra={"cache_key": key[:16], "confidence": cached.confidence})
            if progress:
                progress("Loaded from cache", 1.0)
            return GatewayResult(result=cached, cache_key=key, cache_hit=True)

        recognizer = self._ensure_recognizer()

        try:
            recognized = recognizer.recognize(content, mime_type=mime_type, progress=progress)
        except OCRError:
            raise
        except Exception as e:
            raise RecognitionFailure(f"Recognition failed: {e}") from e

        confidence = max(0.0, min(100.0, float(recognized.confidence)))
        quality = assess_text_quality(recognized.text, confidence)
        result = ExtractionResult(
            text=recognized.text,
            confidence=confidence,
            quality=quality,
            fields=extract_labeled_fields(recognized.text),
        )
        self.cache.set(key, result)

        logger.info(
            "ocr.extracted",
            extra={
                "cache_key": key[:16],
                "confidence": confidence,
                "word_count": quality.word_count,
                "document_type": quality.document_type.value,
                "page_count": recognized.page_count,
            },
        )
        return GatewayResult(result=result, cache_key=key, cache_hit=False, strategy="tesseract")
