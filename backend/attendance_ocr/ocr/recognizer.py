"""attendance_ocr/ocr/recognizer.py

Raster -> text recognition.

Tesseract (via pytesseract) reads images directly; PDFs are rasterized page
by page with PyMuPDF first. Confidence is the mean word confidence reported
by `image_to_data` (words Tesseract marks with -1 are layout boxes, skipped).
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import fitz  # PyMuPDF
import pytesseract
from PIL import Image, UnidentifiedImageError

from attendance_ocr.core.config import settings
from attendance_ocr.ocr.errors import RecognitionFailure, RecognizerInitError, UnsupportedFileFormat
from attendance_ocr.ocr.types import RecognizedText, RecognizerProgress

logger = logging.getLogger("attendance_ocr.ocr.recognizer")

PDF_MIME_TYPES = {"application/pdf"}
IMAGE_MIME_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/tiff",
    "image/bmp",
    "image/gif",
}
SUPPORTED_MIME_TYPES = PDF_MIME_TYPES | IMAGE_MIME_TYPES


class Recognizer(Protocol):
    def initialize(self) -> None: ...

    def recognize(
        self,
        content: bytes,
        *,
        mime_type: str | None = None,
        progress: Optional[RecognizerProgress] = None,
    ) -> RecognizedText: ...

    def terminate(self) -> None: ...


def is_pdf(content: bytes, mime_type: str | None) -> bool:
    return (mime_type or "").lower() in PDF_MIME_TYPES or content[:5] == b"%PDF-"


@dataclass
class TesseractRecognizer:
    """
    Single shared Tesseract adapter.
    pytesseract spawns one tesseract process per call, so no pool is needed.
    """
    lang: str = field(default_factory=lambda: settings.OCR_LANG)
    render_dpi: int = field(default_factory=lambda: settings.OCR_RENDER_DPI)
    _ready: bool = False

    def initialize(self) -> None:
        try:
            version = pytesseract.get_tesseract_version()
            available = set(pytesseract.get_languages(config=""))
        except pytesseract.TesseractNotFoundError as e:
            raise RecognizerInitError("tesseract binary not found on PATH") from e
        except (pytesseract.TesseractError, OSError) as e:
            raise RecognizerInitError(f"tesseract failed to start: {e}") from e

        missing = [lg for lg in self.lang.split("+") if lg and lg not in available]
        if missing:
            raise RecognizerInitError(f"tesseract language data missing: {missing}")

        self._ready = True
        logger.info("ocr.recognizer_ready", extra={"engine": "tesseract", "version": str(version), "lang": self.lang})

    def terminate(self) -> None:
        self._ready = False

    def recognize(
        self,
        content: bytes,
        *,
        mime_type: str | None = None,
        progress: Optional[RecognizerProgress] = None,
    ) -> RecognizedText:
        if not content:
            raise UnsupportedFileFormat("Empty file")

        images = self._load_pages(content, mime_type)
        texts: list[str] = []
        confidences: list[float] = []

        for i, img in enumerate(images):
            if progress:
                progress(f"Recognizing page {i + 1}/{len(images)}", i / len(images))
            page_text, page_confs = self._recognize_image(img)
            texts.append(page_text)
            confidences.extend(page_confs)

        if progress:
            progress("Recognition finished", 1.0)

        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return RecognizedText(
            text="\n\n".join(t for t in texts if t).strip(),
            confidence=round(confidence, 2),
            page_count=len(images),
        )

    def _load_pages(self, content: bytes, mime_type: str | None) -> list[Image.Image]:
        if is_pdf(content, mime_type):
            try:
                doc = fitz.open(stream=content, filetype="pdf")
            except (RuntimeError, ValueError) as e:  # fitz.FileDataError is a RuntimeError
                raise UnsupportedFileFormat("Unreadable PDF") from e
            zoom = self.render_dpi / 72.0
            mat = fitz.Matrix(zoom, zoom)
            pages: list[Image.Image] = []
            try:
                for page in doc:
                    pix = page.get_pixmap(matrix=mat, alpha=False)
                    pages.append(Image.frombytes("RGB", (pix.width, pix.height), pix.samples))
            finally:
                doc.close()
            if not pages:
                raise UnsupportedFileFormat("PDF has no pages")
            return pages

        if mime_type and mime_type.lower() not in IMAGE_MIME_TYPES:
            raise UnsupportedFileFormat(f"Unsupported mime type: {mime_type}")

        try:
            img = Image.open(io.BytesIO(content))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise UnsupportedFileFormat("Unreadable image") from e

        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        return [img]

    def _recognize_image(self, img: Image.Image) -> tuple[str, list[float]]:
        try:
            data = pytesseract.image_to_data(
                img,
                lang=self.lang,
                config="--oem 3 --psm 6",
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise RecognizerInitError("tesseract binary disappeared") from e
        except (pytesseract.TesseractError, RuntimeError) as e:
            raise RecognitionFailure(f"tesseract failed: {e}") from e

        lines: dict[tuple[int, int, int], list[str]] = {}
        confs: list[float] = []
        for i, word in enumerate(data.get("text", [])):
            word = (word or "").strip()
            conf = float(data["conf"][i])
            if not word or conf < 0:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(word)
            confs.append(conf)

        text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
        return text, confs
