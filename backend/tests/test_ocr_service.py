import pytest

from attendance_ocr.core import AppError, ErrorCode
from attendance_ocr.ocr.cache import ExtractionCache, content_digest
from attendance_ocr.ocr.errors import RecognitionFailure, RecognizerInitError, UnsupportedFileFormat
from attendance_ocr.ocr.gateway import OCRGateway
from attendance_ocr.repos.validation_event.read import ValidationEventReadRepo
from attendance_ocr.schemas.attendance_schema import DocumentMetadata
from attendance_ocr.services.ocr_service import OCRService

from conftest import FakeRecognizer


def _events(session_factory):
    db = session_factory()
    try:
        return ValidationEventReadRepo(db).list_recent()
    finally:
        db.close()


def _service(recognizer, emitter):
    gateway = OCRGateway(cache=ExtractionCache(), recognizer_factory=lambda: recognizer)
    return OCRService(gateway=gateway, emitter=emitter)


def test_extraction_result(ocr_service, recognizer):
    out = ocr_service.extract_text_from_image(b"scan-bytes", mime_type="image/png")

    assert out.result.text == recognizer.text
    assert out.result.confidence == 88.0
    assert out.result.fields["kelas"] == "X IPA 1"
    assert out.cache_hit is False
    assert out.event is None  # clean sheet, nothing to report


def test_recognizer_starts_lazily(ocr_service, gateway, recognizer):
    assert not gateway.is_initialized

    ocr_service.extract_text_from_image(b"scan-bytes")

    assert gateway.is_initialized
    assert recognizer.initialized


def test_cache_hit_skips_recognizer_and_still_emits(session_factory, emitter):
    recognizer = FakeRecognizer(text="001 Ahmad ✓", confidence=65.0)
    svc = _service(recognizer, emitter)

    first = svc.extract_text_from_image(b"same", mime_type="image/png", modified_at=1)
    second = svc.extract_text_from_image(b"same", mime_type="image/png", modified_at=1)

    assert recognizer.calls == 1
    assert (first.cache_hit, second.cache_hit) == (False, True)
    assert second.result is first.result
    assert first.event is not None and second.event is not None
    assert first.event.id == second.event.id
    assert len(_events(session_factory)) == 2


def test_metadata_changes_cache_key(emitter):
    recognizer = FakeRecognizer(text="001 Ahmad ✓", confidence=65.0)
    svc = _service(recognizer, emitter)

    svc.extract_text_from_image(b"same", metadata=DocumentMetadata(user_id="u1"))
    svc.extract_text_from_image(b"same", metadata=DocumentMetadata(user_id="u2"))

    assert recognizer.calls == 2


def test_event_document_id(emitter):
    svc = _service(FakeRecognizer(text="", confidence=20.0), emitter)

    anon = svc.extract_text_from_image(b"blank page")
    named = svc.extract_text_from_image(b"blank page", metadata=DocumentMetadata(document_id="doc-7"))

    assert anon.event.document_id == content_digest(anon.cache_key)
    assert anon.event.severity.value == "failure"
    assert named.event.document_id == "doc-7"
    assert named.event.id == "validation-failure-doc-7"


def test_recognizer_init_failure_maps_to_503(emitter):
    svc = _service(FakeRecognizer(fail_init=True), emitter)

    with pytest.raises(AppError) as exc:
        svc.extract_text_from_image(b"scan")

    assert exc.value.status_code == 503
    assert exc.value.code == ErrorCode.OCR_EXTRACTION_FAILED
    assert isinstance(exc.value.__cause__, RecognizerInitError)


def test_unsupported_format_maps_to_422(emitter):
    svc = _service(FakeRecognizer(error=UnsupportedFileFormat("Unreadable image")), emitter)

    with pytest.raises(AppError) as exc:
        svc.extract_text_from_image(b"scan", mime_type="image/png")

    assert exc.value.status_code == 422
    assert "Unreadable image" in str(exc.value)


def test_unexpected_recognizer_error_keeps_cause(emitter):
    boom = ValueError("bad pixel buffer")
    svc = _service(FakeRecognizer(error=boom), emitter)

    with pytest.raises(AppError) as exc:
        svc.extract_text_from_image(b"scan")

    assert exc.value.status_code == 500
    failure = exc.value.__cause__
    assert isinstance(failure, RecognitionFailure)
    assert failure.__cause__ is boom


def test_failed_recognition_is_not_cached(emitter):
    recognizer = FakeRecognizer(error=RuntimeError("tesseract crashed"))
    svc = _service(recognizer, emitter)

    for _ in range(2):
        with pytest.raises(AppError):
            svc.extract_text_from_image(b"scan")

    assert recognizer.calls == 2


def test_progress_reports_extraction_window(ocr_service):
    seen = []

    ocr_service.extract_text_from_image(b"scan", progress=lambda s, phase, pct: seen.append((phase, pct)))

    assert seen[0] == ("initializing", 5)
    extracting = [pct for phase, pct in seen if phase == "extracting"]
    assert extracting[0] == 10
    assert extracting[-1] == 50
    assert all(10 <= p <= 50 for p in extracting)


def test_broken_progress_callback_is_ignored(ocr_service):
    def broken(*_):
        raise RuntimeError("ui gone")

    out = ocr_service.extract_text_from_image(b"scan", progress=broken)

    assert out.result.text
