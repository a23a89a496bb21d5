import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from attendance_ocr.db.base import init_db
from attendance_ocr.events.emitter import ValidationEventEmitter
from attendance_ocr.events.store import SqlValidationEventStore
from attendance_ocr.ocr.cache import ExtractionCache
from attendance_ocr.ocr.errors import RecognizerInitError
from attendance_ocr.ocr.gateway import OCRGateway
from attendance_ocr.ocr.types import RecognizedText
from attendance_ocr.schemas.attendance_schema import RosterStudent
from attendance_ocr.services.attendance_service import AttendanceService
from attendance_ocr.services.ocr_service import OCRService


SHEET_TEXT = """DAFTAR HADIR SISWA
Kelas: X IPA 1
Tanggal: 30 Januari 2026
NIS Nama Status Catatan
20260001  Ahmad Fauzi        H
20260002  Budi Santoso       S  Sakit
20260003  Citra Dewi         I  acara keluarga
20260004  Dewi Lestari       A
"""


class FakeRecognizer:
    """Stands in for Tesseract; records how often it was asked to recognize."""

    def __init__(self, text="", confidence=90.0, *, fail_init=False, error=None):
        self.text = text
        self.confidence = confidence
        self.fail_init = fail_init
        self.error = error
        self.calls = 0
        self.initialized = False
        self.terminated = False

    def initialize(self):
        if self.fail_init:
            raise RecognizerInitError("tesseract binary not found on PATH")
        self.initialized = True

    def recognize(self, content, *, mime_type=None, progress=None):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if progress:
            progress("Recognizing text", 0.5)
            progress("Recognizing text", 1.0)
        return RecognizedText(text=self.text, confidence=self.confidence)

    def terminate(self):
        self.terminated = True


class FakeLLM:
    """`complete(prompt) -> text` port with a canned reply."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def roster():
    return [
        RosterStudent(id="s1", registration_number="20260001", name="Ahmad Fauzi"),
        RosterStudent(id="s2", registration_number="20260002", name="Budi Santoso"),
        RosterStudent(id="s3", registration_number="20260003", name="Citra Dewi"),
        RosterStudent(id="s4", registration_number="20260004", name="Dewi Lestari"),
    ]


@pytest.fixture
def recognizer():
    return FakeRecognizer(text=SHEET_TEXT, confidence=88.0)


@pytest.fixture
def cache():
    return ExtractionCache(max_entries=10)


@pytest.fixture
def gateway(cache, recognizer):
    return OCRGateway(cache=cache, recognizer_factory=lambda: recognizer)


@pytest.fixture
def emitter(session_factory):
    return ValidationEventEmitter(store=SqlValidationEventStore(session_factory, capacity=5))


@pytest.fixture
def ocr_service(gateway, emitter):
    return OCRService(gateway=gateway, emitter=emitter)


@pytest.fixture
def make_attendance_service(ocr_service):
    def _make(complete=None, **kwargs):
        kwargs.setdefault("ai_timeout_seconds", 2.0)
        kwargs.setdefault("confidence_threshold", 75.0)
        return AttendanceService(ocr_service=ocr_service, complete=complete, **kwargs)

    return _make
