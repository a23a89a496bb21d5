from datetime import datetime

from attendance_ocr.constants.statuses import ValidationSeverity
from attendance_ocr.events.emitter import ValidationEventEmitter, build_validation_event
from attendance_ocr.events.store import SqlValidationEventStore
from attendance_ocr.repos.validation_event.read import ValidationEventReadRepo
from attendance_ocr.schemas.attendance_schema import DocumentMetadata, ExtractionValidation

NOW = datetime(2026, 1, 30, 7, 15)


def _validation(severity=ValidationSeverity.WARNING):
    return ExtractionValidation(severity=severity, issues=["OCR confidence low (65%)"])


def _event(doc_id="abc123", **kw):
    return build_validation_event(
        _validation(), confidence=65.0, document_id=doc_id, document_type="form", now=NOW, **kw
    )


def test_event_defaults():
    ev = _event()

    assert ev.id == "validation-warning-abc123"
    assert ev.document_id == "abc123"
    assert ev.document_type == "form"
    assert ev.user_id == "anonymous"
    assert ev.user_role == "unknown"
    assert ev.action_url is None
    assert ev.timestamp == NOW


def test_metadata_overrides_defaults():
    meta = DocumentMetadata(
        document_id="doc-9",
        user_id="guru-1",
        user_role="teacher",
        document_type="attendance",
        action_url="/documents/doc-9",
    )

    ev = _event(metadata=meta)

    assert ev.id == "validation-warning-doc-9"
    assert (ev.document_id, ev.user_id, ev.user_role) == ("doc-9", "guru-1", "teacher")
    assert ev.document_type == "attendance"
    assert ev.action_url == "/documents/doc-9"


def test_event_wire_shape_is_camel_case():
    body = _event().model_dump(mode="json", by_alias=True)

    assert set(body) == {
        "id", "severity", "documentId", "documentType", "confidence",
        "issues", "timestamp", "userId", "userRole", "actionUrl",
    }


def test_emit_persists_and_broadcasts(session_factory):
    emitter = ValidationEventEmitter(store=SqlValidationEventStore(session_factory, capacity=10))
    received = []
    emitter.subscribe(received.append)

    ev = emitter.emit(_event())

    assert received == [ev]
    db = session_factory()
    try:
        stored = ValidationEventReadRepo(db).list_recent()
    finally:
        db.close()
    assert [e.id for e in stored] == [ev.id]
    assert stored[0].issues == ev.issues


def test_subscriber_failure_does_not_stop_others():
    emitter = ValidationEventEmitter()
    received = []

    def broken(event):
        raise RuntimeError("notification service down")

    emitter.subscribe(broken)
    emitter.subscribe(received.append)

    emitter.emit(_event())

    assert len(received) == 1


def test_unsubscribe():
    emitter = ValidationEventEmitter()
    received = []
    unsubscribe = emitter.subscribe(received.append)

    unsubscribe()
    unsubscribe()
    emitter.emit(_event())

    assert received == []
    assert emitter.subscriber_count == 0


def test_store_failure_is_swallowed():
    class BrokenStore:
        def append(self, event):
            raise RuntimeError("db down")

    emitter = ValidationEventEmitter(store=BrokenStore())
    received = []
    emitter.subscribe(received.append)

    ev = emitter.emit(_event())

    assert received == [ev]


def test_log_is_bounded_fifo(session_factory):
    emitter = ValidationEventEmitter(store=SqlValidationEventStore(session_factory, capacity=3))

    for i in range(5):
        emitter.emit(_event(doc_id=f"doc-{i}"))

    db = session_factory()
    try:
        repo = ValidationEventReadRepo(db)
        assert repo.count() == 3
        assert [e.document_id for e in repo.list_recent()] == ["doc-4", "doc-3", "doc-2"]
        assert [e.document_id for e in repo.list_recent(document_id="doc-3")] == ["doc-3"]
        assert [e.document_id for e in repo.list_recent(limit=1)] == ["doc-4"]
    finally:
        db.close()
