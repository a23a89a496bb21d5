"""attendance_ocr/events/emitter.py

Validation events: built per extraction, appended to a bounded log and
broadcast to in-process subscribers (the notification subsystem hooks in
here).

Nothing in this module may fail the extraction that triggered it: storage
errors and subscriber errors are logged and dropped.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from attendance_ocr.constants.statuses import ValidationSeverity
from attendance_ocr.schemas.attendance_schema import DocumentMetadata, ExtractionValidation
from attendance_ocr.schemas.validation_event_schema import ValidationEvent

logger = logging.getLogger("attendance_ocr.events")

Subscriber = Callable[[ValidationEvent], None]

DEFAULT_USER_ID = "anonymous"
DEFAULT_USER_ROLE = "unknown"


class ValidationEventStore(Protocol):
    def append(self, event: ValidationEvent) -> None: ...


def validation_event_id(severity: ValidationSeverity, document_id: str) -> str:
    return f"validation-{severity.value}-{document_id}"


def build_validation_event(
    validation: ExtractionValidation,
    *,
    confidence: float,
    document_id: str,
    document_type: str,
    metadata: Optional[DocumentMetadata] = None,
    now: Optional[datetime] = None,
) -> ValidationEvent:
    meta = metadata or DocumentMetadata()
    doc_id = meta.document_id or document_id
    return ValidationEvent(
        id=validation_event_id(validation.severity, doc_id),
        severity=validation.severity,
        document_id=doc_id,
        document_type=meta.document_type or document_type,
        confidence=confidence,
        issues=list(validation.issues),
        timestamp=now or datetime.now(timezone.utc).replace(tzinfo=None),
        user_id=meta.user_id or DEFAULT_USER_ID,
        user_role=meta.user_role or DEFAULT_USER_ROLE,
        action_url=meta.action_url,
    )


class ValidationEventEmitter:
    def __init__(self, store: Optional[ValidationEventStore] = None):
        self._store = store
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, event: ValidationEvent) -> ValidationEvent:
        if self._store is not None:
            try:
                self._store.append(event)
            except Exception:
                logger.exception(
                    "events.persist_failed",
                    extra={"event_id": event.id, "severity": event.severity.value},
                )

        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("events.subscriber_failed", extra={"event_id": event.id})

        logger.info(
            "events.emitted",
            extra={
                "event_id": event.id,
                "severity": event.severity.value,
                "issues": len(event.issues),
                "subscribers": len(subscribers),
            },
        )
        return event
