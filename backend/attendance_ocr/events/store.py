"""attendance_ocr/events/store.py

SQL-backed validation-event log. Each append runs in its own short
transaction so it never shares a session with request handling code.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from attendance_ocr.repos.validation_event.write import ValidationEventWriteRepo
from attendance_ocr.schemas.validation_event_schema import ValidationEvent

logger = logging.getLogger("attendance_ocr.events.store")


class SqlValidationEventStore:
    def __init__(self, session_factory: Callable[[], Session], capacity: int = 500):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._session_factory = session_factory
        self.capacity = capacity

    def append(self, event: ValidationEvent) -> None:
        db = self._session_factory()
        try:
            repo = ValidationEventWriteRepo(db)
            repo.append(event)
            evicted = repo.evict_beyond(self.capacity)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        if evicted:
            logger.debug("events.evicted", extra={"count": evicted})
