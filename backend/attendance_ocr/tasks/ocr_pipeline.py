from __future__ import annotations

import logging

from attendance_ocr.celery_app import celery_app
from attendance_ocr.core import AppError
from attendance_ocr.core.request_context import clear_context, set_context
from attendance_ocr.schemas.attendance_schema import DocumentMetadata, RosterStudent
from attendance_ocr.services.storage.supabase_storage import StoredObject, SupabaseStorage

logger = logging.getLogger("attendance_ocr.tasks.ocr_pipeline")


@celery_app.task(
    name="attendance_ocr.tasks.ocr_pipeline.process_attendance_sheet_task",
    bind=True,
    max_retries=3,
    default_retry_delay=15,
)
def process_attendance_sheet_task(
    self,
    bucket: str,
    path: str,
    roster: list[dict],
    metadata: dict | None = None,
    mime_type: str | None = None,
):
    """
    Download a stored scan and run the attendance pipeline on it.
    Returns the scan result in its camelCase wire shape.
    """
    from attendance_ocr.api.deps import get_attendance_service

    meta = DocumentMetadata.model_validate(metadata or {})
    set_context(
        task_id=getattr(self.request, "id", None),
        document_id=meta.document_id,
        user_id=meta.user_id,
    )

    try:
        logger.info("task.start", extra={"task": "process_attendance_sheet_task", "path": path})
        students = [RosterStudent.model_validate(s) for s in roster]

        content = SupabaseStorage(bucket=bucket).download_bytes(StoredObject(bucket=bucket, path=path))

        result = get_attendance_service().scan_attendance_sheet(
            content,
            students,
            mime_type=mime_type,
            metadata=meta,
        )
        logger.info(
            "task.done",
            extra={
                "task": "process_attendance_sheet_task",
                "records": len(result.sheet.records),
                "parse_tier": result.parse_tier.value,
            },
        )
        return {"ok": True, "result": result.model_dump(mode="json", by_alias=True)}

    except AppError as e:
        logger.warning("task.app_error", extra={"task": "process_attendance_sheet_task", "error": str(e)})
        return {"ok": False, "error": e.to_dict()["error"]}
    except Exception as e:
        logger.exception("task.retry", extra={"task": "process_attendance_sheet_task"})
        raise self.retry(exc=e)
    finally:
        clear_context()
