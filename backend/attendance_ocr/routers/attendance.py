"""
attendance.py
- Purpose: API routes for scanning attendance sheets (sync and background).
- Design: Keep router thin. Upload/roster validation lives in validations/,
  the pipeline in AttendanceService.
"""

from celery.result import AsyncResult
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from attendance_ocr.api.deps import get_attendance_service, get_document_metadata, get_storage
from attendance_ocr.celery_app import celery_app
from attendance_ocr.schemas.attendance_schema import AttendanceScanResult, DocumentMetadata
from attendance_ocr.services.attendance_service import AttendanceService
from attendance_ocr.services.storage.supabase_storage import SupabaseStorage
from attendance_ocr.tasks.ocr_pipeline import process_attendance_sheet_task
from attendance_ocr.validations.file_validators import parse_roster, read_scan_bytes, validate_scan_upload

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


@router.post("/scan", response_model=AttendanceScanResult, response_model_by_alias=True)
def scan_attendance_sheet(
    file: UploadFile = File(...),
    roster: str = Form(...),
    metadata: DocumentMetadata = Depends(get_document_metadata),
    svc: AttendanceService = Depends(get_attendance_service),
):
    validate_scan_upload(file)
    students = parse_roster(roster)
    content = read_scan_bytes(file)

    return svc.scan_attendance_sheet(
        content,
        students,
        mime_type=file.content_type,
        metadata=metadata,
    )


@router.post("/jobs", status_code=status.HTTP_202_ACCEPTED)
def enqueue_attendance_scan(
    file: UploadFile = File(...),
    roster: str = Form(...),
    metadata: DocumentMetadata = Depends(get_document_metadata),
    storage: SupabaseStorage = Depends(get_storage),
):
    validate_scan_upload(file)
    students = parse_roster(roster)
    content = read_scan_bytes(file)

    stored = storage.upload_private_scan(
        content,
        filename=file.filename,
        content_type=file.content_type,
        owner=metadata.user_id,
    )
    task = process_attendance_sheet_task.delay(
        stored.bucket,
        stored.path,
        [s.model_dump(by_alias=True) for s in students],
        metadata.model_dump(by_alias=True, exclude_none=True),
        file.content_type,
    )
    return {"taskId": task.id, "bucket": stored.bucket, "path": stored.path}


@router.get("/jobs/{task_id}")
def get_attendance_job(task_id: str):
    res = AsyncResult(task_id, app=celery_app)
    body = {"taskId": task_id, "state": res.state}
    if res.successful():
        body["result"] = res.result
    elif res.failed():
        body["error"] = str(res.result)
    return body
