"""
ocr.py
- Purpose: API routes for raw text extraction and the extraction cache.
- Design: Keep router thin. Delegate business logic to services.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, File, UploadFile, status

from attendance_ocr.api.deps import get_document_metadata, get_extraction_cache, get_ocr_service
from attendance_ocr.ocr.cache import ExtractionCache
from attendance_ocr.schemas.attendance_schema import DocumentMetadata, ExtractionResponse
from attendance_ocr.services.ocr_service import OCRService
from attendance_ocr.validations.file_validators import read_scan_bytes, validate_scan_upload

router = APIRouter(prefix="/api/ocr", tags=["OCR"])


@router.post("/extract", response_model=ExtractionResponse, response_model_by_alias=True)
def extract_text(
    file: UploadFile = File(...),
    metadata: DocumentMetadata = Depends(get_document_metadata),
    svc: OCRService = Depends(get_ocr_service),
):
    validate_scan_upload(file)
    content = read_scan_bytes(file)

    out = svc.extract_text_from_image(content, mime_type=file.content_type, metadata=metadata)
    return ExtractionResponse(
        text=out.result.text,
        confidence=out.result.confidence,
        quality=out.result.quality.to_dict(),
        fields=out.result.fields,
        cache_hit=out.cache_hit,
        validation=out.validation,
    )


@router.get("/cache/stats")
def cache_stats(cache: ExtractionCache = Depends(get_extraction_cache)):
    return asdict(cache.stats())


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
def clear_cache(cache: ExtractionCache = Depends(get_extraction_cache)):
    cache.clear()
