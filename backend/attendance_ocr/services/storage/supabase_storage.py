"""
supabase_storage.py
- Purpose: Storage adapter for Supabase Storage (private bucket).
- Owns: scan upload, signed-URL download, object path conventions.
- Design: Treat as an infrastructure adapter; no business logic.
"""


import os
import uuid
from dataclasses import dataclass

import httpx

from attendance_ocr.core import AppError, ErrorCode, ErrorReason
from attendance_ocr.core.config import settings


@dataclass(frozen=True)
class StoredObject:
    bucket: str
    path: str


class SupabaseStorage:
    """
    Minimal adapter around Supabase Storage.

    Assumptions:
    - Bucket is private
    - Workers download through short-lived signed URLs
    """

    def __init__(self, bucket: str | None = None):
        self._bucket = bucket or settings.SUPABASE_STORAGE_BUCKET

        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise AppError(
                code=ErrorCode.CONFIG_ERROR,
                reason=ErrorReason.STORAGE_UNAVAILABLE,
                message="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set for background jobs",
                status_code=503,
            )

        # Import lazily so missing dependency errors are localized.
        try:
            from supabase import create_client  # type: ignore
        except ImportError as e:
            raise AppError(
                code=ErrorCode.CONFIG_ERROR,
                reason=ErrorReason.MISSING_DEPENDENCY,
                message="Supabase client library is not installed or failed to import",
                status_code=500,
            ) from e

        self._client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)

    @property
    def bucket(self) -> str:
        return self._bucket

    def _sanitize_filename(self, name: str | None) -> str:
        if not name:
            return "scan"
        base = os.path.basename(name)
        return base or "scan"

    def _build_scan_path(self, owner: str | None, filename: str | None) -> str:
        """
        Storage key convention:
        scans/{owner}/{uuid}/{filename}
        """
        safe_name = self._sanitize_filename(filename)
        return f"scans/{owner or 'anonymous'}/{uuid.uuid4()}/{safe_name}"

    def upload_private_scan(
        self,
        content: bytes,
        *,
        filename: str | None,
        content_type: str | None,
        owner: str | None = None,
    ) -> StoredObject:
        path = self._build_scan_path(owner, filename)

        try:
            opts = {"content-type": content_type or "application/octet-stream"}
            self._client.storage.from_(self._bucket).upload(path, content, opts)
        except Exception as e:
            raise AppError(
                code=ErrorCode.STORAGE_UPLOAD_FAILED,
                reason=ErrorReason.UPLOAD_FAILED,
                message=f"Failed to upload scan to storage: {e}",
                status_code=502,
            ) from e

        return StoredObject(bucket=self._bucket, path=path)

    def create_signed_download_url(self, obj: StoredObject, expires_in_seconds: int = 600) -> str:
        try:
            res = self._client.storage.from_(obj.bucket).create_signed_url(obj.path, expires_in_seconds)
        except Exception as e:
            raise AppError(
                code=ErrorCode.STORAGE_ERROR,
                reason=ErrorReason.SIGNED_URL_FAILED,
                message="Failed to create signed download URL",
                status_code=500,
            ) from e

        # Supabase returns a dict with signedURL in many client versions
        if isinstance(res, dict):
            url = res.get("signedURL") or res.get("signedUrl") or res.get("signed_url")
            if url:
                return url

        if isinstance(res, str):
            return res

        raise AppError(
            code=ErrorCode.STORAGE_ERROR,
            reason=ErrorReason.SIGNED_URL_FAILED,
            message="Signed URL response was not in the expected format",
            status_code=500,
        )

    def download_bytes(self, obj: StoredObject, expires_in_seconds: int = 600) -> bytes:
        """Download a private object as bytes using a signed URL."""
        url = self.create_signed_download_url(obj, expires_in_seconds=expires_in_seconds)

        try:
            with httpx.Client(timeout=30.0, follow_redirects=True) as client:
                resp = client.get(url)
                resp.raise_for_status()
                return resp.content
        except httpx.HTTPError as e:
            raise AppError(
                code=ErrorCode.STORAGE_ERROR,
                reason=ErrorReason.DOWNLOAD_FAILED,
                message="Failed to download object from storage",
                status_code=500,
            ) from e
