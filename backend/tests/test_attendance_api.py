import io
import json

import pytest
from fastapi.testclient import TestClient

from attendance_ocr.api import deps
from attendance_ocr.main import app
from attendance_ocr.services.storage.supabase_storage import StoredObject

from conftest import FakeRecognizer

ROSTER_JSON = json.dumps(
    [
        {"id": "s1", "registrationNumber": "20260001", "name": "Ahmad Fauzi"},
        {"id": "s2", "nis": 20260002, "name": "Budi Santoso"},
        {"id": "s3", "registrationNumber": "20260003", "name": "Citra Dewi"},
        {"id": "s4", "registrationNumber": "20260004", "name": "Dewi Lestari"},
    ]
)


def _png(content=b"\x89PNG fake scan"):
    return {"file": ("sheet.png", io.BytesIO(content), "image/png")}


@pytest.fixture
def client(session_factory, cache, ocr_service, make_attendance_service):
    def _db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = _db
    app.dependency_overrides[deps.get_extraction_cache] = lambda: cache
    app.dependency_overrides[deps.get_ocr_service] = lambda: ocr_service
    app.dependency_overrides[deps.get_attendance_service] = lambda: make_attendance_service()
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_scan_returns_camel_case_sheet(client):
    resp = client.post("/api/attendance/scan", data={"roster": ROSTER_JSON}, files=_png())
    assert resp.status_code == 200, resp.text

    body = resp.json()
    assert body["parseTier"] == "regex"
    assert body["sheet"]["date"] == "2026-01-30"
    assert body["sheet"]["records"][0]["studentId"] == "s1"
    assert body["sheet"]["records"][1]["registrationNumber"] == "20260002"
    assert body["sheet"]["summary"] == {"present": 1, "sick": 1, "permission": 1, "absent": 1}
    assert body["validation"]["isValid"] is True
    assert body["extraction"]["cacheHit"] is False
    assert "x-request-id" in resp.headers


def test_scan_rejects_unsupported_type(client):
    files = {"file": ("sheet.docx", io.BytesIO(b"PK.."), "application/msword")}

    resp = client.post("/api/attendance/scan", data={"roster": ROSTER_JSON}, files=files)

    assert resp.status_code == 415
    assert resp.json()["error"]["code"] == "INVALID_FILE_TYPE"


def test_scan_rejects_bad_roster(client):
    resp = client.post("/api/attendance/scan", data={"roster": "[{\"id\": \"s1\"}]"}, files=_png())

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_ROSTER"


def test_scan_rejects_empty_file(client):
    resp = client.post("/api/attendance/scan", data={"roster": ROSTER_JSON}, files=_png(b""))

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "FILE_MISSING"


def test_recognizer_unavailable_is_503(client, gateway, monkeypatch):
    monkeypatch.setattr(gateway, "_recognizer_factory", lambda: FakeRecognizer(fail_init=True))

    resp = client.post("/api/ocr/extract", files=_png())

    assert resp.status_code == 503
    err = resp.json()["error"]
    assert err["code"] == "OCR_EXTRACTION_FAILED"
    assert err["reason"] == "Text recognizer unavailable"


def test_extract_uses_cache_and_reports_stats(client):
    first = client.post("/api/ocr/extract", files=_png(), data={"documentId": "doc-1"})
    second = client.post("/api/ocr/extract", files=_png(), data={"documentId": "doc-1"})

    assert first.status_code == 200, first.text
    assert first.json()["cacheHit"] is False
    assert second.json()["cacheHit"] is True
    assert second.json()["quality"]["documentType"] == "form"
    assert second.json()["fields"]["tanggal"] == "30 Januari 2026"

    stats = client.get("/api/ocr/cache/stats").json()
    assert stats == {"hits": 1, "misses": 1, "size": 1, "capacity": 10}

    assert client.delete("/api/ocr/cache").status_code == 204
    assert client.get("/api/ocr/cache/stats").json()["size"] == 0


def test_validation_events_listed_newest_first(client, recognizer):
    recognizer.confidence = 40.0

    client.post("/api/ocr/extract", files=_png(b"one"), data={"documentId": "doc-1", "userId": "guru-1"})
    client.post("/api/ocr/extract", files=_png(b"two"), data={"documentId": "doc-2"})

    resp = client.get("/api/validation-events", params={"limit": 10})
    assert resp.status_code == 200
    events = resp.json()
    assert [e["documentId"] for e in events] == ["doc-2", "doc-1"]
    assert events[0]["severity"] == "failure"
    assert events[0]["userId"] == "anonymous"
    assert events[1]["userId"] == "guru-1"

    only = client.get("/api/validation-events", params={"documentId": "doc-1"}).json()
    assert [e["id"] for e in only] == ["validation-failure-doc-1"]


def test_user_header_fills_event_user(client, recognizer):
    recognizer.confidence = 40.0

    client.post("/api/ocr/extract", files=_png(), headers={"x-user-id": "guru-7"})

    events = client.get("/api/validation-events").json()
    assert events[0]["userId"] == "guru-7"


def test_enqueue_job(client, monkeypatch):
    uploaded = {}
    queued = {}

    class FakeStorage:
        def upload_private_scan(self, content, *, filename, content_type, owner=None):
            uploaded.update(content=content, filename=filename, owner=owner)
            return StoredObject(bucket="attendance-scans", path=f"scans/{owner}/x/{filename}")

    class FakeTask:
        def delay(self, *args):
            queued["args"] = args

            class _Result:
                id = "task-123"

            return _Result()

    app.dependency_overrides[deps.get_storage] = lambda: FakeStorage()
    monkeypatch.setattr("attendance_ocr.routers.attendance.process_attendance_sheet_task", FakeTask())

    resp = client.post(
        "/api/attendance/jobs",
        data={"roster": ROSTER_JSON, "userId": "guru-1"},
        files=_png(),
    )

    assert resp.status_code == 202, resp.text
    assert resp.json() == {
        "taskId": "task-123",
        "bucket": "attendance-scans",
        "path": "scans/guru-1/x/sheet.png",
    }
    assert uploaded["owner"] == "guru-1"
    bucket, path, roster, metadata, mime_type = queued["args"]
    assert roster[1]["registrationNumber"] == "20260002"
    assert metadata == {"userId": "guru-1"}
    assert mime_type == "image/png"


def test_missing_roster_uses_error_envelope(client):
    resp = client.post("/api/attendance/scan", files=_png())

    assert resp.status_code == 422
    err = resp.json()["error"]
    assert err["code"] == "VALIDATION_ERROR"
    assert "body.roster" in err["details"]["fields"]
