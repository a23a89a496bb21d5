# attendance_ocr/routers/llm_health.py
from fastapi import APIRouter
from attendance_ocr.llm.client import llm_generate

router = APIRouter(prefix="/api/llm", tags=["llm"])

@router.get("/health")
def llm_health():
    resp = llm_generate(
        purpose="healthcheck",
        prompt_name="parse_attendance",
        prompt_version="v1",
        variables={
            "roster": "- s1 | 001 | Ahmad",
            "status_aliases": "present: hadir, ✓",
            "ocr_text": "Daftar Hadir 30 Januari 2026\n001 Ahmad ✓",
        },
    )
    return {"ok": True, "sample": resp.output_text[:200]}
