from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text

from attendance_ocr.api.deps import get_db, get_ocr_gateway
from attendance_ocr.ocr.gateway import OCRGateway

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(gateway: OCRGateway = Depends(get_ocr_gateway)):
    return {"status": "ok", "ocr_initialized": gateway.is_initialized}


@router.get("/db/health")
def db_health(db: Session = Depends(get_db)):
    db.execute(text("select 1"))
    return {"status": "ok", "db": "connected"}
