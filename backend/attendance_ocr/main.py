# attendance_ocr/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from attendance_ocr.api.deps import get_ocr_gateway
from attendance_ocr.core.config import settings
from attendance_ocr.core.logging_config import configure_logging
from attendance_ocr.db.base import init_db
from attendance_ocr.db.session import engine
from attendance_ocr.middleware.request_logging import RequestLoggingMiddleware
from attendance_ocr.routers.attendance import router as attendance_router
from attendance_ocr.routers.health import router as health_router
from attendance_ocr.routers.llm_health import router as llm_health_router
from attendance_ocr.routers.ocr import router as ocr_router
from attendance_ocr.routers.validation_events import router as validation_events_router
from attendance_ocr.core.exception_handlers import (
    app_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from attendance_ocr.core import AppError

configure_logging()


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(engine)
    yield
    # recognizer is started lazily on first scan; release it on shutdown
    get_ocr_gateway().terminate()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.add_middleware(RequestLoggingMiddleware)

    # ---- CORS (env-driven) ----
    # CORS_ALLOW_ORIGINS="http://localhost:3000,https://school.example.org"
    # If allow_origins is empty, default to localhost only.
    allow_origins = _split_csv(settings.CORS_ALLOW_ORIGINS) or ["http://localhost:3000"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(health_router)
    app.include_router(llm_health_router)
    app.include_router(ocr_router)
    app.include_router(attendance_router)
    app.include_router(validation_events_router)

    return app


app = create_app()
