# attendance_ocr/core/config.py
import os
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.parent

class Settings(BaseSettings):
    app_name: str = "AttendanceOCR"
    env: str = "local"
    DATABASE_URL: str = "sqlite:///./attendance_ocr.db"

    # Celery
    REDIS_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str | None = None

    # Supabase (scan uploads for background jobs)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_STORAGE_BUCKET: str = "attendance-scans"

    # =========================
    # LLM (AI parsing tier)
    # =========================
    LLM_PROVIDER: str = "gemini"
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash"

    LLM_TIMEOUT_SECONDS: int = 30
    LLM_MAX_RETRIES: int = 1
    LLM_MAX_OUTPUT_TOKENS: int = 4096
    LLM_TEMPERATURE: float = 0.1

    # =========================
    # OCR pipeline
    # =========================
    OCR_LANG: str = "ind+eng"
    OCR_RENDER_DPI: int = 300
    OCR_MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    OCR_CACHE_MAX_ENTRIES: int = 100

    # Hard ceiling for the whole AI tier (includes retries)
    AI_PARSE_TIMEOUT_SECONDS: float = 45.0

    ATTENDANCE_CONFIDENCE_THRESHOLD: float = 75.0
    VALIDATION_EVENT_LOG_CAPACITY: int = 500

    CORS_ALLOW_ORIGINS: str | None = None

    model_config = SettingsConfigDict(
        env_file=os.path.join(PROJECT_ROOT, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

settings = Settings()
