# attendance_ocr/celery_app.py
from celery import Celery
from dotenv import load_dotenv

from attendance_ocr.core.config import settings
from attendance_ocr.core.logging_config import configure_logging

load_dotenv()

# Ensure logging is configured in worker processes as early as possible.
configure_logging()

BROKER_URL = settings.REDIS_BROKER_URL
BACKEND_URL = settings.CELERY_RESULT_BACKEND or BROKER_URL

celery_app = Celery(
    "attendance_ocr",
    broker=BROKER_URL,
    backend=BACKEND_URL,
    include=["attendance_ocr.tasks.ocr_pipeline"],
)

# reliability defaults (important for at-least-once)
celery_app.conf.task_acks_late = True
celery_app.conf.worker_prefetch_multiplier = 1
celery_app.conf.task_reject_on_worker_lost = True

# prevent Celery from overriding our root logger
celery_app.conf.worker_hijack_root_logger = False

celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]

celery_app.conf.task_routes = {
    "attendance_ocr.tasks.ocr_pipeline.process_attendance_sheet_task": {"queue": "ocr_q"},
}
