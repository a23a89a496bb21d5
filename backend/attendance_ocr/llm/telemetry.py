# attendance_ocr/llm/telemetry.py
"""One structured log line per model call (success or final failure)."""

import logging
import time
from dataclasses import asdict, dataclass

logger = logging.getLogger("attendance_ocr.llm")


@dataclass
class LLMCallLog:
    trace_id: str
    provider: str
    model: str
    purpose: str
    prompt_name: str
    prompt_version: str
    latency_ms: int
    retries: int
    ok: bool
    output_chars: int = 0
    error_type: str | None = None


def now_ms() -> int:
    return int(time.monotonic() * 1000)


def log_llm_call(item: LLMCallLog) -> None:
    fields = asdict(item)
    fields["prompt"] = f"{fields.pop('prompt_name')}@{fields.pop('prompt_version')}"
    # a failed call is not an app failure: the attendance parser falls back to regex
    level = logging.INFO if item.ok else logging.WARNING
    logger.log(level, "llm.call", extra=fields)
