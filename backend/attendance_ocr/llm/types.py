# attendance_ocr/llm/types.py
from dataclasses import dataclass
from typing import Any

JsonDict = dict[str, Any]

@dataclass(frozen=True)
class LLMRequest:
    trace_id: str
    purpose: str                    # e.g. "parse_attendance"
    prompt_name: str                # registry key
    prompt_version: str             # e.g. "v1"

    provider: str                   # "gemini"
    model: str

    temperature: float
    max_output_tokens: int
    timeout_seconds: int

    response_mime_type: str | None = None  # "application/json" for the parse tier

@dataclass(frozen=True)
class LLMResponse:
    trace_id: str
    provider: str
    model: str
    output_text: str

    latency_ms: int
    retries: int
    raw: JsonDict | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
