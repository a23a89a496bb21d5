# attendance_ocr/llm/client.py


import uuid
import time

from attendance_ocr.core.config import settings
from attendance_ocr.llm.errors import LLMNonRetryableError, LLMRetryableError
from attendance_ocr.llm.prompts.registry import get_prompt, render_template
from attendance_ocr.llm.telemetry import LLMCallLog, log_llm_call, now_ms
from attendance_ocr.llm.types import LLMRequest, LLMResponse
from attendance_ocr.llm.providers.gemini import GeminiProvider


_provider: GeminiProvider | None = None


def _get_provider() -> GeminiProvider:
    global _provider
    if _provider is None:
        _provider = GeminiProvider()
    return _provider


def llm_complete(
    *,
    purpose: str,
    prompt: str,
    prompt_name: str,
    prompt_version: str,
    response_mime_type: str | None = "application/json",
) -> LLMResponse:
    """Send an already-rendered prompt. Retries transient failures with backoff."""
    trace_id = str(uuid.uuid4())

    if settings.LLM_PROVIDER != "gemini":
        raise LLMNonRetryableError(f"Unsupported provider: {settings.LLM_PROVIDER}")

    req = LLMRequest(
        trace_id=trace_id,
        purpose=purpose,
        prompt_name=prompt_name,
        prompt_version=prompt_version,
        provider="gemini",
        model=settings.GEMINI_MODEL,
        temperature=settings.LLM_TEMPERATURE,
        max_output_tokens=settings.LLM_MAX_OUTPUT_TOKENS,
        timeout_seconds=settings.LLM_TIMEOUT_SECONDS,
        response_mime_type=response_mime_type,
    )

    client = _get_provider()

    start_ms = now_ms()
    retries = 0
    last_err: Exception | None = None

    def _log(ok: bool, *, chars: int = 0, error_type: str | None = None) -> None:
        log_llm_call(
            LLMCallLog(
                trace_id=trace_id,
                provider=req.provider,
                model=req.model,
                purpose=purpose,
                prompt_name=prompt_name,
                prompt_version=prompt_version,
                latency_ms=(now_ms() - start_ms),
                retries=retries,
                ok=ok,
                output_chars=chars,
                error_type=error_type,
            )
        )

    for attempt in range(settings.LLM_MAX_RETRIES + 1):
        try:
            resp = client.generate(req, prompt)
            _log(True, chars=len(resp.output_text))

            return LLMResponse(
                trace_id=resp.trace_id,
                provider=resp.provider,
                model=resp.model,
                output_text=resp.output_text,
                latency_ms=resp.latency_ms,
                retries=retries,
                raw=resp.raw,
                input_tokens=resp.input_tokens,
                output_tokens=resp.output_tokens,
            )

        except LLMRetryableError as e:
            last_err = e
            retries += 1

            if attempt >= settings.LLM_MAX_RETRIES:
                break

            time.sleep(min(2.0, 0.25 * (2 ** attempt)))

        except LLMNonRetryableError as e:
            _log(False, error_type=type(e).__name__)
            raise

    _log(False, error_type=type(last_err).__name__ if last_err else "LLMError")
    raise last_err if last_err else LLMRetryableError("LLM failed after retries")


def llm_generate(
    *,
    purpose: str,
    prompt_name: str,
    prompt_version: str,
    variables: dict,
    response_mime_type: str | None = "application/json",
) -> LLMResponse:
    tmpl = get_prompt(prompt_name, prompt_version)
    return llm_complete(
        purpose=purpose,
        prompt=render_template(tmpl.template, variables),
        prompt_name=prompt_name,
        prompt_version=prompt_version,
        response_mime_type=response_mime_type,
    )


def gemini_complete(prompt: str) -> str:
    """`complete(prompt) -> text` port used by the attendance AI tier."""
    resp = llm_complete(
        purpose="parse_attendance",
        prompt=prompt,
        prompt_name="parse_attendance",
        prompt_version="v1",
    )
    return resp.output_text
