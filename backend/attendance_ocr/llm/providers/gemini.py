# attendance_ocr/llm/providers/gemini.py
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import httpx
from google import genai
from google.genai import types

from attendance_ocr.core.config import settings
from attendance_ocr.llm.errors import LLMRetryableError, LLMNonRetryableError
from attendance_ocr.llm.types import LLMRequest, LLMResponse

_RETRYABLE_MARKERS = ("429", "rate", "quota", "500", "502", "503", "504", "unavailable", "temporarily", "deadline")


def classify_provider_error(e: Exception) -> Exception:
    if isinstance(e, (httpx.TimeoutException, TimeoutError)):
        return LLMRetryableError(f"Gemini call timed out: {e}")
    if isinstance(e, httpx.HTTPError):
        return LLMRetryableError(f"Gemini http error (retryable): {e}")
    msg = str(e).lower()
    if any(x in msg for x in _RETRYABLE_MARKERS):
        return LLMRetryableError(f"Gemini retryable failure: {e}")
    return LLMNonRetryableError(f"Gemini non-retryable failure: {e}")


@dataclass
class GeminiProvider:
    """
    Gemini provider using Google Gen AI SDK (google-genai).
    Single-attempt. Retries/backoff handled by attendance_ocr/llm/client.py.
    """
    _client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if not settings.GEMINI_API_KEY:
            raise LLMNonRetryableError("GEMINI_API_KEY is missing")
        if self._client is None:
            self._client = genai.Client(api_key=settings.GEMINI_API_KEY)
        return self._client

    def generate(self, req: LLMRequest, prompt: str) -> LLMResponse:
        client = self._get_client()
        start_ms = int(time.time() * 1000)

        try:
            # HttpOptions.timeout is in milliseconds
            http_opts = types.HttpOptions(timeout=int(req.timeout_seconds * 1000))

            cfg = types.GenerateContentConfig(
                temperature=req.temperature,
                max_output_tokens=req.max_output_tokens,
                response_mime_type=req.response_mime_type,
                http_options=http_opts,
            )

            resp = client.models.generate_content(
                model=req.model,
                contents=prompt,
                config=cfg,
            )
        except Exception as e:
            raise classify_provider_error(e) from e

        # Blocked/empty candidates surface as "" and the caller decides
        text = (getattr(resp, "text", None) or "").strip()

        input_tokens = None
        output_tokens = None
        usage = getattr(resp, "usage_metadata", None)
        if usage is not None:
            input_tokens = getattr(usage, "prompt_token_count", None)
            output_tokens = getattr(usage, "candidates_token_count", None)

        return LLMResponse(
            trace_id=req.trace_id,
            provider=req.provider,
            model=req.model,
            output_text=text,
            latency_ms=int(time.time() * 1000) - start_ms,
            retries=0,
            raw={"sdk_response_type": str(type(resp))},
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
