"""attendance_ocr/ocr/cache.py

Content-addressed cache of extraction results.

Key = sha256(content bytes) + sha256(sorted-key JSON of size, mime type,
modification time and document metadata). Byte-identical uploads with the
same metadata never hit the recognizer twice while they stay in the cache.
"""

from __future__ import annotations

import hashlib
import json
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Optional

from attendance_ocr.ocr.types import ExtractionResult


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    size: int
    capacity: int


def build_cache_key(
    content: bytes,
    *,
    mime_type: str | None = None,
    modified_at: str | int | float | None = None,
    metadata: dict[str, Any] | None = None,
) -> str:
    content_hash = hashlib.sha256(content or b"").hexdigest()
    meta_blob = json.dumps(
        {
            "size": len(content or b""),
            "mime_type": mime_type,
            "modified_at": modified_at,
            "metadata": metadata or {},
        },
        sort_keys=True,
        default=str,
    )
    meta_hash = hashlib.sha256(meta_blob.encode("utf-8")).hexdigest()
    return f"{content_hash}:{meta_hash}"


def content_digest(cache_key: str) -> str:
    """Short, stable document id derived from the content half of a key."""
    return cache_key.split(":", 1)[0][:16]


class ExtractionCache:
    """
    Bounded LRU map: cache key -> ExtractionResult.

    Values are frozen dataclasses, so handing the same instance to several
    callers is safe.
    """

    def __init__(self, max_entries: int = 100):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, ExtractionResult] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[ExtractionResult]:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: str, value: ExtractionResult) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
                capacity=self._max_entries,
            )

    def __len__(self) -> int:
        return len(self._entries)
