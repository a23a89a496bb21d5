import pytest

from attendance_ocr.ocr.cache import ExtractionCache, build_cache_key, content_digest
from attendance_ocr.ocr.quality import assess_text_quality
from attendance_ocr.ocr.types import ExtractionResult


def _result(text="hello world", confidence=90.0):
    return ExtractionResult(text=text, confidence=confidence, quality=assess_text_quality(text, confidence))


def test_key_is_stable_and_metadata_order_insensitive():
    a = build_cache_key(b"scan", mime_type="image/png", metadata={"userId": "u1", "documentId": "d1"})
    b = build_cache_key(b"scan", mime_type="image/png", metadata={"documentId": "d1", "userId": "u1"})
    assert a == b


def test_key_changes_with_content_or_metadata():
    base = build_cache_key(b"scan", mime_type="image/png", modified_at=1)

    assert build_cache_key(b"scan2", mime_type="image/png", modified_at=1) != base
    assert build_cache_key(b"scan", mime_type="image/jpeg", modified_at=1) != base
    assert build_cache_key(b"scan", mime_type="image/png", modified_at=2) != base
    assert build_cache_key(b"scan", mime_type="image/png", modified_at=1, metadata={"userId": "u"}) != base


def test_content_digest_ignores_metadata():
    a = build_cache_key(b"scan", metadata={"userId": "u1"})
    b = build_cache_key(b"scan", metadata={"userId": "u2"})
    assert content_digest(a) == content_digest(b)
    assert len(content_digest(a)) == 16


def test_get_set_and_stats():
    cache = ExtractionCache(max_entries=3)
    r = _result()

    assert cache.get("k") is None
    cache.set("k", r)
    assert cache.get("k") is r

    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.size, stats.capacity) == (1, 1, 1, 3)


def test_lru_eviction():
    cache = ExtractionCache(max_entries=2)
    cache.set("a", _result("a"))
    cache.set("b", _result("b"))
    cache.get("a")
    cache.set("c", _result("c"))

    assert cache.get("b") is None
    assert cache.get("a") is not None
    assert cache.get("c") is not None
    assert len(cache) == 2


def test_clear_resets_entries_and_counters():
    cache = ExtractionCache()
    cache.set("a", _result())
    cache.get("a")
    cache.get("missing")

    cache.clear()

    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.size) == (0, 0, 0)


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        ExtractionCache(max_entries=0)
