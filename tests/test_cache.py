"""Tests for the normalized payload cache."""
from __future__ import annotations

import threading

from minimal_life.cache import PayloadCache, get_cache, override_cache


def test_override_cache_temporarily_swaps_instance() -> None:
    original = get_cache()
    replacement = PayloadCache(max_size=2)
    with override_cache(replacement) as cache:
        assert cache is replacement
        assert get_cache() is replacement
    assert get_cache() is original


def test_lru_eviction_order() -> None:
    cache = PayloadCache(max_size=2, cleanup_threshold=1.0)
    cache.put("a", b"A")
    cache.put("b", b"B")
    cache.get("a")
    cache.put("c", b"C")

    assert cache.get("b") is None
    assert cache.get("a") == b"A"
    assert cache.get("c") == b"C"


def test_thread_safety() -> None:
    cache = PayloadCache(max_size=10)

    def worker(start: int) -> None:
        for i in range(start, start + 5):
            cache.put(str(i), bytes([i]))
            cache.get(str(i))

    threads = [threading.Thread(target=worker, args=(n * 5,)) for n in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) <= cache.max_size
