"""Thread-safe LRU cache for normalized image payloads.

Normalization is deterministic for identical source bytes, so the
normalizer memoises its output here keyed by a digest of the input.  The
cache is exposed through :func:`get_cache` and :func:`override_cache` so
tests can swap in a fresh instance without relying on import order.
"""

from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from threading import RLock
from typing import Iterator, Optional

from . import config


class PayloadCache:
    """A simple thread-safe LRU cache of ``bytes`` payloads."""

    def __init__(
        self,
        max_size: int = config.MAX_CACHE_SIZE,
        cleanup_threshold: float = config.CACHE_CLEANUP_THRESHOLD,
    ) -> None:
        self.max_size = max_size
        self.cleanup_threshold = cleanup_threshold
        self._cache: "OrderedDict[str, bytes]" = OrderedDict()
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def get(self, key: str) -> Optional[bytes]:
        """Return the payload for *key* or ``None``.

        A hit moves the entry to the most recently used position.
        """
        with self._lock:
            try:
                value = self._cache.pop(key)
            except KeyError:
                return None
            self._cache[key] = value
            return value

    def put(self, key: str, payload: bytes) -> None:
        """Insert *key*, evicting old entries past the cleanup threshold."""
        with self._lock:
            if key in self._cache:
                self._cache.pop(key)
            elif len(self._cache) >= self.max_size * self.cleanup_threshold:
                self._cleanup()
            self._cache[key] = payload

    def _cleanup(self) -> None:
        """Remove the oldest entries until the cache is at half capacity."""
        target = max(self.max_size // 2, 1)
        while len(self._cache) > target:
            self._cache.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


_cache_lock = RLock()
_cache_instance: Optional[PayloadCache] = None


def get_cache() -> PayloadCache:
    """Return the lazily constructed shared cache."""
    global _cache_instance
    with _cache_lock:
        if _cache_instance is None:
            _cache_instance = PayloadCache()
        return _cache_instance


@contextmanager
def override_cache(cache: PayloadCache) -> Iterator[PayloadCache]:
    """Temporarily replace the shared cache within a ``with`` block.

    >>> with override_cache(PayloadCache(max_size=1)) as temporary:
    ...     assert get_cache() is temporary
    """
    global _cache_instance
    with _cache_lock:
        previous = _cache_instance
        _cache_instance = cache
    try:
        yield cache
    finally:
        with _cache_lock:
            _cache_instance = previous


__all__ = ["PayloadCache", "get_cache", "override_cache"]
