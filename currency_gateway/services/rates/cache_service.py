from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

"""In-memory response cache with per-entry TTL.

Design:
    - Keys are plain strings built by `cache_key()` from the operation name and
      its normalized parameters.
    - `get_or_create()` returns a live entry or awaits the factory and stores
      its result. A None result is never stored, so failures are not memoized.
    - No single-flight: two coroutines missing the same key concurrently may
      both run the factory; the last one to finish wins. The dict is only
      touched between awaits so its state stays consistent.
    - Expired entries are evicted when read and, across all keys, on every
      miss through `purge_expired()`, so keys that are never read again do
      not accumulate.
"""

logger = logging.getLogger("currency_gateway.cache")

T = TypeVar("T")


def cache_key(operation: str, *parts: object) -> str:
    return "_".join([operation, *(str(p) for p in parts)])


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class ResponseCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_entry_valid(self, entry: _CacheEntry) -> bool:
        return self._clock() < entry.expires_at

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_entry_valid(entry):
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise ValueError("cache ttl must be positive seconds")
        self._entries[key] = _CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, v in self._entries.items() if v.expires_at <= now]
        for k in expired:
            self._entries.pop(k, None)
        return len(expired)

    async def get_or_create(
        self,
        key: str,
        factory: Callable[[], Awaitable[Optional[T]]],
        ttl_seconds: float,
    ) -> Optional[T]:
        cached = self.get(key)
        if cached is not None:
            return cached
        logger.info("Cache miss for %s. Fetching from API.", key)
        self.purge_expired()
        value = await factory()
        if value is not None:
            self.set(key, value, ttl_seconds)
        return value
