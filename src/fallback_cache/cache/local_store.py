from __future__ import annotations

import time
import typing as t
from collections import OrderedDict
from dataclasses import dataclass

DEFAULT_MAX_SIZE = 1000
DEFAULT_TTL_SECONDS = 3600
# Share of capacity dropped by the second eviction pass
EVICTION_FRACTION = 0.2


@dataclass
class CacheEntry:
    value: t.Any
    expires_at: float  # ms since epoch


class LocalStore:
    """Bounded in-process key/value store with per-entry expiry.

    Expired entries are removed lazily when touched, or in bulk by `size()` and
    by the eviction pass that `set` runs once the store is full. Apart from the
    capacity check in the constructor nothing here does I/O or raises, so it
    can always serve as the fallback tier.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        clock: t.Optional[t.Callable[[], float]] = None,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._max_size = max_size
        self._clock = clock or time.time

    @property
    def max_size(self) -> int:
        return self._max_size

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _is_expired(self, entry: CacheEntry, now_ms: float) -> bool:
        return now_ms > entry.expires_at

    def set(self, key: str, value: t.Any, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> bool:
        if len(self._entries) >= self._max_size:
            self._cleanup()
        expires_at = self._now_ms() + ttl_seconds * 1000
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at)
        # a rewritten key counts as newly inserted
        self._entries.move_to_end(key)
        return True

    def get(self, key: str) -> t.Optional[t.Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._now_ms()):
            del self._entries[key]
            return None
        return entry.value

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self._is_expired(entry, self._now_ms()):
            del self._entries[key]
            return False
        return True

    def size(self) -> int:
        self._remove_expired()
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def _remove_expired(self) -> None:
        now_ms = self._now_ms()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now_ms)]
        for key in expired:
            del self._entries[key]

    def _cleanup(self) -> None:
        self._remove_expired()
        if len(self._entries) < self._max_size:
            return
        # Still full: drop the oldest inserted entries regardless of TTL
        to_remove = max(1, int(self._max_size * EVICTION_FRACTION))
        for _ in range(min(to_remove, len(self._entries))):
            self._entries.popitem(last=False)
