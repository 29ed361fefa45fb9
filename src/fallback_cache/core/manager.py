from __future__ import annotations

import logging
import re
import typing as t
from dataclasses import dataclass

from fallback_cache.monitoring.metrics import cache_requests_total

from .orchestrator import FallbackCache

_logger = logging.getLogger(__name__)

T = t.TypeVar("T")

_KEY_UNSAFE = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class NamespaceConfig:
    ttl_seconds: int
    key_prefix: str
    enabled: bool = True


DEFAULT_NAMESPACES: t.Dict[str, NamespaceConfig] = {
    # API responses
    "convert_api": NamespaceConfig(ttl_seconds=3600, key_prefix="api:convert:"),
    "now_api": NamespaceConfig(ttl_seconds=60, key_prefix="api:now:"),
    "health_api": NamespaceConfig(ttl_seconds=300, key_prefix="api:health:"),
    # Static data
    "timezones": NamespaceConfig(ttl_seconds=86400, key_prefix="data:timezones:"),
    "formats": NamespaceConfig(ttl_seconds=86400, key_prefix="data:formats:"),
    # User data
    "user_preferences": NamespaceConfig(ttl_seconds=7200, key_prefix="user:prefs:"),
    # Analytics and counters
    "stats": NamespaceConfig(ttl_seconds=1800, key_prefix="stats:"),
    "rate_limit": NamespaceConfig(ttl_seconds=60, key_prefix="ratelimit:"),
}


@dataclass
class NamespaceStats:
    hits: int = 0
    misses: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        total = self.total_requests
        return (self.hits / total) * 100 if total else 0.0

    def to_dict(self) -> t.Dict[str, t.Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
            "total_requests": self.total_requests,
        }


class CacheManager:
    """Namespaced access to a `FallbackCache` for request handlers.

    Each namespace carries its own key prefix and TTL so that, for example,
    response-cache entries and rate-limit counters can never collide. Lookups
    are counted per namespace for `get_stats()` and `health_check()`.
    """

    def __init__(
        self,
        cache: FallbackCache,
        namespaces: t.Optional[t.Mapping[str, NamespaceConfig]] = None,
    ) -> None:
        self._cache = cache
        self._namespaces = dict(DEFAULT_NAMESPACES if namespaces is None else namespaces)
        self._stats: t.Dict[str, NamespaceStats] = {}

    @property
    def cache(self) -> FallbackCache:
        return self._cache

    def namespace(self, name: str) -> NamespaceConfig:
        try:
            return self._namespaces[name]
        except KeyError:
            raise KeyError(f"unknown cache namespace: {name}") from None

    def make_key(self, name: str, identifier: str) -> str:
        config = self.namespace(name)
        return config.key_prefix + _KEY_UNSAFE.sub("_", identifier.lower())

    def _record(self, name: str, hit: bool) -> None:
        stats = self._stats.setdefault(name, NamespaceStats())
        if hit:
            stats.hits += 1
        else:
            stats.misses += 1
        cache_requests_total.inc(namespace=name, result="hit" if hit else "miss")

    async def get(self, name: str, identifier: str) -> t.Optional[t.Any]:
        config = self.namespace(name)
        if not config.enabled:
            return None
        key = self.make_key(name, identifier)
        value = await self._cache.get(key)
        hit = value is not None
        self._record(name, hit)
        _logger.debug("Cache %s: %s", "HIT" if hit else "MISS", key)
        return value

    async def set(self, name: str, identifier: str, value: t.Any) -> bool:
        config = self.namespace(name)
        if not config.enabled:
            return False
        key = self.make_key(name, identifier)
        ok = await self._cache.set(key, value, config.ttl_seconds)
        if ok:
            _logger.debug("Cache SET: %s (ttl=%ss)", key, config.ttl_seconds)
        return ok

    async def delete(self, name: str, identifier: str) -> bool:
        key = self.make_key(name, identifier)
        ok = await self._cache.delete(key)
        if ok:
            _logger.debug("Cache DEL: %s", key)
        return ok

    async def cached(self, name: str, identifier: str, fetch: t.Callable[[], t.Awaitable[T]]) -> T:
        """Return the cached value, or fetch, store and return a fresh one.

        Errors raised by `fetch` propagate to the caller; nothing is stored.
        """
        cached = await self.get(name, identifier)
        if cached is not None:
            return cached
        value = await fetch()
        await self.set(name, identifier, value)
        return value

    async def increment(self, name: str, identifier: str) -> int:
        config = self.namespace(name)
        key = self.make_key(name, identifier)
        try:
            count = await self._cache.increment(key)
            # First hit in a window starts the window's TTL
            if count == 1:
                await self._cache.expire(key, config.ttl_seconds)
            return count
        except Exception:  # noqa: BLE001 - counters must not break the request
            _logger.exception("Cache increment failed for %s", key)
            return 1

    def get_stats(self) -> t.Dict[str, t.Dict[str, t.Any]]:
        return {name: stats.to_dict() for name, stats in self._stats.items()}

    def reset_stats(self) -> None:
        """Forget hit/miss statistics; cached data is left alone."""
        _logger.info("Clearing cache statistics")
        self._stats.clear()

    async def health_check(self) -> t.Dict[str, t.Any]:
        try:
            # FallbackCache answers a failed remote ping from memory, so remote
            # outages show up in cache_fallback_total{operation="ping"}, not here
            remote_ok = await self._cache.ping()
            return {
                "status": "healthy" if remote_ok else "degraded",
                "remote": remote_ok,
                "stats": {"backend": self._cache.get_stats(), "namespaces": self.get_stats()},
            }
        except Exception as exc:  # noqa: BLE001 - reported, not raised
            return {
                "status": "unhealthy",
                "remote": False,
                "stats": {"error": str(exc)},
            }
