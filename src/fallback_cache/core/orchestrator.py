from __future__ import annotations

import logging
import typing as t

from fallback_cache.cache.local_store import DEFAULT_TTL_SECONDS, LocalStore
from fallback_cache.monitoring.metrics import cache_fallback_total
from fallback_cache.remote.client import RemoteCacheClient, RemoteCacheResponseError
from fallback_cache.utils.config import CacheConfig, RemoteConfig

_logger = logging.getLogger(__name__)

T = t.TypeVar("T")

# TTL given to counters created by the local increment path
LOCAL_COUNTER_TTL_SECONDS = 3600


class FallbackCache:
    """Key/value cache that prefers the remote service and degrades to memory.

    Whether the remote tier is used is decided once, from the configuration, at
    construction. When it is used, each call goes to the remote client first and
    any exception from it is logged and answered by the local store instead, so
    callers never see remote failures. Successful remote writes are not
    mirrored locally.
    """

    def __init__(
        self,
        config: t.Union[CacheConfig, RemoteConfig, None] = None,
        *,
        remote: t.Optional[RemoteCacheClient] = None,
        local: t.Optional[LocalStore] = None,
        name: str = "default",
    ) -> None:
        if isinstance(config, RemoteConfig):
            config = CacheConfig(remote=config)
        self._config = config or CacheConfig()
        self._name = name
        self._remote_enabled = self._config.remote.is_usable
        self._remote = remote if remote is not None else RemoteCacheClient.from_config(self._config.remote)
        self._local = local if local is not None else LocalStore(max_size=self._config.local.max_size)

    @classmethod
    def from_env(cls, env: t.Optional[t.Mapping[str, str]] = None, *, name: str = "default") -> "FallbackCache":
        return cls(CacheConfig.from_env(env), name=name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def remote_enabled(self) -> bool:
        return self._remote_enabled

    async def _run(
        self,
        operation: str,
        key: t.Optional[str],
        remote_op: t.Callable[[], t.Awaitable[T]],
        local_op: t.Callable[[], T],
    ) -> T:
        if self._remote_enabled:
            try:
                return await remote_op()
            except Exception as exc:  # noqa: BLE001 - every remote failure falls back
                _logger.warning(
                    "Remote %s failed for key %r in cache %s, using local store: %s",
                    operation,
                    key,
                    self._name,
                    exc,
                )
                cache_fallback_total.inc(operation=operation)
        return local_op()

    async def set(self, key: str, value: t.Any, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> bool:
        return await self._run(
            "set",
            key,
            lambda: self._remote.set(key, value, ttl_seconds),
            lambda: self._local.set(key, value, ttl_seconds),
        )

    async def get(self, key: str) -> t.Optional[t.Any]:
        return await self._run("get", key, lambda: self._remote.get(key), lambda: self._local.get(key))

    async def delete(self, key: str) -> bool:
        return await self._run("delete", key, lambda: self._remote.delete(key), lambda: self._local.delete(key))

    async def exists(self, key: str) -> bool:
        return await self._run("exists", key, lambda: self._remote.exists(key), lambda: self._local.exists(key))

    async def increment(self, key: str) -> int:
        def _local_increment() -> int:
            # Not atomic, but the local store never yields to the event loop
            current = self._local.get(key)
            # a miss or a non-numeric value starts the counter over
            if isinstance(current, bool) or not isinstance(current, (int, float)):
                current = 0
            new_value = current + 1
            self._local.set(key, new_value, LOCAL_COUNTER_TTL_SECONDS)
            return new_value

        return await self._run("increment", key, lambda: self._remote.increment(key), _local_increment)

    async def expire(self, key: str, ttl_seconds: float) -> bool:
        def _local_expire() -> bool:
            value = self._local.get(key)
            if value is None:
                return False
            return self._local.set(key, value, ttl_seconds)

        return await self._run("expire", key, lambda: self._remote.expire(key, ttl_seconds), _local_expire)

    async def ping(self) -> bool:
        async def _remote_ping() -> bool:
            if not await self._remote.ping():
                raise RemoteCacheResponseError("PING was not acknowledged")
            return True

        return await self._run("ping", None, _remote_ping, lambda: True)

    def get_stats(self) -> t.Dict[str, t.Any]:
        # `enabled` reflects configuration, not current remote health
        if self._remote_enabled:
            return {"enabled": True, "type": "redis"}
        return {"enabled": False, "type": "memory", "size": self._local.size()}

    def clear_local(self) -> None:
        self._local.clear()


def build_namespaced_caches(
    config: t.Optional[CacheConfig] = None,
    names: t.Iterable[str] = ("cache", "rate_limit"),
) -> t.Dict[str, FallbackCache]:
    """Create one independent cache per logical namespace.

    Meant to be called once at application startup; the returned instances are
    handed to the code that needs them. They share configuration but no state.
    """
    config = config or CacheConfig.from_env()
    return {name: FallbackCache(config, name=name) for name in names}
