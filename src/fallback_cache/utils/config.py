from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

ENV_REMOTE_URL = "UPSTASH_REDIS_REST_URL"
ENV_REMOTE_TOKEN = "UPSTASH_REDIS_REST_TOKEN"
ENV_REMOTE_ENABLED = "REDIS_ENABLED"
ENV_REMOTE_TIMEOUT = "CACHE_REMOTE_TIMEOUT"
ENV_LOCAL_MAX_SIZE = "CACHE_LOCAL_MAX_SIZE"


@dataclass
class RemoteConfig:
    url: Optional[str] = None
    token: Optional[str] = None
    # explicit override; False disables the remote tier even with credentials
    enabled: bool = True
    timeout_seconds: float = 5.0

    @property
    def is_usable(self) -> bool:
        return bool(self.url and self.token and self.enabled)


@dataclass
class LocalStoreConfig:
    max_size: int = 1000


@dataclass
class CacheConfig:
    remote: RemoteConfig = dataclasses.field(default_factory=RemoteConfig)
    local: LocalStoreConfig = dataclasses.field(default_factory=LocalStoreConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheConfig":
        def build(dc_cls, key):
            values = data.get(key, {})
            return dc_cls(**values)

        return cls(
            remote=build(RemoteConfig, "remote"),
            local=build(LocalStoreConfig, "local"),
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CacheConfig":
        """Read settings from environment variables (or any mapping).

        Missing credentials are not an error; they simply leave the remote
        tier unusable so the cache runs in memory-only mode.
        """
        env = os.environ if env is None else env
        remote = RemoteConfig(
            url=env.get(ENV_REMOTE_URL) or None,
            token=env.get(ENV_REMOTE_TOKEN) or None,
            enabled=env.get(ENV_REMOTE_ENABLED, "").strip().lower() != "false",
        )
        timeout = env.get(ENV_REMOTE_TIMEOUT)
        if timeout:
            remote.timeout_seconds = float(timeout)
        local = LocalStoreConfig()
        max_size = env.get(ENV_LOCAL_MAX_SIZE)
        if max_size:
            local.max_size = int(max_size)
        return cls(remote=remote, local=local)
