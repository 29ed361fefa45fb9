"""fallback_cache

A key/value cache that talks to a remote REST cache service when one is
configured and transparently falls back to a bounded in-process store when it
is not, or when the remote service fails.
"""

from .cache import CacheEntry, LocalStore
from .core.manager import DEFAULT_NAMESPACES, CacheManager, NamespaceConfig
from .core.orchestrator import FallbackCache, build_namespaced_caches
from .remote import (
    RemoteCacheClient,
    RemoteCacheError,
    RemoteCacheNotConfiguredError,
    RemoteCacheResponseError,
    RemoteCacheTimeoutError,
)
from .utils.config import CacheConfig, LocalStoreConfig, RemoteConfig

__all__ = [
    "FallbackCache",
    "build_namespaced_caches",
    "CacheManager",
    "NamespaceConfig",
    "DEFAULT_NAMESPACES",
    "LocalStore",
    "CacheEntry",
    "RemoteCacheClient",
    "RemoteCacheError",
    "RemoteCacheNotConfiguredError",
    "RemoteCacheResponseError",
    "RemoteCacheTimeoutError",
    "CacheConfig",
    "RemoteConfig",
    "LocalStoreConfig",
]

__version__ = "0.1.0"
