from .client import (
    RemoteCacheClient,
    RemoteCacheError,
    RemoteCacheNotConfiguredError,
    RemoteCacheResponseError,
    RemoteCacheTimeoutError,
)

__all__ = [
    "RemoteCacheClient",
    "RemoteCacheError",
    "RemoteCacheNotConfiguredError",
    "RemoteCacheResponseError",
    "RemoteCacheTimeoutError",
]
