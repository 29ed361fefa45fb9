"""Configuration helpers."""

from .config import CacheConfig, LocalStoreConfig, RemoteConfig

__all__ = [
    "CacheConfig",
    "LocalStoreConfig",
    "RemoteConfig",
]
