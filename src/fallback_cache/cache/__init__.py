from .local_store import CacheEntry, LocalStore

__all__ = ["CacheEntry", "LocalStore"]
