"""Core module: the fallback orchestrator and the namespaced cache manager."""

from .manager import DEFAULT_NAMESPACES, CacheManager, NamespaceConfig
from .orchestrator import FallbackCache, build_namespaced_caches

__all__ = [
    # Orchestration
    "FallbackCache",
    "build_namespaced_caches",
    # Namespaced access
    "CacheManager",
    "NamespaceConfig",
    "DEFAULT_NAMESPACES",
]
