"""In-process metrics for the cache tiers."""

from .metrics import Counter, Histogram, cache_fallback_total, cache_requests_total, remote_request_seconds

__all__ = [
    "Counter",
    "Histogram",
    "cache_fallback_total",
    "cache_requests_total",
    "remote_request_seconds",
]
