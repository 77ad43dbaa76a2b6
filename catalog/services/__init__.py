"""
Service layer infrastructure - caching and resilient fetching.

Provides:
- TimedCache: Single-value cache with a freshness window
- ServerSideCache: Get-or-create cache with absolute and sliding expiration
- ResilientFetcher: Deadline-bounded GET returning classified outcomes
- ResourceLoader: Fresh cache, else fetch, else stale cache
"""

from catalog.services.errors import (
    FailureReason,
    FetchFailure,
    FetchOutcome,
    ResourceUnavailableError,
    ServiceError,
)
from catalog.services.cache import (
    CacheEntry,
    CacheStats,
    ServerSideCache,
    TimedCache,
)
from catalog.services.client import ResilientFetcher
from catalog.services.loader import (
    LegacyProductLoader,
    LoadResult,
    ProductLoader,
    ResourceLoader,
)

__all__ = [
    # Errors
    "FailureReason",
    "FetchFailure",
    "FetchOutcome",
    "ResourceUnavailableError",
    "ServiceError",
    # Cache
    "CacheEntry",
    "CacheStats",
    "ServerSideCache",
    "TimedCache",
    # Client
    "ResilientFetcher",
    # Loaders
    "LegacyProductLoader",
    "LoadResult",
    "ProductLoader",
    "ResourceLoader",
]
