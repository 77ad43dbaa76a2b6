"""
ResourceLoader - serve fresh cache, else fetch, else fall back to stale cache.
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Generic, TypeVar

from loguru import logger

from catalog.schemas import LegacyProduct, Product, ProductsResponse
from catalog.services.cache import TimedCache
from catalog.services.client import ResilientFetcher
from catalog.services.errors import (
    FailureReason,
    FetchFailure,
    FetchOutcome,
    ResourceUnavailableError,
)
from catalog.settings import global_settings

T = TypeVar("T")


@dataclass
class LoadResult(Generic[T]):
    """Result from a resource load."""

    data: T
    from_cache: bool = False
    is_stale: bool = False
    warning: str | None = None


class ResourceLoader(Generic[T]):
    """
    Loads one remote resource through a TimedCache.

    Policy:
    1. Fresh cache -> return it without touching the network (unless refresh)
    2. Fetch succeeds -> cache and return the new value
    3. Fetch fails -> return the stale value with a warning if one was ever
       cached, otherwise raise ResourceUnavailableError

    A failed fetch never changes the cache.
    """

    def __init__(
        self,
        resource_id: str,
        endpoint: str,
        model: Any,
        fetcher: ResilientFetcher,
        cache: TimedCache[T] | None = None,
        extract: Callable[[Any], FetchOutcome[T]] | None = None,
        timeout: float | None = None,
    ):
        self.resource_id = resource_id
        self.endpoint = endpoint
        self.model = model
        self.fetcher = fetcher
        self.cache: TimedCache[T] = cache or TimedCache(
            timedelta(seconds=global_settings.client_cache_ttl)
        )
        self._extract = extract
        self._timeout = timeout

    async def load(
        self,
        refresh: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> LoadResult[T]:
        """
        Load the resource.

        Args:
            refresh: Skip the fresh-cache shortcut and always hit the network
            cancel_event: Passed through to the fetcher

        Raises:
            ResourceUnavailableError: If the fetch failed and nothing was
                ever cached
        """
        if not refresh and self.cache.is_valid():
            logger.debug(f"Serving {self.resource_id} from cache")
            return LoadResult(data=self.cache.peek(), from_cache=True)

        outcome = await self.fetcher.fetch(
            self.endpoint,
            self.model,
            timeout=self._timeout,
            cancel_event=cancel_event,
        )
        if outcome.ok and self._extract is not None:
            outcome = self._extract(outcome.value)

        if outcome.ok:
            self.cache.set(outcome.value)
            logger.info(f"Loaded {self.resource_id} from {self.endpoint}")
            return LoadResult(data=outcome.value)

        return self._fallback(outcome.failure)

    def _fallback(self, failure: FetchFailure) -> LoadResult[T]:
        if self.cache.has_value:
            warning = f"Showing cached data. {failure.message}"
            logger.warning(
                f"Loading {self.resource_id} failed, returning stale data: {failure}"
            )
            return LoadResult(
                data=self.cache.peek(),
                from_cache=True,
                is_stale=True,
                warning=warning,
            )

        logger.error(f"Loading {self.resource_id} failed with no cached data: {failure}")
        raise ResourceUnavailableError(self.resource_id, failure)

    def invalidate(self) -> None:
        """Forget the cached value."""
        self.cache.clear()


def unwrap_products(response: ProductsResponse) -> FetchOutcome[list[Product]]:
    """Take the product list out of the response envelope."""
    if not response.success:
        return FetchOutcome.failed(
            FailureReason.DECODE, f"Server reported failure: {response.message}"
        )
    return FetchOutcome.success(list(response.data))


class ProductLoader(ResourceLoader[list[Product]]):
    """Loads the product list from ``GET /api/products``."""

    def __init__(
        self,
        fetcher: ResilientFetcher,
        cache: TimedCache[list[Product]] | None = None,
        timeout: float | None = None,
    ):
        super().__init__(
            resource_id="products",
            endpoint="/api/products",
            model=ProductsResponse,
            fetcher=fetcher,
            cache=cache,
            extract=unwrap_products,
            timeout=timeout,
        )


class LegacyProductLoader(ResourceLoader[list[LegacyProduct]]):
    """Loads the legacy product list from ``GET /api/productlist``."""

    def __init__(
        self,
        fetcher: ResilientFetcher,
        cache: TimedCache[list[LegacyProduct]] | None = None,
        timeout: float | None = None,
    ):
        super().__init__(
            resource_id="productlist",
            endpoint="/api/productlist",
            model=list[LegacyProduct],
            fetcher=fetcher,
            cache=cache,
            timeout=timeout,
        )
