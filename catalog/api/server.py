"""FastAPI server exposing the cached product catalog."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from loguru import logger

from catalog.datasource.products import build_products
from catalog.schemas import LegacyProduct, Product
from catalog.services.cache import ServerSideCache
from catalog.settings import global_settings

PRODUCTS_CACHE_KEY = "products"


def create_server_cache() -> ServerSideCache:
    """Build the process-wide cache from settings."""
    return ServerSideCache(
        absolute_expiration=timedelta(seconds=global_settings.server_cache_absolute_ttl),
        sliding_expiration=timedelta(seconds=global_settings.server_cache_sliding_ttl),
    )


class CatalogServer:
    """HTTP server for the product catalog."""

    def __init__(
        self,
        cache: ServerSideCache,
        generator: Callable[[], list[Product]] = build_products,
    ):
        self.cache = cache
        self.generator = generator
        self.app = FastAPI(title="Catalog API")

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self.app.add_middleware(GZipMiddleware, minimum_size=500)

        # Register routes
        self.app.get("/api/products")(self.list_products)
        self.app.get("/api/productlist")(self.list_products_legacy)
        self.app.delete("/api/products/cache")(self.invalidate_products)
        self.app.get("/health")(self.health_check)

    def get_products(self) -> list[Product]:
        """Return the cached product list, generating it on a miss.

        Generator errors are not caught; FastAPI turns them into a 500.
        """
        return self.cache.get_or_create(PRODUCTS_CACHE_KEY, self.generator)

    async def list_products(self) -> dict[str, Any]:
        """Product list wrapped in the response envelope."""
        products = self.get_products()
        logger.debug(f"Serving {len(products)} products")
        return {
            "success": True,
            "data": [p.model_dump(by_alias=True, mode="json") for p in products],
            "message": "Products retrieved successfully",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "count": len(products),
        }

    async def list_products_legacy(self) -> list[dict[str, Any]]:
        """Bare product array in the legacy shape."""
        return [
            LegacyProduct.from_product(p).model_dump(by_alias=True, mode="json")
            for p in self.get_products()
        ]

    async def invalidate_products(self) -> dict[str, Any]:
        """Drop the cached product list."""
        removed = self.cache.remove(PRODUCTS_CACHE_KEY)
        logger.info(f"Product cache invalidated (entry present: {removed})")
        return {
            "success": True,
            "message": "Cache invalidated" if removed else "Cache was empty",
        }

    async def health_check(self) -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "catalog-api",
            "cache": self.cache.get_stats().to_dict(),
        }


def create_app(
    cache: ServerSideCache | None = None,
    generator: Callable[[], list[Product]] = build_products,
) -> FastAPI:
    """Create the catalog FastAPI app.

    Args:
        cache: Shared server cache (built from settings if omitted)
        generator: Product list factory used on cache misses

    Returns:
        FastAPI app
    """
    server = CatalogServer(cache or create_server_cache(), generator)
    return server.app
