"""
Catalog client entry point.
Loads the product list through the client cache and prints it.

Usage: python client.py [--refresh]
"""

import asyncio
import sys

from loguru import logger

from catalog.schemas import Product
from catalog.services import ProductLoader, ResilientFetcher, ResourceUnavailableError
from catalog.settings import global_settings
from catalog.utils import setup_logging


def format_products(products: list[Product]) -> str:
    """Render products as a plain text table."""
    lines = [f"{'ID':>4}  {'Name':<20} {'Category':<12} {'Price':>10} {'Stock':>6}"]
    for p in products:
        category = p.category.name if p.category else "-"
        lines.append(
            f"{p.id:>4}  {p.name:<20} {category:<12} {p.price:>10.2f} {p.stock:>6}"
        )
    return "\n".join(lines)


async def main(refresh: bool = False) -> int:
    setup_logging()
    logger.info(f"Loading products from {global_settings.api_base_url}")

    async with ResilientFetcher() as fetcher:
        loader = ProductLoader(fetcher)
        try:
            result = await loader.load(refresh=refresh)
        except ResourceUnavailableError as e:
            logger.error(f"Error loading products: {e.failure.message}")
            return 1

        if result.warning:
            logger.warning(result.warning)
        print(format_products(result.data))

        # Second read is served from the client cache
        again = await loader.load()
        logger.info(f"Second load served from cache: {again.from_cache}")

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(refresh="--refresh" in sys.argv[1:])))
