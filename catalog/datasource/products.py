"""
Static product catalog generator.

Builds fresh, immutable snapshots on every call. The server caches the
result, so this runs only on cache misses.
"""

from datetime import datetime, timezone

from loguru import logger

from catalog.schemas import Category, Product

_CATEGORIES = [
    (1, "Electronics", "Computers and accessories"),
    (2, "Audio", "Headphones and speakers"),
    (3, "Office", None),
]

# (id, name, description, sku, price, stock, category_id)
_PRODUCTS = [
    (1, "Laptop", "15-inch laptop, 16 GB RAM", "ELEC-LAP-001", 1200.50, 25, 1),
    (2, "Headphones", "Over-ear wireless headphones", "AUD-HP-002", 50.00, 100, 2),
    (3, "USB-C Dock", None, "ELEC-DCK-003", 89.99, 40, 1),
    (4, "Desk Lamp", "LED lamp with dimmer", "OFF-LMP-004", 24.75, 0, 3),
    (5, "Gift Card", None, "MISC-GFT-005", 25.00, 500, 0),
]


def build_categories() -> dict[int, Category]:
    """Return categories keyed by id."""
    return {
        category_id: Category(id=category_id, name=name, description=description)
        for category_id, name, description in _CATEGORIES
    }


def build_products(now: datetime | None = None) -> list[Product]:
    """
    Generate the product list.

    Products whose category id is unknown are returned with ``category``
    set to None.
    """
    created_at = now or datetime.now(timezone.utc)
    categories = build_categories()

    products = [
        Product(
            id=product_id,
            name=name,
            description=description,
            sku=sku,
            price=price,
            stock=stock,
            category_id=category_id,
            category=categories.get(category_id),
            is_active=True,
            created_at=created_at,
        )
        for product_id, name, description, sku, price, stock, category_id in _PRODUCTS
    ]
    logger.info(f"Generated {len(products)} products")
    return products
