"""
Shared fixtures for catalog tests.
"""

from datetime import datetime, timedelta

import pytest

from catalog.schemas import Product


class FakeClock:
    """Manually advanced clock for expiration tests."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def sample_products():
    """Two products: a laptop and headphones."""
    created = datetime(2024, 1, 1)
    return [
        Product(
            id=1,
            name="Laptop",
            sku="ELEC-LAP-001",
            price=1200.50,
            stock=25,
            category_id=1,
            created_at=created,
        ),
        Product(
            id=2,
            name="Headphones",
            sku="AUD-HP-002",
            price=50.00,
            stock=100,
            category_id=2,
            created_at=created,
        ),
    ]
