"""
Product catalog types using Pydantic models.

Field names are snake_case in Python and camelCase on the wire. Incoming
payloads are matched case-insensitively, so ``Name``, ``name`` and ``NAME``
all populate ``name``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base model with camelCase aliases and case-insensitive input keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        lookup: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            lookup[name.lower()] = field.alias or name
            if field.alias:
                lookup[field.alias.lower()] = field.alias

        normalized: dict[str, Any] = {}
        for key, value in data.items():
            target = lookup.get(str(key).lower(), key)
            # An exact key wins over a differently cased duplicate
            if target in normalized and key != target:
                continue
            normalized[target] = value
        return normalized


class Category(CatalogModel):
    """Product category."""

    id: int
    name: str
    description: str | None = None


class Product(CatalogModel):
    """Immutable product snapshot."""

    id: int
    name: str
    description: str | None = None
    sku: str
    price: float
    stock: int
    category_id: int
    category: Category | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime | None = None


class ProductsResponse(CatalogModel):
    """Envelope returned by ``GET /api/products``."""

    success: bool
    data: list[Product] = Field(default_factory=list)
    message: str = ""
    timestamp: datetime
    count: int = 0


class CategoryRef(CatalogModel):
    """Category reference in the legacy product list."""

    id: int
    name: str


class LegacyProduct(CatalogModel):
    """Item of the legacy ``GET /api/productlist`` array."""

    id: int
    name: str
    price: float
    stock: int
    category: CategoryRef | None = None

    @classmethod
    def from_product(cls, product: Product) -> "LegacyProduct":
        category = (
            CategoryRef(id=product.category.id, name=product.category.name)
            if product.category
            else None
        )
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            stock=product.stock,
            category=category,
        )
