"""
In-memory data sources for the catalog server.
"""

from catalog.datasource.products import build_categories, build_products

__all__ = ["build_categories", "build_products"]
