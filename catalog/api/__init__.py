"""
HTTP API for the product catalog.
"""

from catalog.api.server import CatalogServer, create_app

__all__ = ["CatalogServer", "create_app"]
