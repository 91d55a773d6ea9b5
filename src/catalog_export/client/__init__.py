"""Catalog API clients."""

from .base import CatalogClient, Filters
from .http import HttpCatalogClient

__all__ = [
    "CatalogClient",
    "Filters",
    "HttpCatalogClient",
]
