"""Catalog caching."""

from .manager import CacheStats, CatalogCache, get_catalog_cache, reset_catalog_cache

__all__ = [
    "CacheStats",
    "CatalogCache",
    "get_catalog_cache",
    "reset_catalog_cache",
]
