"""Catalog cache with an in-memory LRU tier and SQLite persistence."""

import json
from collections import OrderedDict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import aiosqlite
import structlog
from pydantic import BaseModel

from laylapet.state.models import Product

logger = structlog.get_logger()


class CacheStats(BaseModel):
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    memory_items: int = 0

    @property
    def hit_rate(self) -> float:
        """Hit rate as a percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0


class CachedCatalog(BaseModel):
    """A shop's normalized catalog held in memory."""

    shop_domain: str
    products: list[Product]
    created_at: datetime
    expires_at: datetime


class CatalogCache:
    """Per-shop catalog cache: LRU memory + SQLite.

    Catalogs are stored as JSON lists of normalized products and expire
    after ``ttl_seconds``.
    """

    def __init__(self, db_path: Path, max_memory_items: int = 100, ttl_seconds: int = 600):
        """Initialize the cache.

        Args:
            db_path: Path to the SQLite database
            max_memory_items: Shops kept in memory (LRU eviction)
            ttl_seconds: Lifetime of a cached catalog
        """
        self._memory: OrderedDict[str, CachedCatalog] = OrderedDict()
        self._max_memory = max_memory_items
        self._db_path = Path(db_path)
        self._ttl = ttl_seconds
        self._initialized = False
        self._stats = CacheStats()

    async def _ensure_initialized(self) -> None:
        if self._initialized:
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS catalogs (
                    shop_domain TEXT PRIMARY KEY,
                    products TEXT NOT NULL,
                    product_count INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    expires_at TEXT NOT NULL
                )
            """)
            await db.execute(
                "CREATE INDEX IF NOT EXISTS idx_catalogs_expires ON catalogs(expires_at)"
            )
            await db.commit()

        self._initialized = True
        logger.debug("Catalog cache initialized", path=str(self._db_path))

    async def get(self, shop_domain: str) -> Optional[list[Product]]:
        """Get a cached catalog, checking memory first, then SQLite.

        Returns:
            The cached products, or None if missing or expired
        """
        await self._ensure_initialized()
        now = datetime.now()

        cached = self._memory.get(shop_domain)
        if cached is not None:
            if now < cached.expires_at:
                self._memory.move_to_end(shop_domain)
                self._stats.hits += 1
                logger.debug("Catalog cache hit (memory)", shop=shop_domain)
                return list(cached.products)
            del self._memory[shop_domain]

        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT products, created_at, expires_at FROM catalogs WHERE shop_domain = ?",
                (shop_domain,),
            )
            row = await cursor.fetchone()

            if row:
                payload, created_at, expires_at = row
                expires = datetime.fromisoformat(expires_at)
                if now < expires:
                    products = [Product.model_validate(p) for p in json.loads(payload)]
                    self._remember(
                        CachedCatalog(
                            shop_domain=shop_domain,
                            products=products,
                            created_at=datetime.fromisoformat(created_at),
                            expires_at=expires,
                        )
                    )
                    self._stats.hits += 1
                    logger.debug("Catalog cache hit (db)", shop=shop_domain)
                    return products

                await db.execute("DELETE FROM catalogs WHERE shop_domain = ?", (shop_domain,))
                await db.commit()

        self._stats.misses += 1
        logger.debug("Catalog cache miss", shop=shop_domain)
        return None

    async def set(self, shop_domain: str, products: list[Product]) -> None:
        """Store a shop's catalog in both tiers."""
        await self._ensure_initialized()

        now = datetime.now()
        cached = CachedCatalog(
            shop_domain=shop_domain,
            products=list(products),
            created_at=now,
            expires_at=now + timedelta(seconds=self._ttl),
        )
        self._remember(cached)

        payload = json.dumps([p.model_dump(mode="json") for p in products], ensure_ascii=False)
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO catalogs
                (shop_domain, products, product_count, created_at, expires_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    shop_domain,
                    payload,
                    len(products),
                    now.isoformat(),
                    cached.expires_at.isoformat(),
                ),
            )
            await db.commit()

        logger.debug("Catalog cached", shop=shop_domain, products=len(products), ttl=self._ttl)

    async def invalidate(self, shop_domain: str) -> bool:
        """Drop one shop's catalog. Returns True if anything was removed."""
        await self._ensure_initialized()

        removed = self._memory.pop(shop_domain, None) is not None
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("DELETE FROM catalogs WHERE shop_domain = ?", (shop_domain,))
            await db.commit()
            return removed or cursor.rowcount > 0

    async def clear(self) -> int:
        """Remove every cached catalog.

        Returns:
            Number of SQLite rows removed
        """
        await self._ensure_initialized()

        self._memory.clear()
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute("DELETE FROM catalogs")
            await db.commit()
            count = cursor.rowcount

        logger.info("Catalog cache cleared", count=count)
        return count

    async def cleanup_expired(self) -> int:
        """Remove expired catalogs from both tiers.

        Returns:
            Number of SQLite rows removed
        """
        await self._ensure_initialized()

        now = datetime.now()
        for shop in [s for s, c in self._memory.items() if c.expires_at <= now]:
            del self._memory[shop]

        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "DELETE FROM catalogs WHERE expires_at <= ?", (now.isoformat(),)
            )
            await db.commit()
            return cursor.rowcount

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        self._stats.memory_items = len(self._memory)
        return self._stats.model_copy()

    def _remember(self, cached: CachedCatalog) -> None:
        self._memory[cached.shop_domain] = cached
        self._memory.move_to_end(cached.shop_domain)
        while len(self._memory) > self._max_memory:
            self._memory.popitem(last=False)


# Global catalog cache instance
_catalog_cache: Optional[CatalogCache] = None


def get_catalog_cache() -> CatalogCache:
    """Get the global catalog cache (creates if needed)."""
    global _catalog_cache
    if _catalog_cache is None:
        from laylapet.config.settings import settings

        _catalog_cache = CatalogCache(
            db_path=settings.cache_path,
            max_memory_items=settings.cache_memory_max_items,
            ttl_seconds=settings.catalog_cache_ttl_minutes * 60,
        )
    return _catalog_cache


def reset_catalog_cache() -> None:
    """Reset the global catalog cache (for testing)."""
    global _catalog_cache
    _catalog_cache = None
