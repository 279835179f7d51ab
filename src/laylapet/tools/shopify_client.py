"""Shopify Admin GraphQL catalog provider."""

import time
from typing import Any, Optional

import httpx
import structlog

from laylapet.cache.manager import CatalogCache
from laylapet.logging import log_catalog_fetch
from laylapet.state.models import Product
from laylapet.tools.errors import CatalogProviderError
from laylapet.tools.html import strip_html

logger = structlog.get_logger()

PRODUCTS_QUERY = """
query Products($first: Int!) {
  products(first: $first, query: "status:active") {
    edges {
      node {
        id
        title
        handle
        vendor
        productType
        tags
        description
        descriptionHtml
        availableForSale
        priceRange {
          minVariantPrice {
            amount
            currencyCode
          }
        }
        featuredImage {
          url
        }
      }
    }
  }
}
"""


def _parse_price(value: Any) -> float:
    """Parse a money amount, clamping invalid or negative values to zero."""
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if price > 0 else 0.0


def _field(node: dict, key: str, expected: type, default: Any = None) -> Any:
    """Read an optional field, rejecting values of the wrong JSON type."""
    value = node.get(key)
    if value is None:
        return default
    if not isinstance(value, expected):
        raise ValueError(f"'{key}' is {type(value).__name__}, expected {expected.__name__}")
    return value


def normalize_product_node(node: Any) -> Optional[Product]:
    """Convert a GraphQL product node into a Product.

    Args:
        node: Product node from the Admin API

    Returns:
        Normalized Product, or None if the node has no title or handle

    Raises:
        ValueError: If the node or one of its fields has the wrong shape
    """
    if not isinstance(node, dict):
        raise ValueError(f"product node is {type(node).__name__}, expected dict")

    title = _field(node, "title", str, "").strip()
    handle = _field(node, "handle", str, "").strip()
    if not title or not handle:
        return None

    tags = _field(node, "tags", list, [])
    if not all(isinstance(tag, str) for tag in tags):
        raise ValueError("'tags' must be a list of strings")

    money = _field(_field(node, "priceRange", dict, {}), "minVariantPrice", dict, {})
    image = _field(node, "featuredImage", dict, {})
    description = strip_html(_field(node, "descriptionHtml", str)) or _field(
        node, "description", str, ""
    )

    return Product(
        id=_field(node, "id", str) or handle,
        title=title,
        slug=handle,
        vendor=_field(node, "vendor", str),
        category=_field(node, "productType", str),
        tags=tags,
        description=description,
        price=_parse_price(money.get("amount")),
        currency=_field(money, "currencyCode", str) or "TRY",
        in_stock=_field(node, "availableForSale", bool, False),
        image_url=_field(image, "url", str),
    )


class ShopifyCatalogProvider:
    """Fetches a shop's active products through the Admin GraphQL API."""

    def __init__(
        self,
        access_token: Optional[str],
        api_version: str = "2024-01",
        page_size: int = 250,
        timeout: float = 15.0,
        cache: Optional[CatalogCache] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the provider.

        Args:
            access_token: Admin API access token
            api_version: Admin API version segment of the endpoint URL
            page_size: Products requested in the single catalog query
            timeout: Request timeout in seconds
            cache: Optional catalog cache keyed by shop domain
            http_client: Client to reuse (a new one is opened per fetch otherwise)
        """
        self.access_token = access_token
        self.api_version = api_version
        self.page_size = page_size
        self.timeout = timeout
        self.cache = cache
        self._http_client = http_client

    def endpoint(self, shop_domain: str) -> str:
        return f"https://{shop_domain}/admin/api/{self.api_version}/graphql.json"

    async def fetch_products(self, shop_domain: str) -> list[Product]:
        """Return the normalized catalog of a shop.

        Raises:
            CatalogProviderError: On transport errors, error statuses,
                GraphQL errors or malformed responses
        """
        if self.cache is not None:
            cached = await self.cache.get(shop_domain)
            if cached is not None:
                log_catalog_fetch(shop_domain, len(cached), 0.0, cached=True)
                return cached

        start = time.perf_counter()
        try:
            payload = await self._post(shop_domain)
            products = self._parse(payload, shop_domain)
        except CatalogProviderError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            log_catalog_fetch(shop_domain, 0, duration_ms, error=str(e))
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        log_catalog_fetch(shop_domain, len(products), duration_ms)

        if self.cache is not None:
            await self.cache.set(shop_domain, products)
        return products

    async def _post(self, shop_domain: str) -> dict:
        if not self.access_token:
            raise CatalogProviderError("Shopify access token is not configured", shop_domain)

        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }
        body = {"query": PRODUCTS_QUERY, "variables": {"first": self.page_size}}

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self.endpoint(shop_domain), json=body, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.endpoint(shop_domain), json=body, headers=headers
                    )
        except httpx.HTTPError as e:
            logger.error("Shopify request failed", shop=shop_domain, error=str(e))
            raise CatalogProviderError(f"Shopify request failed: {e}", shop_domain) from e

        if response.status_code >= 400:
            logger.error(
                "Shopify returned an error status",
                shop=shop_domain,
                status=response.status_code,
            )
            raise CatalogProviderError(
                f"Shopify returned HTTP {response.status_code}",
                shop_domain,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise CatalogProviderError("Shopify returned invalid JSON", shop_domain) from e

        if not isinstance(payload, dict):
            raise CatalogProviderError("Unexpected Shopify response shape", shop_domain)
        return payload

    def _parse(self, payload: dict, shop_domain: str) -> list[Product]:
        if payload.get("errors"):
            logger.error("Shopify GraphQL errors", shop=shop_domain, errors=payload["errors"])
            raise CatalogProviderError("Shopify API returned errors", shop_domain)

        data = payload.get("data")
        products_field = data.get("products") if isinstance(data, dict) else None
        edges = products_field.get("edges") if isinstance(products_field, dict) else None
        if not isinstance(edges, list):
            raise CatalogProviderError("Shopify response has no product list", shop_domain)

        products = []
        for edge in edges:
            node = edge.get("node") if isinstance(edge, dict) else edge
            try:
                product = normalize_product_node(node)
            except ValueError as e:
                # A malformed node fails the whole fetch, no partial catalog
                logger.error("Malformed Shopify product", shop=shop_domain, error=str(e))
                raise CatalogProviderError(f"Malformed product data: {e}", shop_domain) from e
            if product is None:
                logger.warning("Skipping product without title or handle", id=node.get("id"))
                continue
            products.append(product)
        return products


# Global provider instance
_catalog_provider: Optional[ShopifyCatalogProvider] = None


def get_catalog_provider() -> ShopifyCatalogProvider:
    """Get the global catalog provider (creates if needed)."""
    global _catalog_provider
    if _catalog_provider is None:
        from laylapet.cache.manager import get_catalog_cache
        from laylapet.config.settings import settings

        _catalog_provider = ShopifyCatalogProvider(
            access_token=settings.shopify_token,
            api_version=settings.shopify_api_version,
            page_size=settings.catalog_page_size,
            timeout=settings.catalog_timeout_seconds,
            cache=get_catalog_cache() if settings.catalog_cache_enabled else None,
        )
    return _catalog_provider


def reset_catalog_provider() -> None:
    """Reset the global catalog provider (for testing)."""
    global _catalog_provider
    _catalog_provider = None
