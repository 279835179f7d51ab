"""Tests for the Shopify catalog provider."""

import json

import httpx
import pytest

from laylapet.cache.manager import CatalogCache
from laylapet.tools.errors import CatalogProviderError
from laylapet.tools.html import strip_html
from laylapet.tools.shopify_client import ShopifyCatalogProvider, normalize_product_node

SHOP = "laylapet.myshopify.com"


def product_node(**overrides) -> dict:
    node = {
        "id": "gid://shopify/Product/1",
        "title": "Acana Cat Fish",
        "handle": "acana-cat-fish",
        "vendor": "Acana",
        "productType": "Kedi Maması",
        "tags": ["kedi", "mama"],
        "description": "Tahılsız balıklı mama",
        "descriptionHtml": "<p>Tahılsız <strong>balıklı</strong> mama</p>",
        "availableForSale": True,
        "priceRange": {"minVariantPrice": {"amount": "620.0", "currencyCode": "TRY"}},
        "featuredImage": {"url": "https://cdn.shopify.com/acana.jpg"},
    }
    node.update(overrides)
    return node


def graphql_payload(*nodes) -> dict:
    return {"data": {"products": {"edges": [{"node": n} for n in nodes]}}}


def make_provider(handler, **kwargs) -> ShopifyCatalogProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ShopifyCatalogProvider(access_token="shpat_test", http_client=client, **kwargs)


class TestStripHtml:
    """Tests for HTML stripping."""

    def test_strips_tags_and_collapses_whitespace(self):
        assert strip_html("<p>Merhaba\n <b>dünya</b></p>") == "Merhaba dünya"

    def test_drops_scripts(self):
        assert strip_html("<p>Mama</p><script>alert(1)</script>") == "Mama"

    def test_empty(self):
        assert strip_html(None) == ""
        assert strip_html("") == ""


class TestNormalizeProductNode:
    """Tests for GraphQL node normalization."""

    def test_full_node(self):
        product = normalize_product_node(product_node())

        assert product.id == "gid://shopify/Product/1"
        assert product.slug == "acana-cat-fish"
        assert product.category == "Kedi Maması"
        assert product.tags == ("kedi", "mama")
        assert product.description == "Tahılsız balıklı mama"
        assert product.price == 620.0
        assert product.currency == "TRY"
        assert product.in_stock is True
        assert product.image_url == "https://cdn.shopify.com/acana.jpg"

    def test_missing_optional_fields_default(self):
        product = normalize_product_node(
            {"id": "1", "title": "Mama", "handle": "mama", "vendor": None, "tags": None}
        )

        assert product.vendor == ""
        assert product.tags == ()
        assert product.description == ""
        assert product.price == 0.0
        assert product.in_stock is False
        assert product.image_url is None

    def test_invalid_price_clamped(self):
        node = product_node(priceRange={"minVariantPrice": {"amount": "abc"}})
        assert normalize_product_node(node).price == 0.0

    def test_node_without_handle_skipped(self):
        assert normalize_product_node(product_node(handle=None)) is None
        assert normalize_product_node(product_node(title="  ")) is None

    def test_wrong_field_type_rejected(self):
        with pytest.raises(ValueError):
            normalize_product_node(product_node(tags=["kedi", 3]))
        with pytest.raises(ValueError):
            normalize_product_node("not a node")


class TestShopifyCatalogProvider:
    """Tests for ShopifyCatalogProvider.fetch_products."""

    @pytest.mark.asyncio
    async def test_fetch_products(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=graphql_payload(product_node(), product_node(handle="")))

        provider = make_provider(handler, page_size=50)
        products = await provider.fetch_products(SHOP)

        assert [p.slug for p in products] == ["acana-cat-fish"]
        request = requests[0]
        assert str(request.url) == f"https://{SHOP}/admin/api/2024-01/graphql.json"
        assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
        body = json.loads(request.content)
        assert body["variables"] == {"first": 50}
        assert "status:active" in body["query"]

    @pytest.mark.asyncio
    async def test_graphql_errors(self):
        def handler(request):
            return httpx.Response(200, json={"errors": [{"message": "Access denied"}]})

        with pytest.raises(CatalogProviderError):
            await make_provider(handler).fetch_products(SHOP)

    @pytest.mark.asyncio
    async def test_error_status(self):
        def handler(request):
            return httpx.Response(401, json={"errors": "Invalid API key"})

        with pytest.raises(CatalogProviderError) as exc_info:
            await make_provider(handler).fetch_products(SHOP)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>maintenance</html>")

        with pytest.raises(CatalogProviderError):
            await make_provider(handler).fetch_products(SHOP)

    @pytest.mark.asyncio
    async def test_missing_product_list(self):
        def handler(request):
            return httpx.Response(200, json={"data": {}})

        with pytest.raises(CatalogProviderError):
            await make_provider(handler).fetch_products(SHOP)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CatalogProviderError):
            await make_provider(handler).fetch_products(SHOP)

    @pytest.mark.asyncio
    async def test_missing_token(self):
        provider = ShopifyCatalogProvider(access_token=None)

        with pytest.raises(CatalogProviderError):
            await provider.fetch_products(SHOP)

    @pytest.mark.asyncio
    async def test_cached_catalog_reused(self, tmp_path):
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(200, json=graphql_payload(product_node()))

        cache = CatalogCache(db_path=tmp_path / "cache.db", ttl_seconds=600)
        provider = make_provider(handler, cache=cache)

        first = await provider.fetch_products(SHOP)
        second = await provider.fetch_products(SHOP)

        assert calls == 1
        assert first == second

    @pytest.mark.asyncio
    async def test_failures_not_cached(self, tmp_path):
        def handler(request):
            return httpx.Response(500)

        cache = CatalogCache(db_path=tmp_path / "cache.db")
        provider = make_provider(handler, cache=cache)

        with pytest.raises(CatalogProviderError):
            await provider.fetch_products(SHOP)
        assert await cache.get(SHOP) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"data": []},
            {"data": {"products": {"edges": ["oops"]}}},
            graphql_payload(product_node(title=5)),
            graphql_payload(product_node(tags=7)),
            graphql_payload(product_node(priceRange={"minVariantPrice": "620.0"})),
            graphql_payload(product_node(featuredImage="https://cdn/x.jpg")),
        ],
    )
    async def test_malformed_payload(self, payload):
        """Wrongly typed catalog data fails the fetch instead of crashing."""

        def handler(request):
            return httpx.Response(200, json=payload)

        with pytest.raises(CatalogProviderError):
            await make_provider(handler).fetch_products(SHOP)
