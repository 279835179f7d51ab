"""Prompt text and fixed replies for the Laylapet assistant."""

from laylapet.state.models import Product

NO_RESULTS_REPLY = (
    "Aradığın kriterlere uygun bir ürün bulamadım 😔 Başka bir şey sormak ister misin?"
)
MISSING_INPUT_REPLY = "Mesaj veya shop domain eksik"
PROVIDER_ERROR_REPLY = "Üzgünüm, bir bağlantı hatası oluştu. Lütfen tekrar dene."

SYSTEM_PROMPT_TEMPLATE = """Sen Laylapet mağazasının uzman kedi/köpek danışmanısın.
Müşteriye samimi bir dille yardımcı ol.
Sadece sana verdiğim ürün listesini kullan.
Ürün linklerini mutlaka [Ürün Adı](https://{domain}/products/handle) formatında ver.
Ürün adlarını listede yazdığı gibi, değiştirmeden kullan.
Fiyatları TL cinsinden belirt.

ÜRÜN LİSTESİ:
{product_lines}"""


def format_price(price: float) -> str:
    """Format a price the way the storefront shows it (149.9 -> "149.90")."""
    return f"{price:.2f}"


def format_product_line(product: Product) -> str:
    return (
        f"- {product.title} "
        f"(Fiyat: {format_price(product.price)} {product.currency}, Link: {product.slug})"
    )


def build_system_prompt(candidates: list[Product], shop_domain: str) -> str:
    """Build the system prompt listing the candidate products.

    Args:
        candidates: Products the reply may reference
        shop_domain: Storefront domain used in product links

    Returns:
        System prompt text
    """
    return SYSTEM_PROMPT_TEMPLATE.format(
        domain=shop_domain or "laylapet.com",
        product_lines="\n".join(format_product_line(p) for p in candidates),
    )
