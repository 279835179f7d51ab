"""External collaborators: catalog and language model providers."""

from laylapet.tools.errors import CatalogProviderError, LanguageModelError, ProviderError
from laylapet.tools.openai_client import OpenAIChatProvider, get_llm_provider, reset_llm_provider
from laylapet.tools.shopify_client import (
    ShopifyCatalogProvider,
    get_catalog_provider,
    reset_catalog_provider,
)

__all__ = [
    "CatalogProviderError",
    "LanguageModelError",
    "OpenAIChatProvider",
    "ProviderError",
    "ShopifyCatalogProvider",
    "get_catalog_provider",
    "get_llm_provider",
    "reset_catalog_provider",
    "reset_llm_provider",
]
