"""Errors raised by external collaborators (catalog and language model)."""

from typing import Optional


class ProviderError(Exception):
    """An external provider failed or returned unusable data."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class CatalogProviderError(ProviderError):
    """The catalog could not be fetched or parsed."""

    def __init__(self, message: str, shop_domain: str = "", status_code: Optional[int] = None):
        super().__init__(message, provider="catalog")
        self.shop_domain = shop_domain
        self.status_code = status_code


class LanguageModelError(ProviderError):
    """The language model call failed or returned no reply."""

    def __init__(self, message: str, model: str = ""):
        super().__init__(message, provider="llm")
        self.model = model
