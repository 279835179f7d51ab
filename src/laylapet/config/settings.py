"""Configuration settings for the Laylapet shopping assistant."""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("openai_api_key", "OPENAI_API_KEY", "OPENAI_KEY"),
        description="OpenAI API key (required for chat replies)",
    )
    openai_model: str = Field(
        default="gpt-4-turbo-preview", description="Chat completion model"
    )
    openai_temperature: float = Field(default=0.7, description="Sampling temperature")
    openai_timeout_seconds: float = Field(
        default=30.0, description="Timeout for a single completion request"
    )

    # Shopify catalog
    shopify_token: Optional[str] = Field(
        default=None,
        description="Shopify Admin API access token (shpat_...)",
    )
    shopify_api_version: str = Field(
        default="2024-01", description="Shopify Admin API version"
    )
    catalog_page_size: int = Field(
        default=250, description="Products requested in a single catalog fetch"
    )
    catalog_timeout_seconds: float = Field(
        default=15.0, description="Timeout for catalog requests in seconds"
    )

    # Catalog cache
    catalog_cache_enabled: bool = Field(default=True, description="Enable catalog caching")
    cache_path: Path = Field(
        default=Path("data/catalog_cache.db"), description="SQLite cache path"
    )
    catalog_cache_ttl_minutes: int = Field(
        default=10, description="TTL for cached catalogs in minutes"
    )
    cache_memory_max_items: int = Field(
        default=100, description="Max shops kept in the memory cache"
    )

    # Ranking
    max_candidates: int = Field(
        default=12, description="Ranked products forwarded to the language model"
    )
    max_recommendations: int = Field(
        default=3, description="Products returned alongside a reply"
    )
    diversify_enabled: bool = Field(
        default=False, description="Resample candidates across price terciles"
    )
    diversify_quota: int = Field(default=4, description="Samples per price tercile")
    exclusion_penalty: int = Field(
        default=1000,
        description="Flat penalty for products containing an excluded ingredient",
    )
    vendor_scoring_enabled: bool = Field(
        default=True, description="Score brand keywords against the vendor field"
    )

    # Session recency
    recency_max_history: int = Field(
        default=15, description="Recently recommended products kept per session"
    )
    recency_max_sessions: int = Field(
        default=1000, description="Sessions tracked before the oldest half is evicted"
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("api_port", "API_PORT", "PORT"),
        description="API port",
    )
    cors_allow_origins: str = Field(
        default="*", description="Comma-separated list of allowed CORS origins"
    )
    environment: str = Field(
        default="development",
        description="Environment: 'development' or 'production'",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def cors_origins(self) -> list[str]:
        """Parsed CORS origins."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


settings = Settings()
