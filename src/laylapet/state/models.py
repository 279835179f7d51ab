"""State models for the shopping assistant."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Product(BaseModel):
    """A normalized catalog product.

    Products are immutable for the lifetime of a request; the engine never
    mutates catalog entries.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    slug: str
    vendor: str = ""
    category: str = ""
    tags: tuple[str, ...] = ()
    description: str = ""
    price: float = Field(default=0.0, ge=0)
    currency: str = "TRY"
    in_stock: bool = Field(default=False, alias="inStock")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    @field_validator("vendor", "category", "description", "currency", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            return tuple(t.strip() for t in value.split(",") if t.strip())
        return tuple(str(t) for t in value if t is not None)

    @field_validator("in_stock", mode="before")
    @classmethod
    def _none_to_false(cls, value):
        return False if value is None else value


class SearchIntent(BaseModel):
    """Structured search intent extracted from a customer message.

    Every collection is deduplicated; ``exclude_terms`` is sorted so two
    extractions of the same message compare equal.
    """

    model_config = ConfigDict(frozen=True)

    species: Optional[str] = None
    category: Optional[str] = None
    free_text_hints: tuple[str, ...] = ()
    life_stage_or_health: tuple[str, ...] = ()
    brand_keywords: tuple[str, ...] = ()
    exclude_terms: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when no structured preference was detected."""
        return not (
            self.species
            or self.category
            or self.free_text_hints
            or self.life_stage_or_health
            or self.brand_keywords
            or self.exclude_terms
        )

    def summary(self) -> dict:
        """Compact representation for logs."""
        return {
            key: value
            for key, value in self.model_dump().items()
            if value not in (None, ())
        }


class ScoredProduct(BaseModel):
    """A product paired with its relevance score."""

    product: Product
    score: int
    reasons: list[str] = Field(default_factory=list)


class RecommendedProduct(BaseModel):
    """A grounded recommendation returned to the caller."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    slug: str
    price: float
    currency: str
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    vendor: str = ""

    @classmethod
    def from_product(cls, product: Product) -> "RecommendedProduct":
        """Build the public view of a catalog product."""
        return cls(
            title=product.title,
            slug=product.slug,
            price=product.price,
            currency=product.currency,
            image_url=product.image_url,
            vendor=product.vendor,
        )


class ChatTurnResult(BaseModel):
    """Result of a single chat turn."""

    reply: str
    recommended: list[RecommendedProduct] = Field(default_factory=list)
    candidates: int = 0
