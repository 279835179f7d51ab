"""Relevance scoring and filtering of catalog products against a search intent.

Every factor is scored independently and summed. Products with a total of
zero or less are dropped, the rest are sorted best-first. An excluded
ingredient costs a flat penalty large enough to outweigh any combination of
positive factors, so excluded products never survive filtering.

Exclusion scanning skips negated mentions in product text: a product sold
as "tavuksuz" or "grain-free" does not count as containing the ingredient,
unlike a plain substring test.
"""

import re
from typing import Optional

from pydantic import BaseModel

from laylapet.logging import log_ranking
from laylapet.matching.intent import (
    CATEGORIES,
    MODIFIER_MATCH_TERMS,
    SPECIES,
    normalize_text,
    tokenize,
)
from laylapet.state.models import Product, ScoredProduct, SearchIntent

DEFAULT_RESULT_LIMIT = 12
EXCLUDED_REASON = "Contains excluded ingredient"


class ScoringWeights(BaseModel):
    """Score deltas for each ranking factor."""

    exclusion_penalty: int = 1000
    brand_vendor_exact: int = 50
    brand_vendor_partial: int = 45
    brand_title: int = 48
    brand_tags: int = 15
    brand_description: int = 10
    species_match: int = 20
    species_mismatch: int = -5
    category_match: int = 15
    hint_match: int = 15
    modifier_match: int = 10
    in_stock: int = 3
    fallback_title: int = 5
    fallback_text: int = 3


# ============================================================================
# Product text
# ============================================================================

class _ProductText:
    """Lowercased views of a product's searchable fields."""

    __slots__ = ("title", "vendor", "category", "tags", "description", "tags_text", "full", "classified")

    def __init__(self, product: Product):
        self.title = normalize_text(product.title)
        self.vendor = normalize_text(product.vendor).strip()
        self.category = normalize_text(product.category)
        self.tags = [normalize_text(tag) for tag in product.tags]
        self.description = normalize_text(product.description)
        self.tags_text = " ".join(self.tags)
        # Title, tags and category name what the product *is*
        self.classified = " ".join((self.category, self.tags_text, self.title))
        self.full = " ".join((self.title, self.tags_text, self.category, self.description))


# ============================================================================
# Exclusions
# ============================================================================

_NEGATED_PREFIXES = ["without", "free from", "no"]
_NEGATED_SUFFIXES = ["sız", "siz", "suz", "süz"]
_NEGATED_POSTFIXES = ["içermez", "icermez", "içermeyen", "icermeyen", "yoktur", "bulunmaz"]


def negated_mention_pattern(terms) -> Optional[re.Pattern]:
    """Build a pattern matching negated mentions of any term ("tavuksuz", "grain-free")."""
    terms = [t for t in terms if t]
    if not terms:
        return None
    alternation = "|".join(re.escape(t) for t in sorted(terms, key=len, reverse=True))
    return re.compile(
        rf"\b(?:{'|'.join(_NEGATED_PREFIXES)})\s+(?:{alternation})"
        rf"|(?:{alternation})(?:{'|'.join(_NEGATED_SUFFIXES)})\b"
        rf"|(?:{alternation})[- ]free\b"
        rf"|(?:{alternation})\s+(?:{'|'.join(_NEGATED_POSTFIXES)})"
    )


def contains_excluded(text: str, exclude_terms, negated: Optional[re.Pattern] = None) -> bool:
    """True if any excluded term occurs in the text outside a negated mention."""
    if not exclude_terms:
        return False
    if negated is not None:
        text = negated.sub(" ", text)
    return any(term in text for term in exclude_terms)


# ============================================================================
# Scoring
# ============================================================================

def _brand_score(
    text: _ProductText,
    keywords,
    weights: ScoringWeights,
    vendor_scoring_enabled: bool,
) -> tuple[int, list[str]]:
    score = 0
    reasons = []
    for keyword in keywords:
        vendor_matched = False
        if vendor_scoring_enabled and text.vendor:
            if text.vendor == keyword:
                score += weights.brand_vendor_exact
                reasons.append(f"Vendor: {keyword}")
                vendor_matched = True
            elif keyword in text.vendor or text.vendor in keyword:
                score += weights.brand_vendor_partial
                reasons.append(f"Vendor partial: {keyword}")
                vendor_matched = True

        if not vendor_matched and keyword in text.title:
            score += weights.brand_title
            reasons.append(f"Brand in title: {keyword}")

        if any(keyword in tag for tag in text.tags):
            score += weights.brand_tags
            reasons.append(f"Brand in tags: {keyword}")

        if keyword in text.description:
            score += weights.brand_description
            reasons.append(f"Brand in description: {keyword}")
    return score, reasons


def score_product(
    product: Product,
    intent: SearchIntent,
    message_words: Optional[list[str]] = None,
    weights: Optional[ScoringWeights] = None,
    vendor_scoring_enabled: bool = True,
    negated: Optional[re.Pattern] = None,
) -> ScoredProduct:
    """Score a single product against an intent.

    Args:
        product: Catalog product
        intent: Extracted search intent
        message_words: Message words used for keyword overlap when the intent is empty
        weights: Score deltas (defaults to ScoringWeights())
        vendor_scoring_enabled: Score brand keywords against the vendor field
        negated: Pattern of negated exclusion mentions to ignore in product text

    Returns:
        ScoredProduct with the total score and the reasons behind it
    """
    weights = weights or ScoringWeights()
    text = _ProductText(product)
    score = 0
    reasons: list[str] = []

    if contains_excluded(text.full, intent.exclude_terms, negated):
        score -= weights.exclusion_penalty
        reasons.append(EXCLUDED_REASON)

    brand, brand_reasons = _brand_score(
        text, intent.brand_keywords, weights, vendor_scoring_enabled
    )
    score += brand
    reasons.extend(brand_reasons)

    if intent.species:
        species_terms = SPECIES.get(intent.species, [intent.species])
        if any(term in text.classified for term in species_terms):
            score += weights.species_match
            reasons.append(f"Species: {intent.species}")
        elif not any(term in text.full for term in species_terms):
            score += weights.species_mismatch
            reasons.append(f"Not for {intent.species}")

    if intent.category:
        category_terms = CATEGORIES.get(intent.category, []) + [intent.category]
        if any(term in text.classified for term in category_terms):
            score += weights.category_match
            reasons.append(f"Category: {intent.category}")

    for hint in intent.free_text_hints:
        if hint in text.full:
            score += weights.hint_match
            reasons.append(f"Hint: {hint}")

    for modifier in intent.life_stage_or_health:
        terms = MODIFIER_MATCH_TERMS.get(modifier, [modifier])
        if any(term in text.full for term in terms):
            score += weights.modifier_match
            reasons.append(f"Modifier: {modifier}")

    if product.in_stock:
        score += weights.in_stock

    if intent.is_empty and message_words:
        for word in message_words:
            if word in text.title:
                score += weights.fallback_title
                reasons.append(f"Keyword in title: {word}")
            elif word in text.full:
                score += weights.fallback_text

    return ScoredProduct(product=product, score=score, reasons=reasons)


def rank_products(
    catalog: list[Product],
    intent: SearchIntent,
    message: str = "",
    limit: Optional[int] = DEFAULT_RESULT_LIMIT,
    weights: Optional[ScoringWeights] = None,
    vendor_scoring_enabled: bool = True,
) -> list[ScoredProduct]:
    """Score, filter and sort a catalog.

    Args:
        catalog: Products to rank
        intent: Extracted search intent
        message: Raw customer message (used for keyword overlap on empty intents)
        limit: Maximum results, or None for every positive-scoring product
        weights: Score deltas (defaults to ScoringWeights())
        vendor_scoring_enabled: Score brand keywords against the vendor field

    Returns:
        Products with a strictly positive score, best first
    """
    weights = weights or ScoringWeights()
    message_words = [w for w in tokenize(normalize_text(message)) if len(w) >= 3]
    negated = negated_mention_pattern(intent.exclude_terms)

    scored = [
        score_product(
            product,
            intent,
            message_words=message_words,
            weights=weights,
            vendor_scoring_enabled=vendor_scoring_enabled,
            negated=negated,
        )
        for product in catalog
    ]
    excluded = sum(1 for s in scored if EXCLUDED_REASON in s.reasons)
    # sorted() is stable, so equal scores keep catalog order
    ranked = sorted((s for s in scored if s.score > 0), key=lambda s: s.score, reverse=True)

    log_ranking(
        catalog_size=len(catalog),
        ranked=len(ranked),
        excluded=excluded,
        fallback_mode=intent.is_empty,
        top_scores=[s.score for s in ranked[:5]],
    )

    if limit is not None:
        ranked = ranked[:limit]
    return ranked
