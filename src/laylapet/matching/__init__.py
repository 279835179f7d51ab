"""Query understanding and ranking engine."""

from laylapet.matching.diversify import diversify
from laylapet.matching.grounding import AnswerGroundingResolver
from laylapet.matching.intent import extract_intent
from laylapet.matching.scoring import ScoringWeights, rank_products
from laylapet.matching.synonyms import expand, expand_all

__all__ = [
    "AnswerGroundingResolver",
    "ScoringWeights",
    "diversify",
    "expand",
    "expand_all",
    "extract_intent",
    "rank_products",
]
