"""State management exports."""

from laylapet.state.models import (
    ChatTurnResult,
    Product,
    RecommendedProduct,
    ScoredProduct,
    SearchIntent,
)
from laylapet.state.recency import (
    SessionRecencyTracker,
    get_recency_tracker,
    reset_recency_tracker,
)

__all__ = [
    "ChatTurnResult",
    "Product",
    "RecommendedProduct",
    "ScoredProduct",
    "SearchIntent",
    "SessionRecencyTracker",
    "get_recency_tracker",
    "reset_recency_tracker",
]
