"""Resolve which catalog products a language model reply actually mentions."""

from typing import Optional

import structlog

from laylapet.state.models import Product, RecommendedProduct
from laylapet.state.recency import SessionRecencyTracker

logger = structlog.get_logger()


def is_mentioned(product: Product, reply_text: str) -> bool:
    """True if the product's title or slug appears verbatim in the reply."""
    return any(value and value in reply_text for value in (product.title, product.slug))


class AnswerGroundingResolver:
    """Map a free-text reply back to real catalog products.

    Only candidates whose title or slug appears literally in the reply are
    returned, so the reply can never introduce a product that does not
    exist. Products recently shown in the same session are skipped unless
    they are needed to fill the result.
    """

    def __init__(self, tracker: SessionRecencyTracker, max_results: int = 3):
        self.tracker = tracker
        self.max_results = max_results

    def resolve(
        self,
        reply_text: str,
        candidates: list[Product],
        session_id: Optional[str] = None,
    ) -> list[RecommendedProduct]:
        """Pick up to ``max_results`` mentioned candidates, in candidate order.

        Args:
            reply_text: Language model reply
            candidates: Products that were offered to the model, best first
            session_id: Session key for recency tracking (None disables it)

        Returns:
            Grounded recommendations; selected ids are recorded for the session
        """
        if not reply_text or not candidates:
            return []

        mentioned = [p for p in candidates if is_mentioned(p, reply_text)]
        recent = set(self.tracker.recent(session_id)) if session_id else set()

        selected: list[Product] = []
        chosen: set[str] = set()
        for product in mentioned:
            if len(selected) >= self.max_results:
                break
            if product.id not in recent and product.id not in chosen:
                selected.append(product)
                chosen.add(product.id)

        # Top up with recently shown products rather than return fewer
        if len(selected) < self.max_results:
            for product in mentioned:
                if len(selected) >= self.max_results:
                    break
                if product.id not in chosen:
                    selected.append(product)
                    chosen.add(product.id)

        if session_id and selected:
            self.tracker.record(session_id, [p.id for p in selected])

        logger.debug(
            "Reply grounded",
            mentioned=len(mentioned),
            selected=len(selected),
            recent_skipped=sum(1 for p in mentioned if p.id in recent),
        )
        return [RecommendedProduct.from_product(p) for p in selected]
