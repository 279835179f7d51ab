"""Chat assistant: one customer message in, a grounded reply out.

Flow of a chat turn:
1. Extract the search intent from the message
2. Rank the catalog against the intent
3. Short-circuit with a fixed reply when nothing ranks
4. Forward the top candidates (optionally price-diversified) to the language model
5. Ground the reply in real catalog products and record them for the session
"""

import random
from typing import Optional

import structlog

from laylapet.agents.prompts import NO_RESULTS_REPLY, build_system_prompt
from laylapet.logging import LogTimer, log_chat_turn
from laylapet.matching.diversify import diversify
from laylapet.matching.grounding import AnswerGroundingResolver
from laylapet.matching.intent import extract_intent
from laylapet.matching.scoring import ScoringWeights, rank_products
from laylapet.state.models import ChatTurnResult, Product, SearchIntent

logger = structlog.get_logger()


class ChatAssistant:
    """Runs chat turns against an already-fetched catalog.

    The language model is any object with an async
    ``complete(system_prompt, user_message) -> str`` method.
    """

    def __init__(
        self,
        llm,
        resolver: AnswerGroundingResolver,
        max_candidates: int = 12,
        diversify_enabled: bool = False,
        diversify_quota: int = 4,
        weights: Optional[ScoringWeights] = None,
        vendor_scoring_enabled: bool = True,
        rng: Optional[random.Random] = None,
    ):
        self.llm = llm
        self.resolver = resolver
        self.max_candidates = max_candidates
        self.diversify_enabled = diversify_enabled
        self.diversify_quota = diversify_quota
        self.weights = weights or ScoringWeights()
        self.vendor_scoring_enabled = vendor_scoring_enabled
        self._rng = rng

    def select_candidates(
        self, intent: SearchIntent, message: str, catalog: list[Product]
    ) -> list[Product]:
        """Rank the catalog and pick the products to show the model."""
        ranked = rank_products(
            catalog,
            intent,
            message=message,
            limit=None,
            weights=self.weights,
            vendor_scoring_enabled=self.vendor_scoring_enabled,
        )
        diversified = self.diversify_enabled and len(ranked) > self.max_candidates
        if diversified:
            ranked = diversify(ranked, quota=self.diversify_quota, rng=self._rng)
        logger.debug("Candidates selected", ranked=len(ranked), diversified=diversified)
        return [scored.product for scored in ranked[: self.max_candidates]]

    async def handle_chat_turn(
        self,
        message: str,
        session_id: Optional[str],
        catalog: list[Product],
        shop_domain: str = "",
    ) -> ChatTurnResult:
        """Answer one customer message.

        Args:
            message: Raw customer message
            session_id: Session key used for recommendation variety
            catalog: The shop's normalized products
            shop_domain: Storefront domain for product links

        Returns:
            ChatTurnResult with the reply and grounded recommendations

        Raises:
            ProviderError: If the language model fails
        """
        with LogTimer("chat_turn", shop_domain=shop_domain) as turn:
            intent = extract_intent(message)
            with LogTimer("rank_catalog", catalog_size=len(catalog)):
                candidates = self.select_candidates(intent, message, catalog)

            if not candidates:
                log_chat_turn(
                    message=message,
                    intent=intent.summary(),
                    candidates=0,
                    recommended=[],
                    duration_ms=turn.elapsed_ms,
                    fallback_reply=True,
                )
                return ChatTurnResult(reply=NO_RESULTS_REPLY, recommended=[], candidates=0)

            system_prompt = build_system_prompt(candidates, shop_domain)
            reply = await self.llm.complete(system_prompt, message)

            with LogTimer("ground_reply", candidates=len(candidates)):
                recommended = self.resolver.resolve(reply, candidates, session_id)

            log_chat_turn(
                message=message,
                intent=intent.summary(),
                candidates=len(candidates),
                recommended=[r.slug for r in recommended],
                duration_ms=turn.elapsed_ms,
            )
        return ChatTurnResult(reply=reply, recommended=recommended, candidates=len(candidates))


# Global assistant instance
_chat_assistant: Optional[ChatAssistant] = None


def get_chat_assistant() -> ChatAssistant:
    """Get the global chat assistant (creates if needed)."""
    global _chat_assistant
    if _chat_assistant is None:
        from laylapet.config.settings import settings
        from laylapet.state.recency import get_recency_tracker
        from laylapet.tools.openai_client import get_llm_provider

        _chat_assistant = ChatAssistant(
            llm=get_llm_provider(),
            resolver=AnswerGroundingResolver(
                get_recency_tracker(), max_results=settings.max_recommendations
            ),
            max_candidates=settings.max_candidates,
            diversify_enabled=settings.diversify_enabled,
            diversify_quota=settings.diversify_quota,
            weights=ScoringWeights(exclusion_penalty=settings.exclusion_penalty),
            vendor_scoring_enabled=settings.vendor_scoring_enabled,
        )
    return _chat_assistant


def reset_chat_assistant() -> None:
    """Reset the global chat assistant (for testing)."""
    global _chat_assistant
    _chat_assistant = None
