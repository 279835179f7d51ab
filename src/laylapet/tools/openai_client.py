"""OpenAI chat completion provider."""

import time
from typing import Optional

import structlog
from openai import AsyncOpenAI, OpenAIError

from laylapet.logging import log_llm_call
from laylapet.tools.errors import LanguageModelError

logger = structlog.get_logger()


class OpenAIChatProvider:
    """Produces a reply from a system prompt and the customer message."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4-turbo-preview",
        temperature: float = 0.7,
        timeout: float = 30.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise LanguageModelError("OPENAI_API_KEY is not configured", self.model)
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self.timeout)
        return self._client

    async def complete(self, system_prompt: str, user_message: str) -> str:
        """Run one chat completion.

        Args:
            system_prompt: Instructions including the candidate product list
            user_message: Raw customer message

        Returns:
            The reply text of the first choice

        Raises:
            LanguageModelError: If the call fails or returns no content
        """
        client = self._get_client()
        start = time.perf_counter()

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            duration_ms = (time.perf_counter() - start) * 1000
            log_llm_call(self.model, len(system_prompt), 0, duration_ms, error=str(e))
            raise LanguageModelError(f"OpenAI request failed: {e}", self.model) from e

        duration_ms = (time.perf_counter() - start) * 1000
        reply = ""
        if response.choices:
            reply = (response.choices[0].message.content or "").strip()

        if not reply:
            log_llm_call(self.model, len(system_prompt), 0, duration_ms, error="empty reply")
            raise LanguageModelError("OpenAI returned an empty reply", self.model)

        log_llm_call(self.model, len(system_prompt), len(reply), duration_ms)
        return reply


# Global provider instance
_llm_provider: Optional[OpenAIChatProvider] = None


def get_llm_provider() -> OpenAIChatProvider:
    """Get the global language model provider (creates if needed)."""
    global _llm_provider
    if _llm_provider is None:
        from laylapet.config.settings import settings

        _llm_provider = OpenAIChatProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            timeout=settings.openai_timeout_seconds,
        )
    return _llm_provider


def reset_llm_provider() -> None:
    """Reset the global language model provider (for testing)."""
    global _llm_provider
    _llm_provider = None
