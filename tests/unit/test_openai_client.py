"""Tests for the OpenAI chat provider."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from laylapet.tools.errors import LanguageModelError
from laylapet.tools.openai_client import OpenAIChatProvider


def completion(*contents):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=c)) for c in contents]
    )


@pytest.fixture
def client():
    mock = MagicMock()
    mock.chat.completions.create = AsyncMock(return_value=completion(" Merhaba! "))
    return mock


class TestOpenAIChatProvider:
    """Tests for OpenAIChatProvider.complete."""

    @pytest.mark.asyncio
    async def test_returns_first_choice(self, client):
        provider = OpenAIChatProvider(api_key="sk-test", model="gpt-test", client=client)

        reply = await provider.complete("system", "kedi maması")

        assert reply == "Merhaba!"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.7
        assert kwargs["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "kedi maması"},
        ]

    @pytest.mark.asyncio
    async def test_api_error_mapped(self, client):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)
        provider = OpenAIChatProvider(api_key="sk-test", client=client)

        with pytest.raises(LanguageModelError):
            await provider.complete("system", "selam")

    @pytest.mark.asyncio
    async def test_empty_choices(self, client):
        client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        provider = OpenAIChatProvider(api_key="sk-test", client=client)

        with pytest.raises(LanguageModelError):
            await provider.complete("system", "selam")

    @pytest.mark.asyncio
    async def test_blank_content(self, client):
        client.chat.completions.create.return_value = completion(None)
        provider = OpenAIChatProvider(api_key="sk-test", client=client)

        with pytest.raises(LanguageModelError):
            await provider.complete("system", "selam")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        provider = OpenAIChatProvider(api_key=None)

        with pytest.raises(LanguageModelError):
            await provider.complete("system", "selam")
