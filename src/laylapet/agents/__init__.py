"""Chat assistant."""

from laylapet.agents.assistant import ChatAssistant, get_chat_assistant, reset_chat_assistant

__all__ = ["ChatAssistant", "get_chat_assistant", "reset_chat_assistant"]
