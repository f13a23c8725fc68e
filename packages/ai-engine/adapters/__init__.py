"""LLM Adapter Layer — provider-agnostic interface to chat-completion APIs.

Usage:
    from adapters import AdapterFactory, Message

    adapter = AdapterFactory.create("openai", api_key="sk-...")
    response = await adapter.complete([Message(role="user", content="Hello")])
"""

from .base import (
    BaseLLMAdapter,
    LLMError,
    LLMResponse,
    Message,
)
from .openai_adapter import OpenAIAdapter
from .factory import AdapterFactory

__all__ = [
    # Base types
    "BaseLLMAdapter",
    "LLMError",
    "LLMResponse",
    "Message",
    # Adapters
    "OpenAIAdapter",
    # Factory
    "AdapterFactory",
]
