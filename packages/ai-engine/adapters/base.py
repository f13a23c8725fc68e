"""Base LLM adapter — the contract every chat-completion provider follows.

This is the Strategy Pattern:
- Define a common interface (BaseLLMAdapter)
- Each provider implements it
- Application code only talks to the interface, never the concrete class

Why this matters:
- Switch providers with ONE config change
- Test with fake adapters (no real API calls)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncGenerator


class LLMError(Exception):
    """The chat-completion provider failed."""


@dataclass
class LLMResponse:
    """Standardized response from any LLM provider."""
    content: str                               # The assistant's reply
    model: str                                 # Which model answered, e.g. "gpt-4o-mini"
    provider: str                              # Which provider, e.g. "openai"
    usage: dict = field(default_factory=dict)  # Token counts: {"input": 100, "output": 50, "total": 150}
    latency_ms: float = 0.0                    # How long the API call took
    finish_reason: str = ""                    # Why the LLM stopped: "stop", "length"


@dataclass
class Message:
    """A single message in a conversation.

    Conversations are lists of messages:
        [
            Message(role="system", content="Answer using the context below..."),
            Message(role="user", content="What is our refund policy?"),
        ]
    """
    role: str          # "system", "user", "assistant"
    content: str = ""  # The message text


class BaseLLMAdapter(ABC):
    """Abstract base class for chat-completion providers.

    Usage:
        adapter = OpenAIAdapter(api_key="sk-...")
        response = await adapter.complete([Message(role="user", content="Hello!")])
        print(response.content)
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        """Send messages and wait for the full response.

        Raises:
            LLMError: If the provider call fails
        """
        ...

    @abstractmethod
    def stream(
        self,
        messages: list[Message],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AsyncGenerator[str, None]:
        """Stream the response text piece by piece.

        Usage:
            async for token in adapter.stream(messages):
                ...

        Raises:
            LLMError: If the provider call fails, before or during the stream
        """
        ...

    @abstractmethod
    def model_name(self) -> str:
        """The model identifier string, e.g. 'gpt-4o-mini'."""
        ...

    @abstractmethod
    def provider_name(self) -> str:
        """The provider identifier, e.g. 'openai'."""
        ...
