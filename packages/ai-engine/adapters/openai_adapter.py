"""OpenAI adapter — chat completions for gpt-4o-mini, gpt-4o, etc.

Translates between our standardized format and OpenAI's API format.
"""

import time
from typing import AsyncGenerator

from openai import AsyncOpenAI, OpenAIError

from .base import BaseLLMAdapter, LLMError, LLMResponse, Message


class OpenAIAdapter(BaseLLMAdapter):
    """Adapter for OpenAI chat models.

    Usage:
        adapter = OpenAIAdapter(api_key="sk-...", model="gpt-4o-mini")
        response = await adapter.complete([Message(role="user", content="Hello!")])
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        client: AsyncOpenAI | None = None,
    ):
        self._client = client or AsyncOpenAI(api_key=api_key)
        self._model = model

    async def complete(
        self,
        messages: list[Message],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> LLMResponse:
        start_time = time.time()

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=self._format_messages(messages),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise LLMError(f"OpenAI chat completion failed: {e}") from e

        latency_ms = (time.time() - start_time) * 1000
        return self._parse_response(response, latency_ms)

    async def stream(
        self,
        messages: list[Message],
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> AsyncGenerator[str, None]:
        """Yield text deltas as they arrive from OpenAI."""
        try:
            stream = await self._client.chat.completions.create(
                model=self._model,
                messages=self._format_messages(messages),
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta.content:
                    yield delta.content
        except OpenAIError as e:
            raise LLMError(f"OpenAI chat stream failed: {e}") from e

    def model_name(self) -> str:
        return self._model

    def provider_name(self) -> str:
        return "openai"

    # ── Private helpers: format conversion ────────────

    def _format_messages(self, messages: list[Message]) -> list[dict]:
        """Message(role="user", content="Hello") → {"role": "user", "content": "Hello"}"""
        return [{"role": msg.role, "content": msg.content} for msg in messages]

    def _parse_response(self, response, latency_ms: float) -> LLMResponse:
        """Convert OpenAI's response to our standardized LLMResponse."""
        choice = response.choices[0]
        usage = response.usage

        return LLMResponse(
            content=choice.message.content or "",
            model=response.model,
            provider="openai",
            usage={
                "input": usage.prompt_tokens,
                "output": usage.completion_tokens,
                "total": usage.total_tokens,
            } if usage else {},
            latency_ms=latency_ms,
            finish_reason=choice.finish_reason or "",
        )
