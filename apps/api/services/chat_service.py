"""Chat service — grounds a conversation in stored documents and forwards it.

    Route → ChatService → RagService (context for the latest user message)
                ↓
           LLM adapter (complete or stream)

The conversation itself is not persisted; the client sends the full history
with every request.
"""

import logging
from typing import AsyncGenerator

from adapters import BaseLLMAdapter, LLMError, LLMResponse, Message

from apps.api.exceptions import UpstreamException
from apps.api.schemas.document import RetrievedChunk
from apps.api.services.rag_service import RagService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant answering questions about the documents "
    "in this knowledge base. Use the context below when it is relevant. "
    "If the context does not contain the answer, say so instead of guessing."
)


class ChatService:
    """Retrieves context and relays the conversation to the LLM adapter."""

    def __init__(
        self,
        rag_service: RagService,
        llm_adapter: BaseLLMAdapter,
        top_k: int = 5,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ):
        self.rag_service = rag_service
        self.llm_adapter = llm_adapter
        self.top_k = top_k
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, messages: list[Message]) -> LLMResponse:
        """Answer the conversation in one piece."""
        augmented = await self.build_messages(messages)
        try:
            return await self.llm_adapter.complete(
                augmented, temperature=self.temperature, max_tokens=self.max_tokens
            )
        except LLMError as e:
            raise UpstreamException(f"chat completion failed: {e}") from e

    async def stream(self, messages: list[Message]) -> AsyncGenerator[str, None]:
        """Start streaming the answer.

        Retrieval and the first token are awaited here, so a failing provider
        raises UpstreamException before the HTTP response has started.
        Failures after the first token end the stream early and are logged.
        """
        augmented = await self.build_messages(messages)
        tokens = self.llm_adapter.stream(
            augmented, temperature=self.temperature, max_tokens=self.max_tokens
        )

        try:
            first = await anext(tokens)
        except StopAsyncIteration:
            first = None
        except LLMError as e:
            raise UpstreamException(f"chat stream failed: {e}") from e

        return self._relay(first, tokens)

    async def build_messages(self, messages: list[Message]) -> list[Message]:
        """Prepend a system message carrying the context for the latest user turn."""
        query = _latest_user_text(messages)
        chunks = await self.rag_service.get_relevant_chunks(query, self.top_k) if query else []

        logger.info("Chat request: %d messages, %d context chunks", len(messages), len(chunks))
        return [Message(role="system", content=_system_prompt(chunks)), *messages]

    async def _relay(
        self, first: str | None, tokens: AsyncGenerator[str, None]
    ) -> AsyncGenerator[str, None]:
        # Closing tokens releases the provider's HTTP stream, also on client disconnect
        try:
            if first is None:
                return
            yield first
            async for token in tokens:
                yield token
        except LLMError as e:
            logger.error("Chat stream interrupted: %s", e)
        finally:
            await tokens.aclose()


def _latest_user_text(messages: list[Message]) -> str:
    for message in reversed(messages):
        if message.role == "user":
            return message.content.strip()
    return ""


def _system_prompt(chunks: list[RetrievedChunk]) -> str:
    if not chunks:
        return SYSTEM_PROMPT + "\n\nContext: (no relevant documents found)"

    context = "\n\n".join(
        f"[{i}] (document {c.document_id})\n{c.chunk}" for i, c in enumerate(chunks, start=1)
    )
    return f"{SYSTEM_PROMPT}\n\nContext:\n{context}"
