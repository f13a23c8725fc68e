"""OpenAI embedding adapter."""

import logging

from openai import AsyncOpenAI, OpenAIError

from .base import BaseEmbeddingAdapter, EmbeddingError, EmbeddingResult

logger = logging.getLogger(__name__)


class OpenAIEmbeddingAdapter(BaseEmbeddingAdapter):
    """OpenAI embedding adapter (text-embedding-3-small by default)."""

    # Model dimensions mapping
    _MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    # OpenAI accepts at most this many inputs per request
    MAX_BATCH_SIZE = 2048

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        client: AsyncOpenAI | None = None,
    ):
        self._model = model
        self._client = client or AsyncOpenAI(api_key=api_key)

        if model not in self._MODEL_DIMENSIONS:
            logger.warning(
                "Unknown embedding model %s, assuming 1536 dimensions. Known models: %s",
                model,
                list(self._MODEL_DIMENSIONS.keys()),
            )

    async def embed(self, text: str) -> EmbeddingResult:
        results = await self._create([text])
        return results[0]

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed texts, splitting into sub-batches above the provider limit.

        Sub-batches are sent one after another; results keep input order.
        """
        if not texts:
            return []

        results: list[EmbeddingResult] = []
        for offset in range(0, len(texts), self.MAX_BATCH_SIZE):
            batch = texts[offset:offset + self.MAX_BATCH_SIZE]
            results.extend(await self._create(batch))

        return results

    def dimensions(self) -> int:
        return self._MODEL_DIMENSIONS.get(self._model, 1536)

    async def _create(self, texts: list[str]) -> list[EmbeddingResult]:
        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=texts,
            )
        except OpenAIError as e:
            raise EmbeddingError(f"OpenAI embedding request failed: {e}") from e

        if len(response.data) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embeddings, got {len(response.data)}"
            )

        # Responses carry an index per input; don't rely on list order
        ordered = sorted(response.data, key=lambda d: d.index)
        tokens_per_text = response.usage.total_tokens // len(texts)

        return [
            EmbeddingResult(
                embedding=list(data.embedding),
                tokens_used=tokens_per_text,  # Approximate distribution
            )
            for data in ordered
        ]
