"""Base embedding adapter interface.

All embedding providers implement this interface, so the document pipeline
never depends on a concrete provider SDK.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class EmbeddingError(Exception):
    """The embedding provider failed or returned an unusable response."""


@dataclass
class EmbeddingResult:
    """Result from embedding a text."""
    embedding: list[float]  # The vector representation
    tokens_used: int        # Number of tokens processed


class BaseEmbeddingAdapter(ABC):
    """Abstract base class for embedding adapters."""

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Embed a single text into a vector.

        Raises:
            EmbeddingError: If the provider call fails
        """
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed multiple texts, returning results in input order.

        Raises:
            EmbeddingError: If the provider call fails
        """
        ...

    @abstractmethod
    def dimensions(self) -> int:
        """Length of every vector this adapter produces (e.g. 1536)."""
        ...
