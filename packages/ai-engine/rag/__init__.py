"""RAG (Retrieval-Augmented Generation) building blocks."""

from .chunker import Chunk, ChunkerConfigError, TextChunker

__all__ = [
    "TextChunker",
    "Chunk",
    "ChunkerConfigError",
]
