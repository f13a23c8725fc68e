"""Text chunking for RAG — split documents into overlapping windows.

Why chunk?
- Embeddings work best on focused text (not entire documents)
- Retrieval is more precise with smaller chunks
- LLM context limits require smaller pieces

Strategy:
- Fixed-size character windows, each starting `chunk_size - chunk_overlap`
  characters after the previous one
- Stop as soon as a window reaches the end of the text
- The overlap keeps sentences that straddle a boundary searchable from both sides
"""

from dataclasses import dataclass


class ChunkerConfigError(ValueError):
    """Raised when chunk_size / chunk_overlap cannot produce progress."""


@dataclass(frozen=True)
class Chunk:
    """A chunk of text with its position in the source document."""
    content: str       # The text content
    chunk_index: int   # Position in the source document (0, 1, 2, ...)
    start: int         # Character offset of the first character

    @property
    def metadata(self) -> dict:
        return {"chunk_index": self.chunk_index, "start": self.start}


class TextChunker:
    """Splits documents into overlapping chunks suitable for embedding.

    Usage:
        chunker = TextChunker(chunk_size=10, chunk_overlap=3)
        chunker.split("a" * 22)   # lengths [10, 10, 8], starts 0, 7, 14
    """

    def __init__(
        self,
        chunk_size: int = 1000,      # Max characters per chunk
        chunk_overlap: int = 200,    # Characters shared with the previous chunk
    ):
        if chunk_size <= 0:
            raise ChunkerConfigError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ChunkerConfigError(
                f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap} "
                f"with chunk_size {chunk_size}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @property
    def step(self) -> int:
        """Distance between the starts of two consecutive chunks."""
        return self.chunk_size - self.chunk_overlap

    def chunk(self, text: str) -> list[Chunk]:
        """Split text into positioned chunks.

        Args:
            text: The text to chunk

        Returns:
            List of Chunk objects in document order (empty for empty text)
        """
        if not text:
            return []

        chunks = []
        start = 0
        chunk_index = 0

        while True:
            end = start + self.chunk_size
            chunks.append(Chunk(content=text[start:end], chunk_index=chunk_index, start=start))
            if end >= len(text):
                break
            start += self.step
            chunk_index += 1

        return chunks

    def split(self, text: str) -> list[str]:
        """Split text into chunk strings (content only)."""
        return [c.content for c in self.chunk(text)]

    def expected_count(self, length: int) -> int:
        """Number of chunks `split` produces for a text of the given length."""
        if length <= 0:
            return 0
        # ceil((length - overlap) / step), but never less than one chunk
        return max(1, -(-(length - self.chunk_overlap) // self.step))

    def stitch(self, chunks: list[str]) -> str:
        """Rebuild the original text by dropping each chunk's overlap prefix."""
        if not chunks:
            return ""
        return chunks[0] + "".join(c[self.chunk_overlap:] for c in chunks[1:])
