"""RAG service — chunk → embed → persist on write, embed → retrieve on read.

This is the glue layer between the chunker, the embedding adapter and the
document repository:

    Route → RagService → TextChunker
                ↓
         EmbeddingAdapter (one batched call per write, one call per query)
                ↓
         DocumentRepository (one transaction per write)

Nothing is cached; every write and every query re-embeds.
"""

import logging

from embeddings import BaseEmbeddingAdapter, EmbeddingError, EmbeddingResult
from rag import TextChunker

from apps.api.exceptions import NotFoundException, UpstreamException
from apps.api.repositories.document import ChunkCreate, DocumentCreate, DocumentRepository
from apps.api.schemas.document import (
    DocumentCursorPage,
    DocumentPage,
    DocumentRecord,
    RetrievedChunk,
)

logger = logging.getLogger(__name__)


class RagService:
    """Owns the document write pipeline and similarity retrieval."""

    def __init__(
        self,
        repository: DocumentRepository,
        embedder: BaseEmbeddingAdapter,
        chunker: TextChunker,
        default_top_k: int = 5,
    ):
        self.repository = repository
        self.embedder = embedder
        self.chunker = chunker
        self.default_top_k = default_top_k

    # ── Writes ────────────────────────────────────────

    async def insert_document(self, content: str) -> DocumentRecord:
        """Chunk, embed and store a new document. All or nothing."""
        document = await self._prepare(content)
        return await self.repository.save_document(document)

    async def update_document(self, document_id: int, content: str) -> DocumentRecord:
        """Replace a document's content and regenerate its whole chunk set.

        Raises:
            NotFoundException: If the document doesn't exist
        """
        # Fail before paying for embeddings when the id is clearly wrong
        if await self.repository.get_document(document_id) is None:
            raise NotFoundException("document", document_id)

        document = await self._prepare(content)
        record = await self.repository.replace_document(document_id, document)
        if record is None:
            # Deleted between the check and the write
            raise NotFoundException("document", document_id)
        return record

    async def delete_document(self, document_id: int) -> bool:
        return await self.repository.delete_document(document_id)

    # ── Reads ─────────────────────────────────────────

    async def get_document(self, document_id: int) -> DocumentRecord:
        record = await self.repository.get_document(document_id)
        if record is None:
            raise NotFoundException("document", document_id)
        return record

    async def list_documents(self, page: int = 1, page_size: int | None = None) -> DocumentPage:
        return await self.repository.list_documents(page=page, page_size=page_size)

    async def list_documents_after(
        self, cursor: str | None = None, limit: int | None = None
    ) -> DocumentCursorPage:
        return await self.repository.list_documents_after(cursor=cursor, limit=limit)

    async def get_relevant_chunks(
        self, query: str, top_k: int | None = None
    ) -> list[RetrievedChunk]:
        """Embed the query and return the nearest chunks, most similar first."""
        top_k = top_k or self.default_top_k

        try:
            result = await self.embedder.embed(query)
        except EmbeddingError as e:
            raise UpstreamException(f"embedding the query failed: {e}") from e
        self._check_dimensions([result])

        chunks = await self.repository.get_relevant_chunks(result.embedding, top_k)

        logger.info(
            "Retrieved %d chunks for query '%s...' (top_k=%d)",
            len(chunks),
            query[:50],
            top_k,
        )
        return chunks

    # ── Private helpers ───────────────────────────────

    async def _prepare(self, content: str) -> DocumentCreate:
        """Chunk and embed content into a write command for the repository."""
        chunks = self.chunker.chunk(content)
        if not chunks:
            logger.warning("Empty content, storing document without chunks")
            return DocumentCreate(content=content, chunks=[])

        try:
            results = await self.embedder.embed_batch([c.content for c in chunks])
        except EmbeddingError as e:
            raise UpstreamException(f"embedding {len(chunks)} chunks failed: {e}") from e

        if len(results) != len(chunks):
            raise UpstreamException(
                f"embedding provider returned {len(results)} vectors for {len(chunks)} chunks"
            )
        self._check_dimensions(results)

        logger.info("Embedded %d chunks", len(chunks))
        return DocumentCreate(
            content=content,
            chunks=[
                ChunkCreate(chunk=c.content, embedding=r.embedding, metadata=c.metadata)
                for c, r in zip(chunks, results)
            ],
        )

    def _check_dimensions(self, results: list[EmbeddingResult]) -> None:
        expected = self.embedder.dimensions()
        for result in results:
            if len(result.embedding) != expected:
                raise UpstreamException(
                    f"embedding has {len(result.embedding)} dimensions, expected {expected}"
                )
