"""In-memory DocumentRepository — used when no database_url is configured,
and as the store double in tests.

Writes build the complete new state first and only then swap it in, so a
failure half-way leaves nothing behind, same guarantee the SQL store gets
from its transaction.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np

from apps.api.exceptions import StoreException
from apps.api.repositories.document import (
    ChunkCreate,
    DocumentCreate,
    DocumentRepository,
    clamp_page_size,
    parse_cursor,
    total_pages,
)
from apps.api.schemas.document import (
    DocumentCursorPage,
    DocumentPage,
    DocumentRecord,
    RetrievedChunk,
)

logger = logging.getLogger(__name__)


@dataclass
class _StoredChunk:
    id: int
    document_id: int
    chunk: str
    metadata: dict | None
    embedding: np.ndarray


@dataclass
class _StoredDocument:
    id: int
    content: str
    created_at: datetime
    updated_at: datetime


class InMemoryDocumentRepository(DocumentRepository):
    """Dict-backed store with brute-force cosine search."""

    def __init__(self):
        self._documents: dict[int, _StoredDocument] = {}
        self._chunks: dict[int, _StoredChunk] = {}
        self._next_document_id = 1
        self._next_chunk_id = 1
        self._dimensions: int | None = None
        self._lock = asyncio.Lock()

    async def save_document(self, document: DocumentCreate) -> DocumentRecord:
        async with self._lock:
            now = datetime.now(timezone.utc)
            document_id = self._next_document_id
            chunks = self._build_chunks(document_id, document.chunks)

            stored = _StoredDocument(id=document_id, content=document.content, created_at=now, updated_at=now)
            self._documents[document_id] = stored
            self._commit_chunks(chunks)
            self._next_document_id += 1

        logger.info("Saved document %d with %d chunks", document_id, len(chunks))
        return self._to_record(stored)

    async def replace_document(
        self, document_id: int, document: DocumentCreate
    ) -> DocumentRecord | None:
        async with self._lock:
            stored = self._documents.get(document_id)
            if stored is None:
                return None

            chunks = self._build_chunks(document_id, document.chunks)

            self._drop_chunks(document_id)
            stored.content = document.content
            stored.updated_at = datetime.now(timezone.utc)
            self._commit_chunks(chunks)

        logger.info("Replaced document %d with %d chunks", document_id, len(chunks))
        return self._to_record(stored)

    async def get_document(self, document_id: int) -> DocumentRecord | None:
        stored = self._documents.get(document_id)
        return self._to_record(stored) if stored else None

    async def get_relevant_chunks(
        self, query_vector: list[float], top_k: int
    ) -> list[RetrievedChunk]:
        if not self._chunks or top_k <= 0:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        if self._dimensions is not None and query.shape[0] != self._dimensions:
            raise StoreException(
                f"query vector has {query.shape[0]} dimensions, corpus has {self._dimensions}"
            )

        # Chunk ids ascend with insertion, so a stable sort on distance breaks ties by id
        ordered = sorted(self._chunks.values(), key=lambda c: c.id)
        matrix = np.vstack([c.embedding for c in ordered])
        distances = _cosine_distances(matrix, query)
        nearest = np.argsort(distances, kind="stable")[:top_k]

        return [
            RetrievedChunk(
                id=ordered[i].id,
                document_id=ordered[i].document_id,
                chunk=ordered[i].chunk,
                metadata=ordered[i].metadata,
                distance=float(distances[i]),
            )
            for i in nearest
        ]

    async def delete_document(self, document_id: int) -> bool:
        async with self._lock:
            if self._documents.pop(document_id, None) is None:
                return False
            self._drop_chunks(document_id)

        logger.info("Deleted document %d", document_id)
        return True

    async def list_documents(self, page: int = 1, page_size: int | None = None) -> DocumentPage:
        page = max(1, page)
        page_size = clamp_page_size(page_size)
        newest_first = sorted(self._documents.values(), key=lambda d: d.id, reverse=True)

        start = (page - 1) * page_size
        return DocumentPage(
            items=[self._to_record(d) for d in newest_first[start:start + page_size]],
            page=page,
            page_size=page_size,
            total_items=len(newest_first),
            total_pages=total_pages(len(newest_first), page_size),
        )

    async def list_documents_after(
        self, cursor: str | None = None, limit: int | None = None
    ) -> DocumentCursorPage:
        limit = clamp_page_size(limit)
        last_id = parse_cursor(cursor)

        newest_first = sorted(self._documents.values(), key=lambda d: d.id, reverse=True)
        if last_id is not None:
            newest_first = [d for d in newest_first if d.id < last_id]

        window = newest_first[:limit + 1]
        has_more = len(window) > limit
        items = [self._to_record(d) for d in window[:limit]]

        return DocumentCursorPage(
            items=items,
            next_cursor=str(items[-1].id) if has_more else None,
        )

    # ── Private helpers ───────────────────────────────

    def _build_chunks(self, document_id: int, chunks: list[ChunkCreate]) -> list[_StoredChunk]:
        """Validate and materialize chunks without touching the store.

        The document's own chunks don't count towards the corpus dimension,
        so replacing the only document may switch to a new vector length.
        """
        built = []
        others = any(c.document_id != document_id for c in self._chunks.values())
        dimensions = self._dimensions if others else None
        for offset, chunk in enumerate(chunks):
            vector = np.asarray(chunk.embedding, dtype=np.float64)
            if vector.ndim != 1 or vector.shape[0] == 0:
                raise StoreException("embedding must be a non-empty vector")
            if dimensions is None:
                dimensions = vector.shape[0]
            elif vector.shape[0] != dimensions:
                raise StoreException(
                    f"embedding has {vector.shape[0]} dimensions, expected {dimensions}"
                )
            built.append(
                _StoredChunk(
                    id=self._next_chunk_id + offset,
                    document_id=document_id,
                    chunk=chunk.chunk,
                    metadata=dict(chunk.metadata) if chunk.metadata is not None else None,
                    embedding=vector,
                )
            )
        return built

    def _commit_chunks(self, chunks: list[_StoredChunk]) -> None:
        for chunk in chunks:
            self._chunks[chunk.id] = chunk
            if self._dimensions is None:
                self._dimensions = chunk.embedding.shape[0]
        self._next_chunk_id += len(chunks)

    def _drop_chunks(self, document_id: int) -> None:
        for chunk_id in [c.id for c in self._chunks.values() if c.document_id == document_id]:
            del self._chunks[chunk_id]
        if not self._chunks:
            self._dimensions = None

    def _chunk_count(self, document_id: int) -> int:
        return sum(1 for c in self._chunks.values() if c.document_id == document_id)

    def _to_record(self, stored: _StoredDocument) -> DocumentRecord:
        return DocumentRecord(
            id=stored.id,
            content=stored.content,
            created_at=stored.created_at,
            updated_at=stored.updated_at,
            chunk_count=self._chunk_count(stored.id),
        )


def _cosine_distances(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """1 - cosine similarity of each row against the query. Zero vectors get distance 1."""
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    similarity = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)
    return 1.0 - similarity
