"""Document repository — the persistence boundary for documents and chunks.

`DocumentRepository` is the capability the services depend on.
`SQLDocumentRepository` implements it on PostgreSQL + pgvector;
`InMemoryDocumentRepository` (repositories/memory.py) implements it in
process for development and tests.

Every mutating operation runs in exactly one transaction, opened with
`async with session.begin()`, so any exception rolls the whole thing back:
readers never see a document without its chunks or chunks without their
document.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from apps.api.exceptions import StoreException
from apps.api.models.document import Document, DocumentChunk
from apps.api.schemas.document import (
    DocumentCursorPage,
    DocumentPage,
    DocumentRecord,
    RetrievedChunk,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class ChunkCreate:
    """One chunk to store: its text, position metadata and embedding."""
    chunk: str
    embedding: list[float]
    metadata: dict | None = None


@dataclass(frozen=True)
class DocumentCreate:
    """A document together with its complete chunk set."""
    content: str
    chunks: list[ChunkCreate] = field(default_factory=list)


def clamp_page_size(value: int | None) -> int:
    if value is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(MAX_PAGE_SIZE, value))


def parse_cursor(cursor: str | None) -> int | None:
    """Cursor is the last id seen. Anything unparseable means "from the newest"."""
    if cursor is None or cursor == "":
        return None
    try:
        last_id = int(cursor)
    except ValueError:
        return None
    return last_id if last_id > 0 else None


def total_pages(total_items: int, page_size: int) -> int:
    return math.ceil(total_items / page_size) if total_items else 0


class DocumentRepository(ABC):
    """Storage contract consumed by RagService."""

    @abstractmethod
    async def save_document(self, document: DocumentCreate) -> DocumentRecord:
        """Insert the document and all its chunks atomically."""
        ...

    @abstractmethod
    async def replace_document(
        self, document_id: int, document: DocumentCreate
    ) -> DocumentRecord | None:
        """Replace content and the whole chunk set atomically. None if absent."""
        ...

    @abstractmethod
    async def get_document(self, document_id: int) -> DocumentRecord | None:
        ...

    @abstractmethod
    async def get_relevant_chunks(
        self, query_vector: list[float], top_k: int
    ) -> list[RetrievedChunk]:
        """The min(top_k, corpus size) chunks nearest to query_vector.

        Ordered by ascending cosine distance, ties by ascending chunk id.
        """
        ...

    @abstractmethod
    async def delete_document(self, document_id: int) -> bool:
        """Delete a document and its chunks. False if it did not exist."""
        ...

    @abstractmethod
    async def list_documents(self, page: int = 1, page_size: int | None = None) -> DocumentPage:
        """Newest first (by id), offset pagination."""
        ...

    @abstractmethod
    async def list_documents_after(
        self, cursor: str | None = None, limit: int | None = None
    ) -> DocumentCursorPage:
        """Newest first (by id), keyset pagination on the last id seen."""
        ...


class SQLDocumentRepository(DocumentRepository):
    """DocumentRepository on PostgreSQL with the pgvector extension.

    Usage:
        repo = SQLDocumentRepository(create_session_factory(engine))
        record = await repo.save_document(DocumentCreate(content="...", chunks=[...]))
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ── Writes ────────────────────────────────────────

    async def save_document(self, document: DocumentCreate) -> DocumentRecord:
        try:
            async with self._session_factory() as session, session.begin():
                row = Document(
                    content=document.content,
                    chunks=[self._chunk_row(c) for c in document.chunks],
                )
                session.add(row)
                await session.flush()  # INSERT ... RETURNING id, created_at, updated_at
                record = self._to_record(row, chunk_count=len(document.chunks))
        except SQLAlchemyError as e:
            logger.exception("Error saving document")
            raise StoreException(f"failed to save document: {e}") from e

        logger.info("Saved document %d with %d chunks", record.id, record.chunk_count)
        return record

    async def replace_document(
        self, document_id: int, document: DocumentCreate
    ) -> DocumentRecord | None:
        try:
            async with self._session_factory() as session, session.begin():
                # Lock the row so two concurrent updates can't interleave chunk sets
                row = await session.get(Document, document_id, with_for_update=True)
                if row is None:
                    return None

                await session.execute(
                    delete(DocumentChunk).where(DocumentChunk.document_id == document_id)
                )
                row.content = document.content
                row.updated_at = datetime.now(timezone.utc)
                session.add_all(
                    [self._chunk_row(c, document_id=document_id) for c in document.chunks]
                )
                await session.flush()
                record = self._to_record(row, chunk_count=len(document.chunks))
        except SQLAlchemyError as e:
            logger.exception("Error replacing document %d", document_id)
            raise StoreException(f"failed to replace document {document_id}: {e}") from e

        logger.info("Replaced document %d with %d chunks", record.id, record.chunk_count)
        return record

    async def delete_document(self, document_id: int) -> bool:
        try:
            async with self._session_factory() as session, session.begin():
                # Chunks are deleted via ON DELETE CASCADE
                result = await session.execute(
                    delete(Document).where(Document.id == document_id)
                )
                deleted = result.rowcount > 0
        except SQLAlchemyError as e:
            logger.exception("Error deleting document %d", document_id)
            raise StoreException(f"failed to delete document {document_id}: {e}") from e

        if deleted:
            logger.info("Deleted document %d", document_id)
        return deleted

    # ── Reads ─────────────────────────────────────────

    async def get_document(self, document_id: int) -> DocumentRecord | None:
        stmt = self._document_query().where(Document.id == document_id)
        rows = await self._fetch(stmt, "fetching document")
        return self._decode_document(rows[0]) if rows else None

    async def get_relevant_chunks(
        self, query_vector: list[float], top_k: int
    ) -> list[RetrievedChunk]:
        # pgvector's <=> operator: cosine distance (0 = same direction)
        distance = DocumentChunk.embedding.cosine_distance(query_vector).label("distance")
        stmt = (
            select(
                DocumentChunk.id,
                DocumentChunk.document_id,
                DocumentChunk.chunk,
                DocumentChunk.chunk_metadata.label("metadata"),
                distance,
            )
            .order_by(distance, DocumentChunk.id)
            .limit(top_k)
        )

        rows = await self._fetch(stmt, "fetching relevant chunks")
        return [self._decode(RetrievedChunk, row) for row in rows]

    async def list_documents(self, page: int = 1, page_size: int | None = None) -> DocumentPage:
        page = max(1, page)
        page_size = clamp_page_size(page_size)

        count_rows = await self._fetch(
            select(func.count()).select_from(Document), "counting documents"
        )
        total_items = int(count_rows[0][0])

        stmt = (
            self._document_query()
            .order_by(Document.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        rows = await self._fetch(stmt, "listing documents")

        return DocumentPage(
            items=[self._decode_document(row) for row in rows],
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages(total_items, page_size),
        )

    async def list_documents_after(
        self, cursor: str | None = None, limit: int | None = None
    ) -> DocumentCursorPage:
        limit = clamp_page_size(limit)
        last_id = parse_cursor(cursor)

        stmt = self._document_query()
        if last_id is not None:
            stmt = stmt.where(Document.id < last_id)
        # One extra row tells us whether there is a next page
        stmt = stmt.order_by(Document.id.desc()).limit(limit + 1)

        rows = await self._fetch(stmt, "listing documents")
        has_more = len(rows) > limit
        items = [self._decode_document(row) for row in rows[:limit]]

        return DocumentCursorPage(
            items=items,
            next_cursor=str(items[-1].id) if has_more else None,
        )

    # ── Private helpers ───────────────────────────────

    def _document_query(self):
        """Documents with their chunk count, one row per document."""
        chunk_count = (
            select(func.count(DocumentChunk.id))
            .where(DocumentChunk.document_id == Document.id)
            .correlate(Document)
            .scalar_subquery()
            .label("chunk_count")
        )
        return select(
            Document.id,
            Document.content,
            Document.created_at,
            Document.updated_at,
            chunk_count,
        )

    async def _fetch(self, stmt, action: str) -> list:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.all())
        except SQLAlchemyError as e:
            logger.exception("Database error %s", action)
            raise StoreException(f"database error {action}: {e}") from e

    def _chunk_row(self, chunk: ChunkCreate, document_id: int | None = None) -> DocumentChunk:
        row = DocumentChunk(
            chunk=chunk.chunk,
            chunk_metadata=chunk.metadata,
            embedding=chunk.embedding,
        )
        if document_id is not None:
            row.document_id = document_id
        return row

    def _to_record(self, row: Document, chunk_count: int) -> DocumentRecord:
        return DocumentRecord(
            id=row.id,
            content=row.content,
            created_at=row.created_at,
            updated_at=row.updated_at,
            chunk_count=chunk_count,
        )

    def _decode_document(self, row) -> DocumentRecord:
        return self._decode(DocumentRecord, row)

    def _decode(self, schema, row):
        """Typed row decoding; a row that doesn't fit the schema is a store error."""
        try:
            return schema.model_validate(dict(row._mapping))
        except ValidationError as e:
            logger.error("Unexpected %s row shape: %s", schema.__name__, e)
            raise StoreException(f"unexpected {schema.__name__} row shape") from e
