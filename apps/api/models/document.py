"""Document models — a text document and the embedded chunks cut from it."""

from pgvector.sqlalchemy import Vector
from sqlalchemy import BigInteger, ForeignKey, Index, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from apps.api.models.base import BaseModel

# 1536 dimensions for OpenAI text-embedding-3-small. Every chunk in the
# corpus must use the same length or cosine ranking is meaningless.
EMBEDDING_DIMENSIONS = 1536


class Document(BaseModel):
    __tablename__ = "documents"

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Chunks go away with the document (FK cascade in the DB, delete-orphan in the ORM)
    chunks: Mapped[list["DocumentChunk"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DocumentChunk.id",
    )


class DocumentChunk(BaseModel):
    """A bounded substring of a document plus its embedding."""
    __tablename__ = "document_chunks"

    document_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk: Mapped[str] = mapped_column(Text, nullable=False)
    chunk_metadata: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)  # chunk_index, start
    embedding: Mapped[list[float]] = mapped_column(Vector(EMBEDDING_DIMENSIONS), nullable=False)

    document: Mapped["Document"] = relationship(back_populates="chunks")

    __table_args__ = (
        # HNSW index for approximate nearest neighbour search on cosine distance
        Index(
            "ix_document_chunks_embedding_hnsw",
            "embedding",
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )
