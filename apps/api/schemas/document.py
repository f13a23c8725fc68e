"""Document schemas for request validation and response serialization.

The read models double as the repository's row decoders: every store
implementation returns these, validated, so a shape mismatch fails at the
repository boundary instead of deep inside a route.
"""

from pydantic import BaseModel, Field

from apps.api.schemas.base import BaseResponse, BaseSchema


# ── Request Schemas ────────────────────────────────────

class DocumentWrite(BaseModel):
    """Body of POST /document and PUT /document/{id}.

    Empty content is rejected here; a document always has at least one chunk.
    """
    content: str = Field(min_length=1)


# ── Response Schemas ───────────────────────────────────

class DocumentRecord(BaseResponse):
    """A stored document."""
    content: str
    chunk_count: int = 0


class RetrievedChunk(BaseSchema):
    """A chunk returned by similarity search, nearest first."""
    id: int
    document_id: int
    chunk: str
    metadata: dict | None = None
    distance: float     # Cosine distance to the query (smaller = more similar)


class DocumentPage(BaseSchema):
    """Offset pagination: ?page=&pageSize= (what the admin UI uses)."""
    items: list[DocumentRecord]
    page: int
    page_size: int
    total_items: int
    total_pages: int


class DocumentCursorPage(BaseSchema):
    """Cursor pagination: ?cursor=&limit=, keyed on the last id seen."""
    items: list[DocumentRecord]
    next_cursor: str | None = None
