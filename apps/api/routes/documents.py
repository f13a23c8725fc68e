"""Document routes — create, list, get, update, delete.

Every write re-chunks and re-embeds the content. When basic auth is
configured, all routes here require it.
"""

from fastapi import APIRouter, Depends, Query, Response

from apps.api.dependencies import get_rag_service, require_admin
from apps.api.exceptions import NotFoundException, ValidationException
from apps.api.schemas.document import (
    DocumentCursorPage,
    DocumentPage,
    DocumentRecord,
    DocumentWrite,
)
from apps.api.services.rag_service import RagService

router = APIRouter(
    prefix="/document",
    tags=["documents"],
    dependencies=[Depends(require_admin)],
)


# ── Helper ────────────────────────────────────────────

# Ids are BIGINT in PostgreSQL
MAX_DOCUMENT_ID = 2**63 - 1


def _check_document_id(document_id: int) -> int:
    if not 0 < document_id <= MAX_DOCUMENT_ID:
        raise ValidationException("invalid document id")
    return document_id


# ── Routes ────────────────────────────────────────────

@router.post("", response_model=DocumentRecord, status_code=201)
async def create_document(
    body: DocumentWrite,
    rag: RagService = Depends(get_rag_service),
):
    """Chunk, embed and store a new document.

    Example:
        POST /api/document
        { "content": "Our office is open Monday to Friday..." }
    """
    return await rag.insert_document(body.content)


@router.get("", response_model=None)
async def list_documents(
    page: int | None = Query(default=None, ge=1),
    page_size: int | None = Query(default=None, alias="pageSize"),
    cursor: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    rag: RagService = Depends(get_rag_service),
) -> DocumentPage | DocumentCursorPage:
    """List documents, newest first.

    Two pagination modes:
    - ?page=&pageSize= → {items, page, pageSize, totalItems, totalPages} (default)
    - ?cursor=&limit=  → {items, nextCursor}, used when cursor or limit is given
    """
    if cursor is not None or limit is not None:
        return await rag.list_documents_after(cursor=cursor, limit=limit)
    return await rag.list_documents(page=page or 1, page_size=page_size)


@router.get("/{document_id}", response_model=DocumentRecord)
async def get_document(
    document_id: int,
    rag: RagService = Depends(get_rag_service),
):
    return await rag.get_document(_check_document_id(document_id))


@router.put("/{document_id}", response_model=DocumentRecord)
async def update_document(
    document_id: int,
    body: DocumentWrite,
    rag: RagService = Depends(get_rag_service),
):
    """Replace the content; all chunks and embeddings are regenerated."""
    return await rag.update_document(_check_document_id(document_id), body.content)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: int,
    rag: RagService = Depends(get_rag_service),
):
    """Delete a document and its chunks. A second delete is a 404, not an error."""
    deleted = await rag.delete_document(_check_document_id(document_id))
    if not deleted:
        raise NotFoundException("document", document_id)
    return Response(status_code=204)
