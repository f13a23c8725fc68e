"""Search route — semantic search over stored chunks."""

from fastapi import APIRouter, Depends, Query

from apps.api.dependencies import get_rag_service
from apps.api.exceptions import ValidationException
from apps.api.schemas.document import RetrievedChunk
from apps.api.services.rag_service import RagService

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/document", response_model=list[RetrievedChunk])
async def search_documents(
    q: str | None = Query(default=None, description="Text to search for"),
    top_k: int | None = Query(default=None, alias="topK", ge=1, le=100),
    rag: RagService = Depends(get_rag_service),
):
    """Embed `q` and return the nearest chunks, most similar first.

    Example:
        GET /api/search/document?q=opening%20hours&topK=3
    """
    if q is None or not q.strip():
        raise ValidationException("query parameter 'q' is required")

    return await rag.get_relevant_chunks(q, top_k)
