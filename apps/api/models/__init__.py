from apps.api.models.base import BaseModel
from apps.api.models.document import Document, DocumentChunk, EMBEDDING_DIMENSIONS

__all__ = [
    "BaseModel",
    "Document", "DocumentChunk", "EMBEDDING_DIMENSIONS",
]
