from apps.api.repositories.document import (
    ChunkCreate,
    DocumentCreate,
    DocumentRepository,
    SQLDocumentRepository,
)
from apps.api.repositories.memory import InMemoryDocumentRepository

__all__ = [
    "ChunkCreate", "DocumentCreate",
    "DocumentRepository",
    "SQLDocumentRepository",
    "InMemoryDocumentRepository",
]
