"""Service container — builds every long-lived object from one Settings.

Created once in the app lifespan (or handed to create_app() directly in
tests) and stored on app.state; routes reach it through dependencies.py.
"""

import logging
from dataclasses import dataclass

from adapters import AdapterFactory, BaseLLMAdapter
from embeddings import BaseEmbeddingAdapter, EmbeddingFactory
from rag import TextChunker
from sqlalchemy.ext.asyncio import AsyncEngine

from apps.api.config import Settings
from apps.api.database import create_engine, create_session_factory
from apps.api.models.document import EMBEDDING_DIMENSIONS
from apps.api.repositories import (
    DocumentRepository,
    InMemoryDocumentRepository,
    SQLDocumentRepository,
)
from apps.api.services.chat_service import ChatService
from apps.api.services.rag_service import RagService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    repository: DocumentRepository
    rag_service: RagService
    chat_service: ChatService
    engine: AsyncEngine | None = None

    async def close(self) -> None:
        """Release the connection pool, if there is one."""
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database engine disposed")


def build_container(
    settings: Settings,
    repository: DocumentRepository | None = None,
    embedder: BaseEmbeddingAdapter | None = None,
    llm_adapter: BaseLLMAdapter | None = None,
) -> ServiceContainer:
    """Wire repository, adapters and services. Any piece can be injected."""
    engine = None
    if repository is None:
        if settings.database_url:
            engine = create_engine(settings)
            repository = SQLDocumentRepository(create_session_factory(engine))
            logger.info("Using PostgreSQL document store")
        else:
            repository = InMemoryDocumentRepository()
            logger.warning("No database_url configured, documents are kept in memory")

    if embedder is None:
        embedder = EmbeddingFactory.create(
            provider=settings.embedding_provider,
            api_key=settings.openai_api_key,
            model=settings.embedding_model,
        )
    if isinstance(repository, SQLDocumentRepository) and embedder.dimensions() != EMBEDDING_DIMENSIONS:
        raise ValueError(
            f"Embedding model {settings.embedding_model} produces {embedder.dimensions()} "
            f"dimensions, the documents schema stores {EMBEDDING_DIMENSIONS}"
        )

    if llm_adapter is None:
        llm_adapter = AdapterFactory.create(
            provider=settings.llm_provider,
            api_key=settings.openai_api_key,
            model=settings.chat_model,
        )

    rag_service = RagService(
        repository=repository,
        embedder=embedder,
        chunker=TextChunker(chunk_size=settings.chunk_size, chunk_overlap=settings.chunk_overlap),
        default_top_k=settings.search_top_k,
    )
    chat_service = ChatService(
        rag_service=rag_service,
        llm_adapter=llm_adapter,
        top_k=settings.chat_top_k,
        temperature=settings.chat_temperature,
        max_tokens=settings.chat_max_tokens,
    )

    return ServiceContainer(
        settings=settings,
        repository=repository,
        rag_service=rag_service,
        chat_service=chat_service,
        engine=engine,
    )
