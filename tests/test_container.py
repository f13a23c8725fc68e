"""Container wiring — storage selection and startup checks."""
from unittest.mock import AsyncMock

import pytest

from adapters import AdapterFactory
from embeddings import EmbeddingFactory

from apps.api.container import ServiceContainer, build_container
from apps.api.repositories import InMemoryDocumentRepository, SQLDocumentRepository

from conftest import FakeEmbeddingAdapter, FakeLLMAdapter


def test_in_memory_store_without_database_url(settings, embedder, llm):
    container = build_container(settings, embedder=embedder, llm_adapter=llm)

    assert isinstance(container.repository, InMemoryDocumentRepository)
    assert container.engine is None
    assert container.rag_service.chunker.chunk_size == settings.chunk_size
    assert container.rag_service.default_top_k == settings.search_top_k
    assert container.chat_service.top_k == settings.chat_top_k


def test_sql_store_with_database_url(settings, llm):
    embedder = FakeEmbeddingAdapter()
    embedder.dimensions = lambda: 1536
    with_db = settings.model_copy(update={"database_url": "postgresql+asyncpg://u:p@localhost/docs"})

    container = build_container(with_db, embedder=embedder, llm_adapter=llm)

    assert isinstance(container.repository, SQLDocumentRepository)
    assert container.engine is not None


def test_sql_store_rejects_mismatched_embedding_dimensions(settings, embedder, llm):
    with_db = settings.model_copy(update={"database_url": "postgresql+asyncpg://u:p@localhost/docs"})

    with pytest.raises(ValueError, match="dimensions"):
        build_container(with_db, embedder=embedder, llm_adapter=llm)


def test_real_adapters_are_built_from_settings(settings):
    container = build_container(settings)

    assert container.rag_service.embedder.dimensions() == 1536
    assert container.chat_service.llm_adapter.model_name() == settings.chat_model


@pytest.mark.asyncio
async def test_close_disposes_engine(settings):
    engine = AsyncMock()
    container = ServiceContainer(
        settings=settings,
        repository=InMemoryDocumentRepository(),
        rag_service=None,
        chat_service=None,
        engine=engine,
    )

    await container.close()

    engine.dispose.assert_awaited_once()


class _RegisteredEmbedder(FakeEmbeddingAdapter):
    def __init__(self, api_key: str, model: str):
        super().__init__()
        self.api_key = api_key
        self.model = model


class _RegisteredLLM(FakeLLMAdapter):
    def __init__(self, api_key: str, model: str):
        super().__init__()
        self.model = model


@pytest.fixture
def isolated_registries(monkeypatch):
    """Registrations made by a test are undone afterwards."""
    for factory in (EmbeddingFactory, AdapterFactory):
        monkeypatch.setattr(factory, "_registry", dict(factory._registry))
        monkeypatch.setattr(factory, "_default_models", dict(factory._default_models))


def test_registered_providers_are_built_from_settings(settings, isolated_registries):
    EmbeddingFactory.register("Local", _RegisteredEmbedder, default_model="bge-small")
    AdapterFactory.register("local", _RegisteredLLM)
    local = settings.model_copy(
        update={"embedding_provider": "local", "embedding_model": "", "llm_provider": "LOCAL"}
    )

    container = build_container(local)

    embedder = container.rag_service.embedder
    assert isinstance(embedder, _RegisteredEmbedder)
    assert embedder.model == "bge-small"
    assert embedder.api_key == settings.openai_api_key
    assert isinstance(container.chat_service.llm_adapter, _RegisteredLLM)
    assert container.chat_service.llm_adapter.model == settings.chat_model
    assert EmbeddingFactory.available_providers() == ["local", "openai"]
    assert AdapterFactory.available_providers() == ["local", "openai"]


def test_unknown_provider_fails_with_available_list(settings):
    with pytest.raises(ValueError, match="Available providers: openai"):
        build_container(settings.model_copy(update={"llm_provider": "nope"}))


@pytest.mark.parametrize("factory", [EmbeddingFactory, AdapterFactory])
def test_register_rejects_non_adapters(factory, isolated_registries):
    with pytest.raises(TypeError):
        factory.register("bad", dict)
    assert "bad" not in factory.available_providers()
