"""Pytest fixtures for API and service tests.

No real database, embedding or LLM calls: the in-memory repository and the
fake adapters below stand in for them.
"""
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from adapters import BaseLLMAdapter, LLMError, LLMResponse, Message
from embeddings import BaseEmbeddingAdapter, EmbeddingError, EmbeddingResult
from rag import TextChunker

from apps.api.config import Settings
from apps.api.container import ServiceContainer, build_container
from apps.api.main import create_app
from apps.api.repositories import InMemoryDocumentRepository
from apps.api.services.rag_service import RagService

FAKE_DIMENSIONS = 8


def fake_vector(text: str) -> list[float]:
    """Deterministic character histogram; identical texts → distance 0."""
    vector = [0.0] * FAKE_DIMENSIONS
    for ch in text.lower():
        vector[ord(ch) % FAKE_DIMENSIONS] += 1.0
    vector[0] += 0.01  # never the zero vector
    return vector


class FakeEmbeddingAdapter(BaseEmbeddingAdapter):
    """Embeds with fake_vector and records every call."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[list[str]] = []

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append([text])
        if self.fail:
            raise EmbeddingError("provider down")
        return EmbeddingResult(embedding=fake_vector(text), tokens_used=len(text))

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        self.calls.append(list(texts))
        if self.fail:
            raise EmbeddingError("provider down")
        return [EmbeddingResult(embedding=fake_vector(t), tokens_used=len(t)) for t in texts]

    def dimensions(self) -> int:
        return FAKE_DIMENSIONS


class FakeLLMAdapter(BaseLLMAdapter):
    """Answers with a canned reply and remembers what it was sent."""

    def __init__(self, reply: str = "Hello from the docs", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.received: list[list[Message]] = []

    async def complete(self, messages, temperature=0.7, max_tokens=1024) -> LLMResponse:
        self.received.append(list(messages))
        if self.fail:
            raise LLMError("provider down")
        return LLMResponse(content=self.reply, model="fake-model", provider="fake", finish_reason="stop")

    async def stream(self, messages, temperature=0.7, max_tokens=1024) -> AsyncGenerator[str, None]:
        self.received.append(list(messages))
        if self.fail:
            raise LLMError("provider down")
        for word in self.reply.split(" "):
            yield word + " "

    def model_name(self) -> str:
        return "fake-model"

    def provider_name(self) -> str:
        return "fake"


@pytest.fixture
def settings() -> Settings:
    """Small chunks so short test documents still produce several of them."""
    return Settings(
        openai_api_key="test-key",
        database_url=None,
        chunk_size=10,
        chunk_overlap=3,
        search_top_k=3,
        chat_top_k=2,
    )


@pytest.fixture
def embedder() -> FakeEmbeddingAdapter:
    return FakeEmbeddingAdapter()


@pytest.fixture
def llm() -> FakeLLMAdapter:
    return FakeLLMAdapter()


@pytest.fixture
def repository() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def chunker() -> TextChunker:
    return TextChunker(chunk_size=10, chunk_overlap=3)


@pytest.fixture
def rag_service(repository, embedder, chunker) -> RagService:
    return RagService(repository=repository, embedder=embedder, chunker=chunker, default_top_k=3)


@pytest.fixture
def container(settings, repository, embedder, llm) -> ServiceContainer:
    return build_container(settings, repository=repository, embedder=embedder, llm_adapter=llm)


@pytest.fixture
def test_app(container: ServiceContainer) -> FastAPI:
    """Full app wired to in-memory storage and fake providers."""
    return create_app(container=container)


@pytest.fixture
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app)
