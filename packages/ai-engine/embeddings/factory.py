"""Embedding factory — pick the embedding adapter named in settings.

`EMBEDDING_PROVIDER` selects an entry of the registry below. Extra
providers are added with `register()` before the service container is
built; nothing else in the API imports a concrete adapter.

Usage:
    EmbeddingFactory.register("local", LocalEmbeddingAdapter, default_model="bge-small")
    embedder = EmbeddingFactory.create("local", api_key="")
"""

import logging

from .base import BaseEmbeddingAdapter
from .openai_adapter import OpenAIEmbeddingAdapter

logger = logging.getLogger(__name__)


class EmbeddingFactory:
    """Registry of embedding adapters keyed by lower-case provider name."""

    _registry: dict[str, type[BaseEmbeddingAdapter]] = {
        "openai": OpenAIEmbeddingAdapter,
    }

    _default_models: dict[str, str] = {
        "openai": "text-embedding-3-small",
    }

    @classmethod
    def create(
        cls,
        provider: str,
        api_key: str,
        model: str | None = None,
    ) -> BaseEmbeddingAdapter:
        """Instantiate the adapter registered as `provider`.

        The adapter class is called as `adapter_class(api_key=..., model=...)`;
        `model` falls back to the provider's registered default.

        Raises:
            ValueError: If no adapter is registered under that name
        """
        key = _normalize(provider)
        adapter_class = cls._registry.get(key)
        if adapter_class is None:
            raise ValueError(
                f"Unknown embedding provider: '{key}'. "
                f"Available providers: {', '.join(cls.available_providers())}"
            )

        model = model or cls._default_models.get(key, "")
        logger.info("Creating %s embedding adapter (model=%s)", key, model)
        return adapter_class(api_key=api_key, model=model)

    @classmethod
    def register(
        cls,
        provider: str,
        adapter_class: type[BaseEmbeddingAdapter],
        default_model: str = "",
    ) -> None:
        """Add or replace a provider. Must be a BaseEmbeddingAdapter subclass."""
        if not (isinstance(adapter_class, type) and issubclass(adapter_class, BaseEmbeddingAdapter)):
            raise TypeError(f"{adapter_class!r} is not a BaseEmbeddingAdapter subclass")

        key = _normalize(provider)
        cls._registry[key] = adapter_class
        if default_model:
            cls._default_models[key] = default_model
        logger.info("Registered embedding provider %s: %s", key, adapter_class.__name__)

    @classmethod
    def available_providers(cls) -> list[str]:
        return sorted(cls._registry)


def _normalize(provider: str) -> str:
    return provider.strip().lower()
