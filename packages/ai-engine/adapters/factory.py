"""Chat adapter factory — pick the chat-completion adapter named in settings.

`LLM_PROVIDER` selects an entry of the registry below; `CHAT_MODEL`
overrides the provider's default model. Extra providers are added with
`register()` before the service container is built.

Usage:
    adapter = AdapterFactory.create("openai", api_key="sk-...", model="gpt-4o-mini")
"""

import logging

from .base import BaseLLMAdapter
from .openai_adapter import OpenAIAdapter

logger = logging.getLogger(__name__)


class AdapterFactory:
    """Registry of chat-completion adapters keyed by lower-case provider name.

    ChatService only sees BaseLLMAdapter; this is where a provider name
    turns into a concrete class.
    """

    _registry: dict[str, type[BaseLLMAdapter]] = {
        "openai": OpenAIAdapter,
    }

    _default_models: dict[str, str] = {
        "openai": "gpt-4o-mini",
    }

    @classmethod
    def create(
        cls,
        provider: str,
        api_key: str,
        model: str | None = None,
        **kwargs,
    ) -> BaseLLMAdapter:
        """Instantiate the adapter registered as `provider`.

        Extra keyword arguments are passed through to the adapter class.

        Raises:
            ValueError: If no adapter is registered under that name
        """
        key = _normalize(provider)
        adapter_class = cls._registry.get(key)
        if adapter_class is None:
            raise ValueError(
                f"Unknown LLM provider: '{key}'. "
                f"Available providers: {', '.join(cls.available_providers())}"
            )

        model = model or cls._default_models.get(key, "")
        logger.info("Creating %s chat adapter (model=%s)", key, model)
        return adapter_class(api_key=api_key, model=model, **kwargs)

    @classmethod
    def register(
        cls,
        provider: str,
        adapter_class: type[BaseLLMAdapter],
        default_model: str = "",
    ) -> None:
        """Add or replace a provider. Must be a BaseLLMAdapter subclass."""
        if not (isinstance(adapter_class, type) and issubclass(adapter_class, BaseLLMAdapter)):
            raise TypeError(f"{adapter_class!r} is not a BaseLLMAdapter subclass")

        key = _normalize(provider)
        cls._registry[key] = adapter_class
        if default_model:
            cls._default_models[key] = default_model
        logger.info("Registered chat provider %s: %s", key, adapter_class.__name__)

    @classmethod
    def available_providers(cls) -> list[str]:
        return sorted(cls._registry)


def _normalize(provider: str) -> str:
    return provider.strip().lower()
