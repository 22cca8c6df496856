"""Factory for creating LLM adapters from a provider configuration."""

from typing import Dict, Type

from .base import BaseLLMAdapter
from .compatible_adapter import OpenAICompatibleAdapter
from .gemini_adapter import GeminiAdapter
from .openai_adapter import OpenAIAdapter
from ..config import ProviderCode, ProviderConfig
from ...utils.logging_config import get_logger

logger = get_logger(__name__)


class AdapterFactory:
    """Factory for creating adapter instances."""

    # Registry of available adapter classes
    _adapters: Dict[ProviderCode, Type[BaseLLMAdapter]] = {
        ProviderCode.OPENAI: OpenAIAdapter,
        ProviderCode.GEMINI: GeminiAdapter,
        ProviderCode.OPENAI_COMPATIBLE: OpenAICompatibleAdapter,
    }

    @classmethod
    def register_adapter(cls, provider: ProviderCode, adapter_class: Type[BaseLLMAdapter]):
        """Register a new adapter type."""
        cls._adapters[ProviderCode(provider)] = adapter_class

    @classmethod
    def create_adapter(cls, config: ProviderConfig) -> BaseLLMAdapter:
        """Create the adapter variant matching ``config.provider``.

        Raises:
            ValueError: If no adapter is registered for the provider.
        """
        adapter_class = cls._adapters.get(config.provider)
        if adapter_class is None:
            available = ", ".join(p.value for p in cls._adapters)
            raise ValueError(f"Unknown provider: {config.provider}. Available: {available}")

        adapter = adapter_class(config)
        logger.debug(f"Created {adapter!r}")
        return adapter


def create_adapter(config: ProviderConfig) -> BaseLLMAdapter:
    """Convenience function to create an adapter."""
    return AdapterFactory.create_adapter(config)
