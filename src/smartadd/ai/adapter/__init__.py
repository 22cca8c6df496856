"""LLM adapter implementations for the supported providers."""

from .base import BaseLLMAdapter
from .compatible_adapter import OpenAICompatibleAdapter
from .factory import AdapterFactory, create_adapter
from .gemini_adapter import GeminiAdapter
from .openai_adapter import OpenAIAdapter

__all__ = [
    "BaseLLMAdapter",
    "AdapterFactory",
    "create_adapter",
    "OpenAIAdapter",
    "OpenAICompatibleAdapter",
    "GeminiAdapter",
]
