"""Provider adapters, prompt construction and response parsing."""

from .adapter import BaseLLMAdapter, create_adapter
from .config import (
    ProviderCode,
    ProviderConfig,
    ProviderDetails,
    SUPPORTED_PROVIDERS,
    get_provider_config_from_env,
)
from .model_selection import fetch_models_or_fallback, resolve_model_choice
from .parser import parse_llm_response
from .prompts import PromptBuilder

__all__ = [
    "BaseLLMAdapter",
    "create_adapter",
    "ProviderCode",
    "ProviderConfig",
    "ProviderDetails",
    "SUPPORTED_PROVIDERS",
    "get_provider_config_from_env",
    "fetch_models_or_fallback",
    "resolve_model_choice",
    "parse_llm_response",
    "PromptBuilder",
]
