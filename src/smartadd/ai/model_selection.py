"""Model listing with a manual-entry fallback."""

from typing import List, Optional

from .adapter.base import BaseLLMAdapter
from .config import ProviderCode, get_provider_details
from ..core.errors import NetworkError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


async def fetch_models_or_fallback(adapter: BaseLLMAdapter) -> List[str]:
    """Return the provider's model list, or [] when it cannot be fetched.

    A failed listing is never fatal; the caller asks for a model name instead.
    """
    try:
        models = await adapter.fetch_models()
    except NetworkError as e:
        logger.warning(f"Could not fetch models from {adapter.provider_name}: {e.message}", extra={
            "error_kind": e.kind,
        })
        return []
    logger.debug(f"Fetched {len(models)} models from {adapter.provider_name}")
    return models


def resolve_model_choice(manual_input: Optional[str], provider: ProviderCode) -> str:
    """Use the manually entered model name, or the provider default when blank."""
    if manual_input and manual_input.strip():
        return manual_input.strip()
    return get_provider_details(provider).default_model
