"""Abstract base adapter for LLM providers."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..config import ProviderCode, ProviderConfig
from ..models.common import CompletionRequest, CompletionResponse
from ...core.errors import NetworkError
from ...utils.logging_config import get_logger

logger = get_logger(__name__)


class BaseLLMAdapter(ABC):
    """Abstract base class for all LLM provider adapters.

    Every variant offers the same two operations; they differ only in
    endpoint, authentication and response unwrapping. Neither operation
    retries: a failed call surfaces as NetworkError.
    """

    provider_code: ProviderCode

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.model = config.resolved_model
        self.api_key = config.api_key
        self.base_url = config.resolved_base_url
        self.timeout = config.timeout

    @property
    def provider_name(self) -> str:
        """Return the display name of this provider."""
        return self.config.details.name

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """
        Generate a completion for the given request.

        Raises:
            NetworkError: On timeout, connection failure, rate limiting,
                authentication rejection or any other failed response.
        """

    @abstractmethod
    async def fetch_models(self) -> List[str]:
        """
        List model names available to this API key, sorted.

        Raises:
            NetworkError: If the listing is unavailable. Callers treat this
                as non-fatal and fall back to a manually supplied model.
        """

    # Error helpers

    def _redact(self, message: str) -> str:
        """Remove the API key from error text."""
        if self.api_key and self.api_key in message:
            return message.replace(self.api_key, "[REDACTED]")
        return message

    def _network_error(self, message: str, kind: str = NetworkError.HTTP,
                       status_code: Optional[int] = None) -> NetworkError:
        error = NetworkError(self._redact(message), provider=self.provider_name,
                             kind=kind, status_code=status_code)
        logger.debug(f"{self.provider_name} request failed", extra={
            "error_kind": kind,
            "status_code": status_code,
        })
        return error

    @staticmethod
    def _kind_for_status(status_code: int) -> str:
        if status_code in (401, 403):
            return NetworkError.AUTH
        if status_code == 429:
            return NetworkError.RATE_LIMIT
        if status_code in (404, 405, 501):
            return NetworkError.UNSUPPORTED
        return NetworkError.HTTP

    def __repr__(self) -> str:
        """String representation of the adapter."""
        return f"{self.__class__.__name__}(model='{self.model}', provider='{self.provider_name}')"
