"""OpenAI adapter implementation."""

from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

from .base import BaseLLMAdapter
from ..config import ProviderCode, ProviderConfig
from ..models.common import CompletionRequest, CompletionResponse, Message, TokenUsage
from ...core.errors import NetworkError
from ...utils.logging_config import get_logger

logger = get_logger(__name__)


class OpenAIAdapter(BaseLLMAdapter):
    """Adapter for the OpenAI chat completions API."""

    provider_code = ProviderCode.OPENAI

    def __init__(self, config: ProviderConfig, client: Optional[AsyncOpenAI] = None):
        super().__init__(config)
        # Retries are the caller's decision, never the SDK's
        self.client = client or AsyncOpenAI(
            api_key=self.api_key,
            base_url=self._client_base_url(),
            timeout=self.timeout,
            max_retries=0,
        )

    def _client_base_url(self) -> Optional[str]:
        # The SDK default already targets api.openai.com
        return None

    def _prepare_messages(self, messages: List[Message]) -> List[ChatCompletionMessageParam]:
        """Convert messages to OpenAI format."""
        return [{"role": msg.role.value, "content": msg.content} for msg in messages]

    def _build_params(self, request: CompletionRequest) -> Dict[str, Any]:
        """Build API parameters from request."""
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": self._prepare_messages(request.messages),
            "temperature": request.temperature,
        }
        if request.max_tokens:
            params["max_tokens"] = request.max_tokens
        return params

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Non-streaming completion."""
        params = self._build_params(request)
        logger.debug(f"Requesting completion from {self.provider_name}", extra={
            "adapter_model": self.model,
            "message_count": len(params["messages"]),
        })
        try:
            response = await self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            raise self._translate_error(e) from e

        if not response.choices:
            raise self._network_error("Response contained no choices")

        message = response.choices[0].message
        content = message.content or ""

        # Handle refusal
        if getattr(message, "refusal", None):
            content = f"[REFUSAL] {message.refusal}"

        usage = None
        if response.usage:
            usage = TokenUsage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
            )

        return CompletionResponse(
            text=content,
            usage=usage,
            model=response.model,
            finish_reason=response.choices[0].finish_reason,
        )

    async def fetch_models(self) -> List[str]:
        try:
            page = await self.client.models.list()
            models = [model.id async for model in page]
        except openai.OpenAIError as e:
            raise self._translate_error(e) from e
        return sorted(models)

    def _translate_error(self, error: Exception) -> NetworkError:
        """Map OpenAI SDK exceptions onto NetworkError kinds."""
        if isinstance(error, openai.APITimeoutError):
            return self._network_error(f"Request timed out after {self.timeout:g}s", NetworkError.TIMEOUT)
        if isinstance(error, openai.APIConnectionError):
            return self._network_error(f"Connection failed: {error}", NetworkError.CONNECTION)
        if isinstance(error, openai.APIStatusError):
            kind = self._kind_for_status(error.status_code)
            return self._network_error(
                f"HTTP {error.status_code}: {error.message}", kind, status_code=error.status_code
            )
        return self._network_error(str(error))
