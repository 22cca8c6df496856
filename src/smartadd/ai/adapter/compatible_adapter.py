"""Adapter for any endpoint speaking the OpenAI chat completions protocol."""

from typing import Optional

from .openai_adapter import OpenAIAdapter
from ..config import ProviderCode


class OpenAICompatibleAdapter(OpenAIAdapter):
    """OpenAI wire format against a user-supplied base URL."""

    provider_code = ProviderCode.OPENAI_COMPATIBLE

    def _client_base_url(self) -> Optional[str]:
        return self.base_url
