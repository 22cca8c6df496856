"""Provider configuration for smart selection."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_TIMEOUT = 60.0


class ProviderCode(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"                        # primary
    GEMINI = "gemini"                        # secondary
    OPENAI_COMPATIBLE = "openai-compatible"  # any OpenAI-compatible endpoint


@dataclass(frozen=True)
class ProviderDetails:
    """Static facts about a provider."""
    code: ProviderCode
    name: str
    base_url: str
    default_model: str
    api_key_env: str


SUPPORTED_PROVIDERS: Dict[ProviderCode, ProviderDetails] = {
    ProviderCode.OPENAI: ProviderDetails(
        code=ProviderCode.OPENAI,
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        default_model="gpt-4o-mini",
        api_key_env="OPENAI_API_KEY",
    ),
    ProviderCode.GEMINI: ProviderDetails(
        code=ProviderCode.GEMINI,
        name="Gemini",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        default_model="gemini-1.5-flash",
        api_key_env="GEMINI_API_KEY",
    ),
    ProviderCode.OPENAI_COMPATIBLE: ProviderDetails(
        code=ProviderCode.OPENAI_COMPATIBLE,
        name="OpenAI-Compatible",
        base_url="https://api.openai.com/v1",
        default_model="gpt-4o-mini",
        api_key_env="OPENAI_API_KEY",
    ),
}


def get_provider_details(provider: ProviderCode) -> ProviderDetails:
    return SUPPORTED_PROVIDERS[ProviderCode(provider)]


class ProviderConfig(BaseModel):
    """Settings for one provider. Built once per invocation and never mutated."""

    model_config = {"frozen": True}

    provider: ProviderCode = ProviderCode.OPENAI
    api_key: str
    base_url: Optional[str] = None
    model: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @field_validator("api_key")
    @classmethod
    def _api_key_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("API key cannot be empty")
        return value.strip()

    @field_validator("base_url", "model")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @model_validator(mode="before")
    @classmethod
    def _base_url_only_for_compatible(cls, data: Any) -> Any:
        # A base URL only means something for the compatible provider
        if isinstance(data, dict) and data.get("base_url") is not None:
            provider = data.get("provider", ProviderCode.OPENAI)
            if provider not in (ProviderCode.OPENAI_COMPATIBLE, ProviderCode.OPENAI_COMPATIBLE.value):
                data = {**data, "base_url": None}
        return data

    @property
    def details(self) -> ProviderDetails:
        return get_provider_details(self.provider)

    @property
    def resolved_model(self) -> str:
        """Configured model or the provider default."""
        return self.model or self.details.default_model

    @property
    def resolved_base_url(self) -> str:
        if self.provider == ProviderCode.OPENAI_COMPATIBLE and self.base_url:
            return self.base_url.rstrip("/")
        return self.details.base_url


def get_provider_config_from_env(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
) -> ProviderConfig:
    """Build a ProviderConfig from explicit values, falling back to the environment.

    Raises:
        ValueError: If the provider is unknown or no API key is available.
    """
    provider_name = (provider or os.getenv("SMARTADD_PROVIDER") or ProviderCode.OPENAI.value).lower()
    try:
        code = ProviderCode(provider_name)
    except ValueError:
        available = ", ".join(p.value for p in ProviderCode)
        raise ValueError(f"Unsupported provider '{provider_name}'. Available: {available}")

    details = get_provider_details(code)
    key = api_key or os.getenv("SMARTADD_API_KEY") or os.getenv(details.api_key_env)
    if not key:
        raise ValueError(
            f"No API key for {details.name}. Set SMARTADD_API_KEY or {details.api_key_env}"
        )

    return ProviderConfig(
        provider=code,
        api_key=key,
        base_url=base_url or os.getenv("SMARTADD_BASE_URL"),
        model=model or os.getenv("SMARTADD_MODEL"),
        timeout=float(os.getenv("SMARTADD_TIMEOUT", DEFAULT_TIMEOUT)),
    )
