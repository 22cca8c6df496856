"""Gemini adapter over the generativelanguage REST API."""

import asyncio
import json
from typing import Any, Dict, List, Optional

import aiohttp

from .base import BaseLLMAdapter
from ..config import ProviderCode
from ..models.common import CompletionRequest, CompletionResponse, MessageRole, TokenUsage
from ...core.errors import NetworkError
from ...utils.logging_config import get_logger

logger = get_logger(__name__)

GENERATE_METHOD = "generateContent"


class GeminiAdapter(BaseLLMAdapter):
    """Adapter for Google Gemini models."""

    provider_code = ProviderCode.GEMINI

    def _headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
            "User-Agent": "smartadd",
        }

    def _build_body(self, request: CompletionRequest) -> Dict[str, Any]:
        contents = []
        for msg in request.get_conversation_messages():
            role = "model" if msg.role == MessageRole.ASSISTANT else "user"
            contents.append({"role": role, "parts": [{"text": msg.content}]})

        body: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {"temperature": request.temperature},
        }
        system = request.get_system_message()
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}
        if request.max_tokens:
            body["generationConfig"]["maxOutputTokens"] = request.max_tokens
        return body

    async def _request_json(self, method: str, url: str,
                            body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Perform one HTTP call and return the decoded JSON body."""
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(headers=self._headers(), timeout=timeout) as session:
                async with session.request(method, url, json=body) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise self._network_error(
                            f"HTTP {response.status}: {error_text[:500]}",
                            self._kind_for_status(response.status),
                            status_code=response.status,
                        )
                    payload = await response.text()
        except asyncio.TimeoutError as e:
            raise self._network_error(
                f"Request timed out after {self.timeout:g}s", NetworkError.TIMEOUT
            ) from e
        except aiohttp.ClientError as e:
            raise self._network_error(f"Connection failed: {e}", NetworkError.CONNECTION) from e

        try:
            data = json.loads(payload)
        except ValueError as e:
            raise self._network_error(f"Response was not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise self._network_error(f"Expected a JSON object, got {type(data).__name__}")
        return data

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        url = f"{self.base_url}/models/{self.model}:{GENERATE_METHOD}"
        logger.debug(f"Requesting completion from {self.provider_name}", extra={
            "adapter_model": self.model,
            "message_count": len(request.messages),
        })
        data = await self._request_json("POST", url, self._build_body(request))
        try:
            return self._parse_completion(data)
        except (AttributeError, TypeError, ValueError) as e:
            raise self._network_error(f"Unexpected response shape: {e}") from e

    def _parse_completion(self, data: Dict[str, Any]) -> CompletionResponse:
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback", {})
            reason = feedback.get("blockReason", "no candidates")
            raise self._network_error(f"Response contained no candidates ({reason})")

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)

        usage = None
        metadata = data.get("usageMetadata")
        if metadata:
            usage = TokenUsage(
                input_tokens=metadata.get("promptTokenCount", 0),
                output_tokens=metadata.get("candidatesTokenCount", 0),
            )

        return CompletionResponse(
            text=text,
            model=data.get("modelVersion", self.model),
            usage=usage,
            finish_reason=candidate.get("finishReason"),
        )

    async def fetch_models(self) -> List[str]:
        data = await self._request_json("GET", f"{self.base_url}/models")
        try:
            return self._parse_model_names(data)
        except (AttributeError, TypeError) as e:
            raise self._network_error(f"Unexpected model list shape: {e}") from e

    @staticmethod
    def _parse_model_names(data: Dict[str, Any]) -> List[str]:
        names = []
        for entry in data.get("models", []):
            if GENERATE_METHOD not in entry.get("supportedGenerationMethods", []):
                continue
            name = entry.get("name", "")
            if name.startswith("models/"):
                name = name[len("models/"):]
            if name:
                names.append(name)
        return sorted(names)
