import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest
from aiohttp import test_utils, web

from smartadd.ai.adapter import (
    AdapterFactory,
    GeminiAdapter,
    OpenAIAdapter,
    OpenAICompatibleAdapter,
    create_adapter,
)
from smartadd.ai.config import ProviderConfig
from smartadd.ai.model_selection import fetch_models_or_fallback
from smartadd.ai.models.common import CompletionRequest, Message, MessageRole
from smartadd.core.errors import NetworkError

API_KEY = "sk-secret-123"


def make_request():
    return CompletionRequest(messages=[
        Message(role=MessageRole.SYSTEM, content="Return a JSON array."),
        Message(role=MessageRole.USER, content="proj/\n  a.ts"),
        Message(role=MessageRole.USER, content="typescript files"),
    ])


def chat_response(text, prompt_tokens=10, completion_tokens=3):
    message = SimpleNamespace(content=text, refusal=None)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
        model="gpt-4o-mini-2024-07-18",
    )


class FakePage:
    def __init__(self, ids):
        self._ids = ids

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for model_id in self._ids:
            yield SimpleNamespace(id=model_id)


def status_error(cls, status):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return cls(f"Error code: {status} key={API_KEY}", response=response, body=None)


class TestAdapterFactory:
    @pytest.mark.parametrize("provider,adapter_class", [
        ("openai", OpenAIAdapter),
        ("gemini", GeminiAdapter),
        ("openai-compatible", OpenAICompatibleAdapter),
    ])
    def test_creates_variant(self, provider, adapter_class):
        adapter = create_adapter(ProviderConfig(provider=provider, api_key=API_KEY))
        assert type(adapter) is adapter_class

    def test_register_adapter(self):
        original = dict(AdapterFactory._adapters)
        try:
            AdapterFactory.register_adapter("gemini", OpenAIAdapter)
            adapter = AdapterFactory.create_adapter(ProviderConfig(provider="gemini", api_key=API_KEY))
            assert type(adapter) is OpenAIAdapter
        finally:
            AdapterFactory._adapters = original


class TestOpenAIAdapter:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=chat_response('["a.ts"]'))
        client.models.list = AsyncMock(return_value=FakePage(["gpt-4o", "gpt-4o-mini", "dall-e-3"]))
        return client

    @pytest.fixture
    def adapter(self, client):
        return OpenAIAdapter(ProviderConfig(provider="openai", api_key=API_KEY), client=client)

    def test_client_construction(self):
        with patch("smartadd.ai.adapter.openai_adapter.AsyncOpenAI") as mock_client:
            OpenAIAdapter(ProviderConfig(provider="openai", api_key=API_KEY, timeout=12))
        mock_client.assert_called_once_with(api_key=API_KEY, base_url=None, timeout=12.0, max_retries=0)

    def test_compatible_uses_base_url(self):
        config = ProviderConfig(provider="openai-compatible", api_key=API_KEY, base_url="http://localhost:8000/v1")
        with patch("smartadd.ai.adapter.openai_adapter.AsyncOpenAI") as mock_client:
            OpenAICompatibleAdapter(config)
        assert mock_client.call_args.kwargs["base_url"] == "http://localhost:8000/v1"

    def test_complete(self, adapter, client):
        response = asyncio.run(adapter.complete(make_request()))

        assert response.text == '["a.ts"]'
        assert response.usage.total_tokens == 13
        params = client.chat.completions.create.call_args.kwargs
        assert params["model"] == "gpt-4o-mini"
        assert params["temperature"] == 0.0
        assert [m["role"] for m in params["messages"]] == ["system", "user", "user"]
        assert params["messages"][2]["content"] == "typescript files"

    def test_complete_without_choices(self, adapter, client):
        client.chat.completions.create.return_value = SimpleNamespace(choices=[], usage=None, model="m")
        with pytest.raises(NetworkError):
            asyncio.run(adapter.complete(make_request()))

    def test_fetch_models_sorted(self, adapter):
        assert asyncio.run(adapter.fetch_models()) == ["dall-e-3", "gpt-4o", "gpt-4o-mini"]

    @pytest.mark.parametrize("error,kind", [
        (lambda: openai.APITimeoutError(request=httpx.Request("POST", "https://x")), NetworkError.TIMEOUT),
        (lambda: openai.APIConnectionError(request=httpx.Request("POST", "https://x")), NetworkError.CONNECTION),
        (lambda: status_error(openai.RateLimitError, 429), NetworkError.RATE_LIMIT),
        (lambda: status_error(openai.AuthenticationError, 401), NetworkError.AUTH),
        (lambda: status_error(openai.PermissionDeniedError, 403), NetworkError.AUTH),
        (lambda: status_error(openai.InternalServerError, 500), NetworkError.HTTP),
    ])
    def test_complete_errors_classified(self, adapter, client, error, kind):
        client.chat.completions.create.side_effect = error()
        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(adapter.complete(make_request()))
        assert exc_info.value.kind == kind
        assert exc_info.value.provider == "OpenAI"
        assert API_KEY not in str(exc_info.value)

    def test_fetch_models_unsupported(self, adapter, client):
        client.models.list.side_effect = status_error(openai.NotFoundError, 404)
        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(adapter.fetch_models())
        assert exc_info.value.kind == NetworkError.UNSUPPORTED
        assert exc_info.value.status_code == 404


class TestGeminiAdapter:
    @pytest.fixture
    def adapter(self):
        return GeminiAdapter(ProviderConfig(provider="gemini", api_key=API_KEY))

    def test_request_body(self, adapter):
        body = adapter._build_body(make_request())
        assert body["systemInstruction"] == {"parts": [{"text": "Return a JSON array."}]}
        assert [c["role"] for c in body["contents"]] == ["user", "user"]
        assert body["contents"][1]["parts"][0]["text"] == "typescript files"
        assert body["generationConfig"]["temperature"] == 0.0

    def test_complete(self, adapter):
        payload = {
            "candidates": [{
                "content": {"parts": [{"text": '["src/'}, {"text": 'a.ts"]'}], "role": "model"},
                "finishReason": "STOP",
            }],
            "usageMetadata": {"promptTokenCount": 42, "candidatesTokenCount": 7},
        }
        with patch.object(adapter, "_request_json", AsyncMock(return_value=payload)) as request_json:
            response = asyncio.run(adapter.complete(make_request()))

        assert response.text == '["src/a.ts"]'
        assert response.usage.input_tokens == 42
        assert response.finish_reason == "STOP"
        method, url, _ = request_json.call_args.args
        assert method == "POST"
        assert url == "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-flash:generateContent"

    def test_complete_blocked(self, adapter):
        payload = {"promptFeedback": {"blockReason": "SAFETY"}}
        with patch.object(adapter, "_request_json", AsyncMock(return_value=payload)):
            with pytest.raises(NetworkError, match="SAFETY"):
                asyncio.run(adapter.complete(make_request()))

    def test_fetch_models(self, adapter):
        payload = {"models": [
            {"name": "models/gemini-1.5-pro", "supportedGenerationMethods": ["generateContent", "countTokens"]},
            {"name": "models/embedding-001", "supportedGenerationMethods": ["embedContent"]},
            {"name": "models/gemini-1.5-flash", "supportedGenerationMethods": ["generateContent"]},
        ]}
        with patch.object(adapter, "_request_json", AsyncMock(return_value=payload)):
            assert asyncio.run(adapter.fetch_models()) == ["gemini-1.5-flash", "gemini-1.5-pro"]


class TestGeminiHttp:
    """Exercise the aiohttp path against a local server."""

    @staticmethod
    async def _call(status=200, delay=0.0, timeout=5.0, body=None):
        async def handler(request):
            assert request.headers["x-goog-api-key"] == API_KEY
            if delay:
                await asyncio.sleep(delay)
            if status != 200:
                return web.Response(status=status, text=f"rejected key={API_KEY}")
            if body is not None:
                return web.Response(text=body, content_type="application/json")
            return web.json_response({"candidates": [{"content": {"parts": [{"text": "[]"}]}}]})

        app = web.Application()
        app.router.add_post("/v1beta/models/{name}", handler)
        async with test_utils.TestServer(app) as server:
            adapter = GeminiAdapter(ProviderConfig(provider="gemini", api_key=API_KEY, timeout=timeout))
            adapter.base_url = str(server.make_url("/v1beta"))
            return await adapter.complete(make_request())

    def test_success(self):
        assert asyncio.run(self._call()).text == "[]"

    @pytest.mark.parametrize("status,kind", [
        (401, NetworkError.AUTH),
        (403, NetworkError.AUTH),
        (429, NetworkError.RATE_LIMIT),
        (500, NetworkError.HTTP),
    ])
    def test_status_classified(self, status, kind):
        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(self._call(status=status))
        assert exc_info.value.kind == kind
        assert exc_info.value.status_code == status
        assert API_KEY not in str(exc_info.value)

    def test_timeout(self):
        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(self._call(delay=1.0, timeout=0.1))
        assert exc_info.value.kind == NetworkError.TIMEOUT

    def test_connection_refused(self):
        adapter = GeminiAdapter(ProviderConfig(provider="gemini", api_key=API_KEY, timeout=5))
        adapter.base_url = "http://127.0.0.1:1/v1beta"
        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(adapter.complete(make_request()))
        assert exc_info.value.kind == NetworkError.CONNECTION

    @pytest.mark.parametrize("body", ["not json {", "[]", '"text"'])
    def test_malformed_body_is_network_error(self, body):
        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(self._call(body=body))
        assert exc_info.value.kind == NetworkError.HTTP

    def test_unexpected_candidate_shape(self):
        with pytest.raises(NetworkError, match="Unexpected response shape"):
            asyncio.run(self._call(body='{"candidates": ["oops"]}'))

    def test_malformed_model_list_falls_back(self):
        async def listing(request):
            return web.Response(text='{"models": 7}', content_type="application/json")

        async def fetch():
            app = web.Application()
            app.router.add_get("/v1beta/models", listing)
            async with test_utils.TestServer(app) as server:
                adapter = GeminiAdapter(ProviderConfig(provider="gemini", api_key=API_KEY))
                adapter.base_url = str(server.make_url("/v1beta"))
                return await fetch_models_or_fallback(adapter)

        assert asyncio.run(fetch()) == []
