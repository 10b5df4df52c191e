import asyncio
from types import SimpleNamespace

import litellm
import pytest

from zap_agent.bus.queue import MessageBus
from zap_agent.config.schema import Config
from zap_agent.providers.backends import ChatBackend, CustomBackend, VisionBackend
from zap_agent.providers.factory import build_backends, build_provider
from zap_agent.providers.litellm_provider import LiteLLMProvider


def _fake_response(content: str) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=10, completion_tokens=2, total_tokens=12),
    )


def test_chat_passes_credentials_and_parses_response(monkeypatch):
    calls: list[dict] = []

    async def fake_acompletion(**kwargs):
        calls.append(kwargs)
        return _fake_response("product")

    monkeypatch.setattr("zap_agent.providers.litellm_provider.acompletion", fake_acompletion)
    provider = LiteLLMProvider(api_key="g-key", default_model="gemini/gemini-1.5-flash")

    response = asyncio.run(provider.chat([{"role": "user", "content": "oi"}]))

    assert response.content == "product"
    assert response.usage["total_tokens"] == 12
    assert calls[0]["model"] == "gemini/gemini-1.5-flash"
    assert calls[0]["api_key"] == "g-key"
    assert "api_base" not in calls[0]
    assert litellm.drop_params is True


def test_chat_failure_becomes_error_response(monkeypatch):
    async def fake_acompletion(**kwargs):
        raise RuntimeError("rate limited")

    monkeypatch.setattr("zap_agent.providers.litellm_provider.acompletion", fake_acompletion)
    provider = LiteLLMProvider()

    response = asyncio.run(provider.chat([{"role": "user", "content": "oi"}]))

    assert response.is_error
    assert "rate limited" in response.content


def test_complete_raises_on_error_and_returns_text_otherwise(monkeypatch):
    replies = iter([RuntimeError("down"), _fake_response("payment")])

    async def fake_acompletion(**kwargs):
        reply = next(replies)
        if isinstance(reply, Exception):
            raise reply
        assert kwargs["temperature"] == 0.0
        return reply

    monkeypatch.setattr("zap_agent.providers.litellm_provider.acompletion", fake_acompletion)
    provider = LiteLLMProvider()

    with pytest.raises(RuntimeError):
        asyncio.run(provider.complete("classifique"))

    assert asyncio.run(provider.complete("classifique")) == "payment"


def test_build_provider_uses_model_credentials():
    config = Config.model_validate({"providers": {"openai": {"apiKey": "sk-1", "apiBase": "http://proxy"}}})

    provider = build_provider("gpt-3.5-turbo", config)

    assert provider.api_key == "sk-1"
    assert provider.api_base == "http://proxy"
    assert provider.get_default_model() == "gpt-3.5-turbo"


def test_build_backends_maps_model_kinds():
    config = Config()

    backends = build_backends(config, MessageBus())

    assert isinstance(backends["Gemini"], ChatBackend)
    assert isinstance(backends["ChatGPT"], ChatBackend)
    assert isinstance(backends["GeminiVision"], VisionBackend)
    assert backends["GeminiVision"].model_type == "image"
    assert isinstance(backends["whatsapp-ai-bot"], CustomBackend)
    assert backends["ChatGPT"].model == "gpt-3.5-turbo"


def test_custom_model_cannot_shadow_builtin():
    config = Config.model_validate(
        {"models": {"custom": [{"modelName": "Gemini", "prefix": "!g2", "context": "x.md"}]}}
    )

    backends = build_backends(config, MessageBus())

    assert isinstance(backends["Gemini"], ChatBackend)
