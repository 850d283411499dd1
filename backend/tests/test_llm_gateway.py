from types import SimpleNamespace

import pytest

from segtrans.core.errors import ConfigurationError, ModelCallError
from segtrans.core.translation.models import CompletionOptions
from segtrans.core.translation.pipeline import llm_gateway
from segtrans.core.translation.pipeline.llm_gateway import GatewayFactory, LiteLLMGateway


def completion_response(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def recorded_calls(monkeypatch):
    """Replace litellm.acompletion with a scripted stand-in."""
    calls = []
    replies = []

    async def fake_acompletion(**kwargs):
        calls.append(kwargs)
        reply = replies.pop(0) if replies else completion_response("OK")
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(llm_gateway, "acompletion", fake_acompletion)
    return SimpleNamespace(calls=calls, replies=replies)


@pytest.mark.unit
def test_factory_requires_api_key():
    with pytest.raises(ConfigurationError, match="deepseek API key not configured"):
        GatewayFactory.create("deepseek", None, "deepseek-chat")


@pytest.mark.unit
def test_factory_uses_provider_base_url():
    gateway = GatewayFactory.create("DeepSeek", "key", "deepseek-chat")

    assert isinstance(gateway, LiteLLMGateway)
    assert gateway.provider == "deepseek"
    assert gateway._base_url == "https://api.deepseek.com"


@pytest.mark.unit
async def test_complete_passes_options(recorded_calls):
    recorded_calls.replies.append(completion_response('[{"translation": "x"}]'))
    gateway = LiteLLMGateway(api_key="key", model="deepseek-chat", base_url="http://llm")

    text = await gateway.complete(
        "system", "user", CompletionOptions(temperature=0.2, max_tokens=100, timeout_ms=5000)
    )

    assert text == '[{"translation": "x"}]'
    call = recorded_calls.calls[0]
    assert call["model"] == "deepseek/deepseek-chat"
    assert call["temperature"] == 0.2
    assert call["max_tokens"] == 100
    assert call["timeout"] == 5
    assert call["api_base"] == "http://llm"
    assert [m["role"] for m in call["messages"]] == ["system", "user"]


@pytest.mark.unit
async def test_empty_completion_becomes_empty_array(recorded_calls):
    recorded_calls.replies.append(completion_response(None))
    gateway = LiteLLMGateway(api_key="key", model="deepseek-chat")

    assert await gateway.complete("s", "u", CompletionOptions()) == "[]"


@pytest.mark.unit
async def test_vendor_error_becomes_model_call_error(recorded_calls):
    recorded_calls.replies.append(ConnectionError("connection reset by peer"))
    gateway = LiteLLMGateway(api_key="key", model="deepseek-chat")

    with pytest.raises(ModelCallError, match="connection reset"):
        await gateway.complete("s", "u", CompletionOptions())


@pytest.mark.unit
async def test_health_check_calls_provider(recorded_calls):
    gateway = LiteLLMGateway(api_key="key", model="deepseek-chat")

    assert await gateway.health_check() is True
    assert recorded_calls.calls[0]["max_tokens"] == 5


@pytest.mark.unit
async def test_health_check_reports_unreachable_provider(recorded_calls):
    recorded_calls.replies.append(ConnectionError("no route to host"))
    gateway = LiteLLMGateway(api_key="key", model="deepseek-chat")

    assert await gateway.health_check() is False
