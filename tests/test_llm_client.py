import requests
import pytest

from dartlens.errors import AIServiceError, MissingAPIKeyError
from dartlens.llm_client import LLMClient


class Resp:
    def __init__(self, data):
        self._data = data

    def raise_for_status(self):
        return None

    def json(self):
        return self._data


def test_gemini_generate_content_payload_and_text():
    called = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        called.update(url=url, headers=headers, json=json, timeout=timeout)
        return Resp({"candidates": [{"content": {"parts": [{"text": "첫 줄\n"}, {"text": "둘째 줄"}]}}]})

    client = LLMClient(
        provider="gemini",
        model="gemini-1.5-pro",
        api_key="key",
        base_url="https://generativelanguage.googleapis.com/",
        timeout=7,
        post_fn=fake_post,
    )
    text = client.generate_text("prompt", system_prompt="sys")

    assert text == "첫 줄\n둘째 줄"
    assert called["url"] == "https://generativelanguage.googleapis.com/v1beta/models/gemini-1.5-pro:generateContent"
    assert called["headers"]["x-goog-api-key"] == "key"
    assert called["json"]["contents"][0]["parts"][0]["text"] == "prompt"
    assert called["json"]["systemInstruction"]["parts"][0]["text"] == "sys"
    assert called["timeout"] == 7


def test_llm_client_rejects_unknown_provider():
    client = LLMClient(
        provider="zhipu",
        model="GLM-4.7",
        api_key="zhipu-key",
        base_url="https://open.bigmodel.cn/api/coding/paas/v4",
    )
    with pytest.raises(ValueError, match="Unsupported provider"):
        client.generate_text("user")


def test_llm_client_requires_api_key():
    client = LLMClient(provider="gemini", model="gemini-1.5-pro", api_key="", base_url="https://x")
    assert client.enabled is False
    with pytest.raises(MissingAPIKeyError):
        client.generate_text("user")


def test_llm_client_wraps_network_errors():
    def fake_post(*_args, **_kwargs):
        raise requests.exceptions.Timeout("timeout")

    client = LLMClient(provider="deepseek", model="deepseek-chat", api_key="key", base_url="https://api.deepseek.com", post_fn=fake_post)
    with pytest.raises(AIServiceError, match="LLM request failed"):
        client.generate_text("user")


def test_llm_client_rejects_malformed_response():
    client = LLMClient(
        provider="gemini",
        model="gemini-1.5-pro",
        api_key="key",
        base_url="https://x",
        post_fn=lambda *_a, **_k: Resp({"promptFeedback": {"blockReason": "SAFETY"}}),
    )
    with pytest.raises(AIServiceError, match="Malformed"):
        client.generate_text("user")


@pytest.mark.parametrize(
    "base_url",
    [
        "https://api.deepseek.com",
        "https://api.deepseek.com/",
        "https://api.deepseek.com/v1",
        "https://api.deepseek.com/v1/",
        "https://api.deepseek.com/v1/chat/completions",
    ],
)
def test_llm_client_normalizes_base_url_for_chat_completion_endpoint(base_url):
    called = {"url": ""}

    def fake_post(url, **_kwargs):
        called["url"] = url
        return Resp({"choices": [{"message": {"content": "설명"}}]})

    client = LLMClient(
        provider="deepseek",
        model="deepseek-chat",
        api_key="key",
        base_url=base_url,
        post_fn=fake_post,
    )

    assert client.generate_text("user") == "설명"
    assert called["url"] == "https://api.deepseek.com/v1/chat/completions"
