import json

import httpx
import pytest

from transcript_relay.errors import TranslationError
from transcript_relay.services.translator import ChatCompletionTranslator

API_URL = "https://llm.example.com/v1/chat/completions"


def _translator(handler) -> ChatCompletionTranslator:
    return ChatCompletionTranslator(
        API_URL,
        "test-model",
        target_language="Simplified Chinese",
        transport=httpx.MockTransport(handler),
    )


def _completion(content: object) -> dict[str, object]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_translate_sends_chat_completion_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_completion("  你好，世界。 \n"))

    result = _translator(handler).translate("Hello, world.", "secret")

    assert result == "你好，世界。"
    assert len(seen) == 1
    request = seen[0]
    assert str(request.url) == API_URL
    assert request.headers["authorization"] == "Bearer secret"

    body = json.loads(request.content)
    assert body["model"] == "test-model"
    assert body["max_tokens"] == 3000
    assert body["temperature"] == 0.2
    assert body["stream"] is False
    assert [message["role"] for message in body["messages"]] == ["system", "user"]
    assert "Simplified Chinese" in body["messages"][0]["content"]
    assert "Hello, world." in body["messages"][1]["content"]


def test_http_error_is_upstream_failure() -> None:
    translator = _translator(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(TranslationError) as excinfo:
        translator.translate("text", "key")
    assert excinfo.value.cause == "upstream_http_error"


def test_transport_error_is_upstream_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TranslationError) as excinfo:
        _translator(handler).translate("text", "key")
    assert excinfo.value.cause == "upstream_http_error"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"object": "error"}),
        httpx.Response(200, text="not json"),
    ],
)
def test_malformed_responses(response: httpx.Response) -> None:
    translator = _translator(lambda request: response)
    with pytest.raises(TranslationError) as excinfo:
        translator.translate("text", "key")
    assert excinfo.value.cause == "malformed_response"


def test_blank_content_is_empty_response() -> None:
    translator = _translator(lambda request: httpx.Response(200, json=_completion("   ")))
    with pytest.raises(TranslationError) as excinfo:
        translator.translate("text", "key")
    assert excinfo.value.cause == "empty_response"


def test_invalid_url_is_upstream_failure() -> None:
    with pytest.raises(TranslationError) as excinfo:
        ChatCompletionTranslator("http://[::1", "test-model").translate("text", "key")
    assert excinfo.value.cause == "upstream_http_error"
