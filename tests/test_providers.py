from unittest.mock import MagicMock

import pytest
import requests

from app.services.providers import (
    ChatCompletionProvider,
    ChatProvider,
    FailureKind,
    GenerateContentProvider,
    TokenUsage,
    build_default_providers,
    classify_status,
)


def _response(status=200, body=None, json_error=None):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


def _session(response=None, error=None):
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value = response
    return session


@pytest.mark.parametrize(
    "status, kind",
    [
        (401, FailureKind.UNAUTHORIZED),
        (403, FailureKind.UNAUTHORIZED),
        (429, FailureKind.RATE_LIMITED),
        (400, FailureKind.BAD_REQUEST),
        (404, FailureKind.UNAVAILABLE),
        (500, FailureKind.UNAVAILABLE),
        (503, FailureKind.UNAVAILABLE),
    ],
)
def test_classify_status(status, kind):
    assert classify_status(status) is kind


def test_chat_completion_request_and_parsing():
    body = {
        "choices": [{"message": {"content": "Sow wheat in November."}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 5, "total_tokens": 17},
    }
    session = _session(_response(body=body))
    provider = ChatCompletionProvider(
        "deepseek/deepseek-v3.1:free", api_key="sk-test", base_url="https://router.example/api/v1/",
        session=session,
    )

    outcome = provider.attempt("When to sow wheat?", "Farming season")

    assert outcome.ok
    assert outcome.result.content == "Sow wheat in November."
    assert outcome.result.usage == TokenUsage(12, 5, 17)
    assert outcome.result.provider == "deepseek/deepseek-v3.1:free"

    args, kwargs = session.post.call_args
    assert args[0] == "https://router.example/api/v1/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["headers"]["X-Title"] == "VillageVault"
    payload = kwargs["json"]
    assert payload["model"] == "deepseek/deepseek-v3.1:free"
    assert payload["max_tokens"] == 1000
    assert payload["temperature"] == 0.7
    assert payload["messages"][0]["role"] == "system"
    assert payload["messages"][0]["content"].endswith("Context: Farming season")
    assert payload["messages"][1] == {"role": "user", "content": "When to sow wheat?"}


def test_chat_completion_without_usage():
    body = {"choices": [{"message": {"content": "ok"}}]}
    provider = ChatCompletionProvider("m", api_key="k", session=_session(_response(body=body)))

    outcome = provider.attempt("hi")

    assert outcome.result.usage is None


@pytest.mark.parametrize(
    "status, kind",
    [(401, FailureKind.UNAUTHORIZED), (429, FailureKind.RATE_LIMITED),
     (400, FailureKind.BAD_REQUEST), (502, FailureKind.UNAVAILABLE)],
)
def test_chat_completion_http_failures(status, kind):
    provider = ChatCompletionProvider("m", api_key="k", session=_session(_response(status=status, body={})))

    outcome = provider.attempt("hi")

    assert not outcome.ok
    assert outcome.failure is kind
    assert str(status) in outcome.error_message


def test_transport_error_is_unavailable():
    session = _session(error=requests.ConnectionError("connection refused"))
    provider = ChatCompletionProvider("m", api_key="k", session=session)

    outcome = provider.attempt("hi")

    assert outcome.failure is FailureKind.UNAVAILABLE
    assert "connection refused" in outcome.error_message


def test_malformed_body_is_unavailable():
    provider = ChatCompletionProvider("m", api_key="k", session=_session(_response(body={"choices": []})))

    outcome = provider.attempt("hi")

    assert outcome.failure is FailureKind.UNAVAILABLE


def test_non_json_body_is_unavailable():
    provider = ChatCompletionProvider(
        "m", api_key="k", session=_session(_response(json_error=ValueError("not json")))
    )

    assert provider.attempt("hi").failure is FailureKind.UNAVAILABLE


@pytest.mark.parametrize("content", ["", "   \n", None, 42])
def test_chat_completion_blank_answer_is_unavailable(content):
    body = {"choices": [{"message": {"content": content}}]}
    provider = ChatCompletionProvider("m", api_key="k", session=_session(_response(body=body)))

    outcome = provider.attempt("hi")

    assert not outcome.ok
    assert outcome.failure is FailureKind.UNAVAILABLE


def test_generate_content_request_and_parsing():
    body = {
        "candidates": [{"content": {"parts": [{"text": "Carry an umbrella."}]}}],
        "usageMetadata": {"promptTokenCount": 20, "candidatesTokenCount": 4, "totalTokenCount": 24},
    }
    session = _session(_response(body=body))
    provider = GenerateContentProvider(
        provider_id="gemini-pro-direct", model_name="gemini-2.0-flash-lite",
        api_key="g-key", base_url="https://gemini.example/v1", session=session,
    )

    outcome = provider.attempt("Will it rain?")

    assert outcome.result.content == "Carry an umbrella."
    assert outcome.result.usage == TokenUsage(20, 4, 24)
    assert outcome.result.provider == "gemini-pro-direct"

    args, kwargs = session.post.call_args
    assert args[0] == "https://gemini.example/v1/models/gemini-2.0-flash-lite:generateContent"
    assert kwargs["params"] == {"key": "g-key"}
    text = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert "VillageVault" in text
    assert text.endswith("User question: Will it rain?")


def test_generate_content_response_field():
    provider = GenerateContentProvider(api_key="g", session=_session(_response(body={"response": "plain"})))

    assert provider.attempt("hi").result.content == "plain"


def test_generate_content_forbidden_is_unauthorized():
    provider = GenerateContentProvider(api_key="g", session=_session(_response(status=403, body={})))

    assert provider.attempt("hi").failure is FailureKind.UNAUTHORIZED


def test_generate_content_unexpected_body_is_unavailable():
    provider = GenerateContentProvider(api_key="g", session=_session(_response(body={"error": "?"})))

    assert provider.attempt("hi").failure is FailureKind.UNAVAILABLE


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        {"candidates": [{"content": {"parts": [{"text": None}]}}]},
        {"response": "  "},
        "",
    ],
)
def test_generate_content_blank_answer_is_unavailable(body):
    provider = GenerateContentProvider(api_key="g", session=_session(_response(body=body)))

    outcome = provider.attempt("hi")

    assert not outcome.ok
    assert outcome.failure is FailureKind.UNAVAILABLE


def test_build_default_providers_order(monkeypatch):
    import config

    monkeypatch.setattr(config, "GEMINI_DIRECT_ENABLED", True)
    monkeypatch.setattr(config, "ALTERNATIVE_MODELS", ["m1", "m2"])

    providers = build_default_providers(session=MagicMock())

    assert [p.provider_id for p in providers] == [config.GEMINI_DIRECT_MODEL, "m1", "m2"]
    assert isinstance(providers[0], GenerateContentProvider)
    assert all(isinstance(p, ChatCompletionProvider) for p in providers[1:])


def test_build_default_providers_without_gemini(monkeypatch):
    import config

    monkeypatch.setattr(config, "GEMINI_DIRECT_ENABLED", False)
    monkeypatch.setattr(config, "ALTERNATIVE_MODELS", ["m1"])

    providers = build_default_providers(session=MagicMock())

    assert [p.provider_id for p in providers] == ["m1"]


def test_provider_base_requires_send():
    with pytest.raises(TypeError):
        ChatProvider("m")
