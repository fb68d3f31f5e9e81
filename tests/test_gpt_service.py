"""Tests for CompletionClient against a mocked httpx transport."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from gpt_service import (
    ANALYSIS_BUDGET,
    MOOD_BUDGET,
    SUMMARY_BUDGET,
    CompletionClient,
    CompletionError,
    clean_mood,
)

URL = "https://llm.test/v1/chat/completions"


def _response(status, payload=None, text=None):
    request = httpx.Request("POST", URL)
    if payload is not None:
        return httpx.Response(status, json=payload, request=request)
    return httpx.Response(status, text=text or "", request=request)


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture()
def client():
    return CompletionClient(api_key="sk-test", model="test-model", url=URL, timeout=5)


@pytest.fixture()
def http_post():
    with patch("gpt_service.httpx.Client") as client_cls:
        post = MagicMock()
        client_cls.return_value.__enter__.return_value.post = post
        yield post


def test_mood_request_shape(client, http_post):
    http_post.return_value = _response(200, _completion("  Hopeful. "))
    assert client.generate_mood("Got the job!") == "hopeful"

    _, kwargs = http_post.call_args
    body = kwargs["json"]
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert body["model"] == "test-model"
    assert body["messages"][0]["role"] == "system"
    assert "Got the job!" in body["messages"][1]["content"]
    assert (body["max_tokens"], body["temperature"]) == MOOD_BUDGET


def test_summary_uses_its_own_budget(client, http_post):
    http_post.return_value = _response(200, _completion("You did well today."))
    assert client.generate_summary("text") == "You did well today."
    body = http_post.call_args.kwargs["json"]
    assert (body["max_tokens"], body["temperature"]) == SUMMARY_BUDGET


def test_year_analysis_asks_for_separators(client, http_post):
    http_post.return_value = _response(200, _completion("a\n>-----<\nb"))
    assert client.analyze_year("[2024-01-02] hi", 2024, "What went well?") == "a\n>-----<\nb"
    body = http_post.call_args.kwargs["json"]
    prompt = body["messages"][1]["content"]
    assert ">-----<" in prompt and "What went well?" in prompt and "2024" in prompt
    assert (body["max_tokens"], body["temperature"]) == ANALYSIS_BUDGET


def test_error_status_raises(client, http_post):
    http_post.return_value = _response(500, text="upstream down")
    with pytest.raises(CompletionError) as exc:
        client.generate_mood("text")
    assert isinstance(exc.value.__cause__, httpx.HTTPStatusError)


def test_network_failure_raises(client, http_post):
    http_post.side_effect = httpx.ConnectError("refused", request=httpx.Request("POST", URL))
    with pytest.raises(CompletionError):
        client.generate_summary("text")


@pytest.mark.parametrize("raw, expected", [
    ("Calm", "calm"),
    ("\"Anxious.\"", "anxious"),
    ("Mood: content", "content"),
    ("   ", "neutral"),
])
def test_clean_mood(raw, expected):
    assert clean_mood(raw) == expected


def test_from_config():
    client = CompletionClient.from_config({
        "OPENAI_API_KEY": "k",
        "OPENAI_MODEL": "m",
        "OPENAI_API_URL": URL,
        "HTTP_TIMEOUT": 12.0,
    })
    assert (client.api_key, client.model, client.url, client.timeout) == ("k", "m", URL, 12.0)
