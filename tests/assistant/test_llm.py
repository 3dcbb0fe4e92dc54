"""Tests for the OpenAI completion client against a mocked HTTP transport."""

import asyncio
import json

import httpx
import pytest

from lifesim.assistant.llm import OpenAICompletionClient, UpstreamError

MESSAGES = [{"role": "system", "content": "be brief"}, {"role": "user", "content": "hi"}]


def completion_body(choices):
    return {"id": "cmpl-1", "object": "chat.completion", "created": 0, "model": "gpt-test", "choices": choices}


def make_client(handler):
    transport = httpx.MockTransport(handler)
    return OpenAICompletionClient(
        api_key="sk-test",
        model="gpt-test",
        base_url="http://upstream.test/v1",
        http_client=httpx.AsyncClient(transport=transport),
    )


def complete(client):
    return asyncio.run(client.complete(MESSAGES, temperature=0.7, max_tokens=1500))


def test_json_mode_request():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=completion_body([
            {"index": 0, "message": {"role": "assistant", "content": '{"ok": true}'}, "finish_reason": "stop"}
        ]))

    assert complete(make_client(handler)) == '{"ok": true}'
    assert requests[0].url.path == "/v1/chat/completions"
    sent = json.loads(requests[0].content)
    assert sent["model"] == "gpt-test"
    assert sent["messages"] == MESSAGES
    assert sent["response_format"] == {"type": "json_object"}
    assert (sent["temperature"], sent["max_tokens"]) == (0.7, 1500)


def test_empty_choices():
    client = make_client(lambda request: httpx.Response(200, json=completion_body([])))
    assert complete(client) is None


def test_status_error_passes_through_without_retry():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(429, json={"error": {"message": "rate limited", "type": "rate_limit"}})

    with pytest.raises(UpstreamError) as exc:
        complete(make_client(handler))
    assert exc.value.status_code == 429
    assert exc.value.details["message"] == "rate limited"
    assert len(calls) == 1


def test_connection_error_is_502():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as exc:
        complete(make_client(handler))
    assert exc.value.status_code == 502
    assert "message" in exc.value.details
