"""
Tests for the provider clients, using httpx.MockTransport instead of the network.

Run with:
    pytest tests/test_providers.py -v
"""

import importlib
import json

import anthropic
import httpx
import pytest

from dualcommit.errors import (
    AuthError,
    InvalidResponseError,
    LLMError,
    PermissionDeniedError,
    RateLimitedError,
    RequestFailedError,
    TransportError,
    UpstreamServiceError,
    error_for_status,
)
from dualcommit.llm import AnthropicClient, OpenAIClient, get_client
from dualcommit.llm.base import CONNECT_TIMEOUT, REQUEST_TIMEOUT, CompletionSignal, FinishKind, Message
from dualcommit.llm.claude import JSON_ONLY_SUFFIX

# The Anthropic SDK ships on its own pinned HTTP package, which may not be httpx
sdk_http = importlib.import_module(anthropic.DefaultHttpxClient.__mro__[1].__module__.partition('.')[0])

SECRET_BODY = '{"error":{"message":"Incorrect API key provided: sk-abc***xyz"}}'

MESSAGES = [
    Message("system", "You generate commit messages."),
    Message("system", "Keep it short."),
    Message("user", "diff --git a/x b/x"),
]


def openai_body(content='{"type":"feat"}', finish_reason="stop"):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": finish_reason,
        }],
    }


def anthropic_body(text='{"type":"feat"}'):
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": "claude-sonnet-4-20250514",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 10, "output_tokens": 5},
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def recorder():
    """Return (requests, wrap) where wrap records each request before handling it."""
    requests = []

    def wrap(handler):
        def _handle(request):
            requests.append(request)
            return handler(request)
        return _handle

    return requests, wrap


@pytest.fixture
def openai_client(recorder):
    """Return a factory producing an OpenAIClient backed by a handler."""
    _, wrap = recorder

    def _make(handler, **kwargs):
        http = httpx.Client(transport=httpx.MockTransport(wrap(handler)))
        return OpenAIClient(api_key="sk-test", http_client=http, **kwargs)
    return _make


@pytest.fixture
def anthropic_client(recorder):
    _, wrap = recorder

    def _make(handler, **kwargs):
        http = anthropic.DefaultHttpxClient(transport=sdk_http.MockTransport(wrap(handler)))
        return AnthropicClient(api_key="sk-ant-test", http_client=http, **kwargs)
    return _make


# ---------------------------------------------------------------------------
# error_for_status
# ---------------------------------------------------------------------------

class TestErrorForStatus:

    @pytest.mark.parametrize("status, cls, message", [
        (401, AuthError, "Authentication failed. Please check your API key. (Status: 401)"),
        (403, PermissionDeniedError, "Access forbidden. Please check your API permissions. (Status: 403)"),
        (429, RateLimitedError, "Rate limit exceeded. Please try again later. (Status: 429)"),
        (500, UpstreamServiceError, "OpenAI service error. Please try again later. (Status: 500)"),
        (503, UpstreamServiceError, "OpenAI service error. Please try again later. (Status: 503)"),
        (400, RequestFailedError, "Request failed. Please check your configuration. (Status: 400)"),
        (404, RequestFailedError, "Request failed. Please check your configuration. (Status: 404)"),
    ])
    def test_mapping(self, status, cls, message):
        err = error_for_status(status, "OpenAI", SECRET_BODY)
        assert type(err) is cls
        assert str(err) == message
        assert err.status == status

    def test_body_kept_out_of_message(self):
        err = error_for_status(401, "OpenAI", SECRET_BODY)
        assert "sk-abc" not in str(err)
        assert err.detail == SECRET_BODY

    def test_all_are_llm_errors(self):
        assert isinstance(error_for_status(418, "OpenAI"), LLMError)


# ---------------------------------------------------------------------------
# OpenAIClient.send
# ---------------------------------------------------------------------------

class TestOpenAISend:

    def test_request_shape(self, recorder, openai_client):
        requests, _ = recorder
        client = openai_client(lambda r: httpx.Response(200, json=openai_body()))
        client.send(MESSAGES, 2000)

        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"

        payload = json.loads(request.content)
        assert payload["model"] == "gpt-4.1"
        assert payload["max_tokens"] == 2000
        assert payload["temperature"] == 0.7
        assert payload["response_format"] == {"type": "json_object"}
        assert [m["role"] for m in payload["messages"]] == ["system", "system", "user"]

    def test_custom_base_url_and_model(self, recorder, openai_client):
        requests, _ = recorder
        client = openai_client(
            lambda r: httpx.Response(200, json=openai_body()),
            model="deepseek-chat",
            base_url="https://gateway.example.com/v1/",
        )
        client.send(MESSAGES, 500)
        assert str(requests[0].url) == "https://gateway.example.com/v1/chat/completions"
        assert json.loads(requests[0].content)["model"] == "deepseek-chat"
        assert client.name == "OpenAI (deepseek-chat)"

    def test_returns_raw_body(self, openai_client):
        body = "data: {}\n\ndata: [DONE]\n"
        client = openai_client(lambda r: httpx.Response(200, text=body))
        assert client.send(MESSAGES, 100) == body

    @pytest.mark.parametrize("status, cls", [
        (401, AuthError),
        (403, PermissionDeniedError),
        (429, RateLimitedError),
        (502, UpstreamServiceError),
        (400, RequestFailedError),
    ])
    def test_status_errors(self, openai_client, status, cls):
        client = openai_client(lambda r: httpx.Response(status, text=SECRET_BODY))
        with pytest.raises(cls) as exc_info:
            client.send(MESSAGES, 100)
        assert f"(Status: {status})" in str(exc_info.value)
        assert "sk-abc" not in str(exc_info.value)
        assert exc_info.value.detail == SECRET_BODY

    def test_connection_error(self, openai_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        client = openai_client(handler)
        with pytest.raises(TransportError, match="Failed to send request to OpenAI"):
            client.send(MESSAGES, 100)

    def test_timeout(self, openai_client):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)
        client = openai_client(handler)
        with pytest.raises(TransportError, match="timed out"):
            client.send(MESSAGES, 100)

    def test_timeout_is_a_request_failure(self, openai_client):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)
        client = openai_client(handler)
        with pytest.raises(RequestFailedError):
            client.send(MESSAGES, 100)

    def test_close_releases_own_http_client(self):
        client = OpenAIClient(api_key="sk-test")
        client.close()
        assert client._http.is_closed

    def test_close_leaves_injected_client_open(self, openai_client):
        client = openai_client(lambda r: httpx.Response(200, json=openai_body()))
        client.close()
        assert not client._http.is_closed
        client.send(MESSAGES, 100)


# ---------------------------------------------------------------------------
# OpenAIClient.parse_envelope
# ---------------------------------------------------------------------------

class TestOpenAIEnvelope:

    @pytest.fixture
    def client(self, openai_client):
        return openai_client(lambda r: httpx.Response(200))

    def test_content_and_stop(self, client):
        completion = client.parse_envelope(json.dumps(openai_body('{"a":1}')))
        assert completion.text == '{"a":1}'
        assert completion.signal.kind == FinishKind.STOP

    @pytest.mark.parametrize("reason, kind", [
        ("length", FinishKind.LENGTH),
        ("content_filter", FinishKind.CONTENT_FILTERED),
        ("tool_calls", FinishKind.UNKNOWN),
        (None, FinishKind.ABSENT),
    ])
    def test_finish_reasons(self, client, reason, kind):
        completion = client.parse_envelope(json.dumps(openai_body("{}", reason)))
        assert completion.signal.kind == kind
        assert completion.signal.reason == reason

    def test_null_content_when_truncated(self, client):
        completion = client.parse_envelope(json.dumps(openai_body(None, "length")))
        assert completion.text == ""
        assert completion.signal.kind == FinishKind.LENGTH

    def test_null_content_otherwise_invalid(self, client):
        raw = json.dumps(openai_body(None, "stop"))
        with pytest.raises(InvalidResponseError, match="Response content is null") as exc_info:
            client.parse_envelope(raw)
        assert exc_info.value.detail == raw

    @pytest.mark.parametrize("raw", [
        '{"choices": []}',
        '{"object": "chat.completion"}',
        '[]',
        '{"choices": {"0": {"message": {"content": "{}"}, "finish_reason": "stop"}}}',
        '{"choices": "none"}',
    ])
    def test_no_choices(self, client, raw):
        with pytest.raises(InvalidResponseError, match="No response from OpenAI") as exc_info:
            client.parse_envelope(raw)
        assert exc_info.value.detail == raw

    @pytest.mark.parametrize("content", [
        [{"type": "text", "text": "{}"}],
        {"text": "{}"},
        42,
    ])
    def test_non_text_content_invalid(self, client, content):
        raw = json.dumps(openai_body(content, "stop"))
        with pytest.raises(InvalidResponseError, match="not text") as exc_info:
            client.parse_envelope(raw)
        assert exc_info.value.detail == raw

    def test_not_json(self, client):
        with pytest.raises(InvalidResponseError, match="Failed to parse OpenAI response") as exc_info:
            client.parse_envelope("<html>Bad Gateway</html>")
        assert exc_info.value.detail == "<html>Bad Gateway</html>"


# ---------------------------------------------------------------------------
# AnthropicClient
# ---------------------------------------------------------------------------

class TestAnthropicClient:

    def test_requires_api_key(self):
        with pytest.raises(LLMError, match="ANTHROPIC_API_KEY"):
            AnthropicClient(api_key="")

    def test_timeout_uses_sdk_type(self):
        client = AnthropicClient(api_key="sk-ant-test")
        assert client._client.timeout == anthropic.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT)
        assert client._client.max_retries == 0
        client.close()

    def test_default_model(self, anthropic_client):
        client = anthropic_client(lambda r: sdk_http.Response(200, json=anthropic_body()))
        assert client.model == "claude-sonnet-4-20250514"
        assert client.name == "Claude (claude-sonnet-4-20250514)"

    def test_system_and_suffix(self, recorder, anthropic_client):
        requests, _ = recorder
        client = anthropic_client(lambda r: sdk_http.Response(200, json=anthropic_body()))
        client.send(MESSAGES, 1234)

        request = requests[0]
        assert request.url.path.endswith("/v1/messages")
        payload = json.loads(request.content)
        assert payload["max_tokens"] == 1234
        assert payload["system"] == "You generate commit messages.\n\nKeep it short."
        assert payload["messages"] == [
            {"role": "user", "content": "diff --git a/x b/x" + JSON_ONLY_SUFFIX},
        ]

    def test_returns_raw_body(self, anthropic_client):
        body = anthropic_body("hello")
        client = anthropic_client(lambda r: sdk_http.Response(200, json=body))
        raw = client.send(MESSAGES, 100)
        assert json.loads(raw) == body

    @pytest.mark.parametrize("status, cls", [
        (401, AuthError),
        (403, PermissionDeniedError),
        (429, RateLimitedError),
        (500, UpstreamServiceError),
        (400, RequestFailedError),
    ])
    def test_status_errors(self, anthropic_client, status, cls):
        client = anthropic_client(lambda r: sdk_http.Response(status, text=SECRET_BODY))
        with pytest.raises(cls) as exc_info:
            client.send(MESSAGES, 100)
        assert "sk-abc" not in str(exc_info.value)
        assert exc_info.value.detail == SECRET_BODY

    def test_single_request_per_send(self, recorder, anthropic_client):
        requests, _ = recorder
        client = anthropic_client(lambda r: sdk_http.Response(503, text="overloaded"))
        with pytest.raises(UpstreamServiceError):
            client.send(MESSAGES, 100)
        assert len(requests) == 1

    def test_connection_error(self, anthropic_client):
        def handler(request):
            raise sdk_http.ConnectError("connection refused", request=request)
        client = anthropic_client(handler)
        with pytest.raises(TransportError):
            client.send(MESSAGES, 100)

    def test_envelope_first_text_block(self, anthropic_client):
        client = anthropic_client(lambda r: sdk_http.Response(200))
        raw = json.dumps({"content": [{"type": "tool_use", "id": "t"}, {"type": "text", "text": "{}"}]})
        completion = client.parse_envelope(raw)
        assert completion.text == "{}"
        assert completion.signal == CompletionSignal.stop()

    @pytest.mark.parametrize("raw", [
        '{"content": []}',
        '{"type": "message"}',
        'not json',
    ])
    def test_envelope_invalid(self, anthropic_client, raw):
        client = anthropic_client(lambda r: sdk_http.Response(200))
        with pytest.raises(InvalidResponseError):
            client.parse_envelope(raw)


# ---------------------------------------------------------------------------
# get_client
# ---------------------------------------------------------------------------

class TestGetClient:

    @pytest.mark.parametrize("provider, cls", [
        ("openai", OpenAIClient),
        ("OpenAI", OpenAIClient),
        ("anthropic", AnthropicClient),
        ("ANTHROPIC", AnthropicClient),
    ])
    def test_known_providers(self, provider, cls):
        client = get_client(provider, api_key="key", model="some-model")
        assert isinstance(client, cls)
        assert client.model == "some-model"

    def test_unknown_provider(self):
        with pytest.raises(LLMError, match="Unsupported AI provider: ollama"):
            get_client("ollama", api_key="key")
