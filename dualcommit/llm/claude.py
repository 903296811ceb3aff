"""Anthropic (Claude) Messages Client"""

import json

from dualcommit.errors import InvalidResponseError, LLMError, TransportError, error_for_status
from dualcommit.llm.base import CONNECT_TIMEOUT, REQUEST_TIMEOUT, Completion, CompletionSignal, LLMClient, Message

JSON_ONLY_SUFFIX = "\n\nPlease respond with only the JSON object, no other text."


class AnthropicClient(LLMClient):
    """Claude Messages API client.

    The Messages envelope gives no usable mid-conversation truncation signal
    for our purposes, so every successful response is reported as a stop.
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    SERVICE = "Anthropic"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        http_client=None,
    ):
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = base_url

        if not self.api_key:
            raise LLMError(
                "No API key found. Set ANTHROPIC_API_KEY environment variable:\n"
                "  export ANTHROPIC_API_KEY='your-key-here'"
            )

        try:
            from anthropic import Anthropic, Timeout
        except ImportError:
            raise LLMError(
                "Anthropic SDK not installed. Run:\n"
                "  pip install anthropic"
            )

        kwargs = {
            "api_key": self.api_key,
            # The SDK pins its own HTTP package, so its timeout type must be used
            "timeout": Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT),
            "max_retries": 0,
        }
        if base_url:
            kwargs["base_url"] = base_url.rstrip('/')
        if http_client is not None:
            kwargs["http_client"] = http_client
        self._client = Anthropic(**kwargs)

    def close(self) -> None:
        self._client.close()

    @property
    def name(self) -> str:
        return f"Claude ({self.model})"

    def send(self, messages: list[Message], max_tokens: int) -> str:
        from anthropic import APIConnectionError, APIStatusError, APITimeoutError

        system = "\n\n".join(m.content for m in messages if m.role == "system")
        conversation = [
            {"role": m.role, "content": m.content + JSON_ONLY_SUFFIX if m.role == "user" else m.content}
            for m in messages if m.role != "system"
        ]

        request = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": conversation,
        }
        if system:
            request["system"] = system

        try:
            raw = self._client.messages.with_raw_response.create(**request)
        except APIStatusError as e:
            raise error_for_status(e.status_code, self.SERVICE, e.response.text)
        except APITimeoutError:
            raise TransportError(f"Request to {self.SERVICE} timed out. Check your network or base URL.")
        except APIConnectionError:
            raise TransportError(f"Failed to send request to {self.SERVICE}")

        return raw.http_response.text

    def parse_envelope(self, raw: str) -> Completion:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidResponseError(f"Failed to parse {self.SERVICE} response", detail=raw)

        blocks = data.get('content') if isinstance(data, dict) else None
        for block in blocks or []:
            if isinstance(block, dict) and isinstance(block.get('text'), str):
                return Completion(text=block['text'], signal=CompletionSignal.stop())

        raise InvalidResponseError(f"No response from {self.SERVICE}", detail=raw)
