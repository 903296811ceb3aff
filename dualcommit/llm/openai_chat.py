"""OpenAI-compatible Chat Completions Client"""

import json

import httpx

from dualcommit.errors import InvalidResponseError, TransportError, error_for_status
from dualcommit.llm.base import Completion, CompletionSignal, LLMClient, Message, default_timeout


class OpenAIClient(LLMClient):
    """Chat Completions over plain HTTP. Works with OpenAI and compatible gateways."""

    DEFAULT_MODEL = "gpt-4.1"
    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    TEMPERATURE = 0.7
    SERVICE = "OpenAI"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip('/')
        # An injected client belongs to the caller and is left open by close()
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=default_timeout())

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    @property
    def name(self) -> str:
        return f"OpenAI ({self.model})"

    def send(self, messages: list[Message], max_tokens: int) -> str:
        payload = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.TEMPERATURE,
            "max_tokens": max_tokens,
            "response_format": {"type": "json_object"},
        }

        try:
            response = self._http.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )
        except httpx.TimeoutException:
            raise TransportError(f"Request to {self.SERVICE} timed out. Check your network or base URL.")
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to send request to {self.SERVICE}: {type(e).__name__}")

        if not response.is_success:
            raise error_for_status(response.status_code, self.SERVICE, response.text)

        return response.text

    def parse_envelope(self, raw: str) -> Completion:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            raise InvalidResponseError(f"Failed to parse {self.SERVICE} response", detail=raw)

        choices = data.get('choices') if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise InvalidResponseError(f"No response from {self.SERVICE}", detail=raw)

        choice = choices[0]
        signal = CompletionSignal.from_finish_reason(choice.get('finish_reason'))
        message = choice.get('message')
        content = message.get('content') if isinstance(message, dict) else None

        if content is None:
            # A truncated answer may carry no content at all
            if signal.reason != "length":
                raise InvalidResponseError("Response content is null", detail=raw)
            content = ""
        elif not isinstance(content, str):
            raise InvalidResponseError("Response content is not text", detail=raw)

        return Completion(text=content, signal=signal)
