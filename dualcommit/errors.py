"""Error taxonomy for the generation pipeline.

HTTP-level errors carry a sanitized message only. The provider's raw error body
is kept on ``detail`` for the ``--debug`` channel and is never part of
``str(error)``.
"""

SNIPPET_LIMIT = 200


def _snippet(text: str, limit: int = SNIPPET_LIMIT) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class LLMError(Exception):
    """Raised when LLM operations fail."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.detail = detail


# HTTP status taxonomy

class AuthError(LLMError):
    """401 from the provider."""


class PermissionDeniedError(LLMError):
    """403 from the provider."""


class RateLimitedError(LLMError):
    """429 from the provider."""


class UpstreamServiceError(LLMError):
    """5xx from the provider."""


class RequestFailedError(LLMError):
    """Any other non-2xx status."""


class TransportError(RequestFailedError):
    """Connection failure or timeout before a status was received."""


class InvalidResponseError(LLMError):
    """A 2xx body that does not match the provider's response envelope."""


# Completion signal failures

class TruncatedResponseError(LLMError):
    """Output kept hitting the token budget (finish_reason=length)."""


class ContentFilteredError(LLMError):
    """The provider's content filter blocked the response."""


class UnexpectedFinishReasonError(LLMError):
    """A finish reason the pipeline does not know how to handle."""

    def __init__(self, reason: str):
        super().__init__(f"Unexpected finish_reason '{reason}' from AI response.")
        self.reason = reason


# Payload failures

class SchemaParseError(LLMError):
    """Response text could not be coerced into the expected structure."""

    def __init__(self, message: str, text: str = "", primary: "SchemaParseError | None" = None):
        self.snippet = _snippet(text) if text else ""
        self.primary = primary
        full = f"{message}: {self.snippet}" if self.snippet else message
        super().__init__(full)


class NoExtractableJsonError(LLMError):
    """No balanced JSON object could be located in the response text."""

    def __init__(self, message: str, text: str = ""):
        self.snippet = _snippet(text) if text else ""
        super().__init__(message)


_SAFE_MESSAGES = {
    401: (AuthError, "Authentication failed. Please check your API key."),
    403: (PermissionDeniedError, "Access forbidden. Please check your API permissions."),
    429: (RateLimitedError, "Rate limit exceeded. Please try again later."),
}


def error_for_status(status: int, service: str, body: str | None = None) -> LLMError:
    """Map a non-2xx status code to a sanitized taxonomy error."""
    if status in _SAFE_MESSAGES:
        cls, message = _SAFE_MESSAGES[status]
    elif 500 <= status <= 599:
        cls, message = UpstreamServiceError, f"{service} service error. Please try again later."
    else:
        cls, message = RequestFailedError, "Request failed. Please check your configuration."
    error = cls(f"{message} (Status: {status})", detail=body)
    error.status = status
    return error


__all__ = [
    "LLMError",
    "AuthError",
    "PermissionDeniedError",
    "RateLimitedError",
    "UpstreamServiceError",
    "RequestFailedError",
    "TransportError",
    "InvalidResponseError",
    "TruncatedResponseError",
    "ContentFilteredError",
    "UnexpectedFinishReasonError",
    "SchemaParseError",
    "NoExtractableJsonError",
    "error_for_status",
]
