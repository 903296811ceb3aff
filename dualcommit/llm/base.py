"""LLM Base Classes and Shared Code"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import httpx

# Per-phase limits, not a deadline for the whole request: connecting gets
# CONNECT_TIMEOUT, each read, write and pool wait gets REQUEST_TIMEOUT.
# A server that keeps trickling bytes can hold a request open longer.
REQUEST_TIMEOUT = 30.0
CONNECT_TIMEOUT = 10.0


def default_timeout() -> httpx.Timeout:
    return httpx.Timeout(REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT)


@dataclass
class Message:
    role: str
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


class FinishKind(Enum):
    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTERED = "content_filter"
    UNKNOWN = "unknown"
    ABSENT = "absent"


_FINISH_REASONS = {
    "stop": FinishKind.STOP,
    "stop_sequence": FinishKind.STOP,
    "length": FinishKind.LENGTH,
    "content_filter": FinishKind.CONTENT_FILTERED,
}


@dataclass(frozen=True)
class CompletionSignal:
    """Why the provider stopped producing output."""
    kind: FinishKind
    reason: str | None = None

    @classmethod
    def from_finish_reason(cls, reason: str | None) -> 'CompletionSignal':
        if reason is None:
            return cls(FinishKind.ABSENT)
        return cls(_FINISH_REASONS.get(reason, FinishKind.UNKNOWN), reason)

    @classmethod
    def stop(cls) -> 'CompletionSignal':
        return cls(FinishKind.STOP, "stop")


@dataclass
class Completion:
    """Text extracted from one provider response plus its completion signal."""
    text: str
    signal: CompletionSignal


class LLMClient(ABC):
    """One HTTP request per send(); no retries of its own."""

    model: str

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def send(self, messages: list[Message], max_tokens: int) -> str:
        """Issue one request and return the raw response body.

        Raises a taxonomy error from dualcommit.errors on HTTP or transport failure.
        """

    @abstractmethod
    def parse_envelope(self, raw: str) -> Completion:
        """Pull the message text and completion signal out of a raw body."""

    def close(self) -> None:
        """Release any connection pool the client opened."""
