"""Response Generator - Drive one provider conversation to a typed result.

Each call runs a bounded, strictly sequential loop:

    send -> decode (stream or envelope) -> check finish reason -> parse

A truncated answer (finish_reason=length) is retried with a doubled token
budget and an extra instruction asking for a short, complete object. Every
other failure ends the call.
"""

from typing import TypeVar

from dualcommit.errors import (
    ContentFilteredError,
    LLMError,
    TruncatedResponseError,
    UnexpectedFinishReasonError,
)
from dualcommit.git.analyzer import CommitInfo
from dualcommit.llm.base import Completion, CompletionSignal, FinishKind, LLMClient, Message
from dualcommit.output import print_debug
from dualcommit.parsing import parse_response
from dualcommit.prompts.builder import (
    CHANGELOG_SYSTEM_PROMPT,
    COMMIT_SYSTEM_PROMPT,
    TRUNCATION_RETRY_PROMPT,
    ChangelogContext,
    CommitContext,
    PromptBuilder,
)
from dualcommit.schema import ChangelogSummary, CommitMessage
from dualcommit.stream import decode_stream

T = TypeVar('T')

DEFAULT_MAX_TOKENS = 2000
MAX_TOKENS_CEILING = 4000
COMMIT_MAX_ATTEMPTS = 4
CHANGELOG_MAX_ATTEMPTS = 1


def grow_budget(max_tokens: int) -> int:
    return min(max_tokens * 2, MAX_TOKENS_CEILING)


class ResponseGenerator:
    """Turns diffs and commit lists into CommitMessage / ChangelogSummary."""

    def __init__(
        self,
        client: LLMClient,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        debug: bool = False,
        prompt_builder: PromptBuilder | None = None,
    ):
        self.client = client
        self.max_tokens = max_tokens
        self.debug = debug
        self.prompts = prompt_builder or PromptBuilder()

    def generate_commit_message(self, diff: str, context: CommitContext) -> CommitMessage:
        prompt = self.prompts.build_commit(diff, context)
        return self._run(prompt, COMMIT_SYSTEM_PROMPT, CommitMessage, COMMIT_MAX_ATTEMPTS)

    def generate_changelog(self, commits: list[CommitInfo], context: ChangelogContext) -> ChangelogSummary:
        prompt = self.prompts.build_changelog(commits, context)
        return self._run(prompt, CHANGELOG_SYSTEM_PROMPT, ChangelogSummary, CHANGELOG_MAX_ATTEMPTS)

    def _messages(self, prompt: str, system_prompt: str, attempt: int) -> list[Message]:
        messages = [Message("system", system_prompt)]
        if attempt > 0:
            messages.append(Message("system", TRUNCATION_RETRY_PROMPT))
        messages.append(Message("user", prompt))
        return messages

    def _send(self, messages: list[Message], max_tokens: int) -> str:
        try:
            raw = self.client.send(messages, max_tokens)
        except LLMError as e:
            if self.debug and e.detail:
                print_debug("Full error response", e.detail)
            raise
        if self.debug:
            print_debug("Raw HTTP Response", raw)
        return raw

    def _interpret(self, raw: str) -> Completion:
        streamed = decode_stream(raw)
        if streamed is not None:
            if self.debug:
                print_debug("Detected SSE streaming response", "")
            # Only truncation is acted on; stream vendors spell their other reasons freely
            signal = (CompletionSignal(FinishKind.LENGTH, "length")
                      if streamed.finish_reason == "length" else CompletionSignal.stop())
            completion = Completion(text=streamed.content, signal=signal)
        else:
            try:
                completion = self.client.parse_envelope(raw)
            except LLMError as e:
                if self.debug and e.detail:
                    print_debug("Unparseable response body", e.detail)
                raise

        if self.debug:
            print_debug("AI Message Content", completion.text)
        return completion

    def _run(self, prompt: str, system_prompt: str, schema: type[T], max_attempts: int) -> T:
        max_tokens = self.max_tokens

        for attempt in range(max_attempts):
            raw = self._send(self._messages(prompt, system_prompt, attempt), max_tokens)
            completion = self._interpret(raw)
            kind = completion.signal.kind
            is_last = attempt + 1 == max_attempts

            if kind == FinishKind.LENGTH:
                if is_last and not completion.text.strip():
                    raise TruncatedResponseError(
                        "AI response was truncated repeatedly, resulting in empty content. "
                        "Try reducing the diff size or switching models."
                    )
                if is_last:
                    raise TruncatedResponseError(
                        "AI response was truncated before completing the JSON (finish_reason=length). "
                        "Try reducing the diff size or switching models."
                    )
                max_tokens = grow_budget(max_tokens)
                if self.debug:
                    print_debug(f"finish_reason=length, retrying with max_tokens={max_tokens}", "")
                continue

            if kind == FinishKind.CONTENT_FILTERED:
                raise ContentFilteredError("The response was blocked by the provider's content filter.")

            if kind == FinishKind.UNKNOWN:
                raise UnexpectedFinishReasonError(completion.signal.reason)

            return parse_response(completion.text, schema)

        raise TruncatedResponseError(f"No complete response after {max_attempts} attempts")
