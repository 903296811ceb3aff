"""Reassemble SSE-style streamed chat completions into one payload.

Some OpenAI-compatible gateways answer with an event stream even when the
request did not ask for one:

    data: {"choices":[{"delta":{"content":"{\\"type\\":"},"finish_reason":null}]}
    data: {"choices":[{"delta":{"content":"\\"feat\\"}"},"finish_reason":"stop"}]}
    data: [DONE]
"""

import json
from dataclasses import dataclass

DATA_PREFIX = "data: "
DONE_TOKEN = "[DONE]"


@dataclass
class DecodedStream:
    content: str
    finish_reason: str | None = None


def _chunk_choices(data: str) -> list[dict]:
    try:
        chunk = json.loads(data)
    except json.JSONDecodeError:
        return []
    if not isinstance(chunk, dict):
        return []
    choices = chunk.get('choices')
    if not isinstance(choices, list):
        return []
    return [c for c in choices if isinstance(c, dict)]


def decode_stream(text: str) -> DecodedStream | None:
    """Concatenate delta contents in line order.

    Returns None when no line carries the data prefix, or when stream lines
    were found but produced no content.
    """
    parts = []
    finish_reason = None
    is_streaming = False

    for line in text.splitlines():
        line = line.strip()
        if not line.startswith(DATA_PREFIX):
            continue

        is_streaming = True
        data = line[len(DATA_PREFIX):]
        if data == DONE_TOKEN:
            continue

        for choice in _chunk_choices(data):
            delta = choice.get('delta')
            if isinstance(delta, dict) and isinstance(delta.get('content'), str):
                parts.append(delta['content'])
            if choice.get('finish_reason'):
                finish_reason = choice['finish_reason']

    content = "".join(parts)
    if not is_streaming or not content:
        return None
    return DecodedStream(content=content, finish_reason=finish_reason)
