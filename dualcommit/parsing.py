"""Recover a structured object from free-form model output."""

from typing import TypeVar

from dualcommit.errors import NoExtractableJsonError, SchemaParseError

T = TypeVar('T')

FENCE = "```"


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` or ```json fence. Other text is returned as-is."""
    stripped = text.strip()
    if not (stripped.startswith(FENCE) and stripped.endswith(FENCE) and len(stripped) >= 2 * len(FENCE)):
        return text
    inner = stripped[len(FENCE):-len(FENCE)]
    if inner.startswith("json"):
        inner = inner[len("json"):]
    return inner.strip()


def extract_json_object(text: str) -> str | None:
    """Return the first balanced {...} span in text, or None.

    Braces inside string literals are counted like any other brace, so a
    literal "{" or "}" in a value can throw the scan off.
    """
    depth = 0
    start = None

    for idx, ch in enumerate(text):
        if ch == '{':
            if depth == 0 and start is None:
                start = idx
            depth += 1
        elif ch == '}':
            if depth > 0:
                depth -= 1
            if depth == 0 and start is not None:
                return text[start:idx + 1]

    return None


def parse_response(text: str, schema: type[T]) -> T:
    """Parse model output into schema, falling back to brace extraction.

    schema must provide a from_json classmethod raising SchemaParseError.
    """
    clean = strip_code_fence(text)

    try:
        return schema.from_json(clean)
    except SchemaParseError as primary:
        candidate = extract_json_object(clean)
        if candidate is None:
            raise NoExtractableJsonError(
                f"No valid JSON object found in AI response: {primary}", clean
            ) from primary

        try:
            return schema.from_json(candidate)
        except SchemaParseError as secondary:
            raise SchemaParseError(
                f"Failed to parse extracted JSON from AI response ({primary})",
                candidate,
                primary=primary,
            ) from secondary
