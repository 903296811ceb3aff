"""LLM Client Package"""

from dualcommit.errors import LLMError
from dualcommit.llm.base import (
    Completion,
    CompletionSignal,
    FinishKind,
    LLMClient,
    Message,
)
from dualcommit.llm.claude import AnthropicClient
from dualcommit.llm.openai_chat import OpenAIClient

PROVIDERS = {
    "openai": OpenAIClient,
    "anthropic": AnthropicClient,
}


def get_client(
    provider: str,
    api_key: str,
    model: str | None = None,
    base_url: str | None = None,
) -> LLMClient:
    """Get an LLM client. Provider can be 'openai' or 'anthropic'."""
    client_class = PROVIDERS.get(provider.lower())
    if client_class is None:
        raise LLMError(f"Unsupported AI provider: {provider}. Use 'openai' or 'anthropic'.")
    return client_class(api_key=api_key, model=model, base_url=base_url)


__all__ = [
    "LLMClient",
    "LLMError",
    "Message",
    "Completion",
    "CompletionSignal",
    "FinishKind",
    "OpenAIClient",
    "AnthropicClient",
    "get_client",
    "PROVIDERS",
]
