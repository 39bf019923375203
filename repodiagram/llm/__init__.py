"""Language-model providers that speak the conversation/response protocol."""

import os

from repodiagram.config.models import LLMSettings
from repodiagram.llm.base import LLMProvider
from repodiagram.llm.claude import ClaudeProvider
from repodiagram.llm.models import Conversation, ConversationMessage, LLMConfig, LLMError
from repodiagram.llm.openai_adapter import OpenAIProvider
from repodiagram.llm.responses import (
    ExtractedText,
    FlatResponse,
    ModelResponse,
    StructuredResponse,
    extract_text,
    normalize_response,
)

PROVIDERS: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": ClaudeProvider,
}


def create_llm_provider(settings: LLMSettings, model: str | None = None) -> LLMProvider:
    """Build the provider named by *settings*, keyed from its API key env var.

    *model* replaces ``settings.model`` for this provider only. Raises
    ValueError for an unknown provider or an unset key; callers that inject
    their own provider never reach this check.
    """
    provider_cls = PROVIDERS.get(settings.provider)
    if provider_cls is None:
        raise ValueError(
            f"Unsupported LLM provider: {settings.provider!r} "
            f"(expected one of {', '.join(sorted(PROVIDERS))})"
        )
    api_key = os.environ.get(settings.api_key_env, "").strip()
    if not api_key:
        raise ValueError(f"Missing API key: {settings.api_key_env} is not set")
    return provider_cls(
        LLMConfig(
            provider=settings.provider,
            model=model or settings.model,
            max_tokens=settings.max_tokens,
            timeout=settings.timeout,
            api_key=api_key,
            base_url=settings.base_url,
        )
    )


__all__ = [
    "ClaudeProvider",
    "Conversation",
    "ConversationMessage",
    "ExtractedText",
    "FlatResponse",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "ModelResponse",
    "OpenAIProvider",
    "PROVIDERS",
    "StructuredResponse",
    "create_llm_provider",
    "extract_text",
    "normalize_response",
]
