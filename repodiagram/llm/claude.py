"""Anthropic Claude adapter for repodiagram."""

from __future__ import annotations

from anthropic import APIError, AsyncAnthropic, RateLimitError

from repodiagram.llm.base import LLMProvider
from repodiagram.llm.models import Conversation, LLMConfig, LLMError
from repodiagram.llm.responses import FlatResponse, StructuredResponse, normalize_response


class ClaudeProvider(LLMProvider):
    """Claude adapter using the Anthropic async SDK.

    Messages API replies carry a list of content blocks; they are mapped onto
    a single structured output item so text extraction treats them like any
    other structured response.
    """

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncAnthropic(
            api_key=config.api_key,  # falls back to ANTHROPIC_API_KEY env var
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=2,
        )

    async def respond(
        self, conversation: Conversation
    ) -> FlatResponse | StructuredResponse:
        try:
            message = await self._client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                messages=conversation.as_input(),
            )
        except APIError as e:
            raise LLMError(
                "claude", "respond", e, retryable=isinstance(e, RateLimitError)
            ) from e

        return normalize_response(
            {
                "id": message.id,
                "status": message.stop_reason or "completed",
                "output": [
                    {
                        "type": "message",
                        "content": [
                            {"type": block.type, "text": getattr(block, "text", None)}
                            for block in message.content
                        ],
                    }
                ],
            }
        )
