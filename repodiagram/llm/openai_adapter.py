"""OpenAI Responses API adapter for repodiagram."""

from __future__ import annotations

from openai import APIError, AsyncOpenAI, RateLimitError

from repodiagram.llm.base import LLMProvider
from repodiagram.llm.models import Conversation, LLMConfig, LLMError
from repodiagram.llm.responses import FlatResponse, StructuredResponse, normalize_response


class OpenAIProvider(LLMProvider):
    """OpenAI adapter using the async SDK's Responses endpoint."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncOpenAI(
            api_key=config.api_key,  # falls back to OPENAI_API_KEY env var
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=2,
        )

    async def respond(
        self, conversation: Conversation
    ) -> FlatResponse | StructuredResponse:
        try:
            response = await self._client.responses.create(
                model=self.config.model,
                input=conversation.as_input(),
                max_output_tokens=self.config.max_tokens,
            )
        except APIError as e:
            raise LLMError(
                "openai", "respond", e, retryable=isinstance(e, RateLimitError)
            ) from e

        payload = response.model_dump()
        # output_text is an SDK convenience property, not a serialized field
        payload["output_text"] = getattr(response, "output_text", None)
        return normalize_response(payload)
