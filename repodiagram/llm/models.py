"""Pydantic models for the LLM subsystem."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from repodiagram.errors import RepoDiagramError


class LLMError(RepoDiagramError):
    """Wraps provider-specific exceptions with context."""

    def __init__(
        self, provider: str, operation: str, cause: Exception, retryable: bool = False
    ) -> None:
        self.provider = provider
        self.operation = operation
        self.retryable = retryable
        super().__init__(f"{provider} {operation} failed: {cause}")
        self.__cause__ = cause


class LLMConfig(BaseModel):
    """Configuration for an LLM provider."""

    provider: Literal["openai", "anthropic"]
    model: str
    max_tokens: int = 16384
    timeout: float = 600.0
    api_key: str | None = None
    base_url: str | None = None


Role = Literal["user", "assistant"]


class ConversationMessage(BaseModel):
    """One turn of a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Conversation(BaseModel):
    """Append-only transcript.

    ``append`` returns a new Conversation; existing turns are never
    modified or dropped.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[ConversationMessage, ...] = ()

    def append(self, role: Role, content: str) -> Conversation:
        return Conversation(
            messages=(*self.messages, ConversationMessage(role=role, content=content))
        )

    def as_input(self) -> list[dict[str, str]]:
        """Serialize as the ``[{role, content}]`` list providers accept."""
        return [{"role": m.role, "content": m.content} for m in self.messages]

    @property
    def last(self) -> ConversationMessage | None:
        return self.messages[-1] if self.messages else None

    def __len__(self) -> int:
        return len(self.messages)
