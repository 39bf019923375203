"""Abstract LLM interface for repodiagram."""

from __future__ import annotations

from abc import ABC, abstractmethod

from repodiagram.llm.models import Conversation, LLMConfig
from repodiagram.llm.responses import FlatResponse, StructuredResponse


class LLMProvider(ABC):
    """Provider-agnostic interface for multi-turn diagram synthesis.

    Adapters send the whole conversation on every call and hand back the
    reply normalized to one of the two response shapes, so the synthesis
    loop never sees a vendor schema.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    @abstractmethod
    async def respond(
        self, conversation: Conversation
    ) -> FlatResponse | StructuredResponse:
        """Send *conversation* and return the normalized reply."""
        ...
