"""Models for the synthesis subsystem."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from repodiagram.llm.models import Conversation


class SynthesisState(str, Enum):
    """Phases of a single synthesis request."""

    FETCHING_SNAPSHOT = "fetching_snapshot"
    REQUESTING_OUTLINE = "requesting_outline"
    REQUESTING_FINAL = "requesting_final"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    CORRECTING = "correcting"
    SUCCESS = "success"
    FAILED = "failed"


class SynthesisResult(BaseModel):
    """A validated diagram plus the transcript that produced it."""

    diagram: str = Field(min_length=1)
    language: str
    model: str
    attempts: int = Field(ge=1)
    conversation: Conversation
