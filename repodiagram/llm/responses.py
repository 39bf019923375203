"""Normalization of model responses into plain text.

The service answers in one of two shapes: a flattened ``output_text``
string, or a list of output items whose text may sit on the item itself or
in nested content fragments. Raw payloads are classified into a tagged union
and reduced to a single ExtractedText.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from repodiagram.errors import ResponseShapeError


class ResponseContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None


class ResponseOutput(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None
    content: list[ResponseContent] | None = None


class ResponsesPayload(BaseModel):
    """Loose schema of a raw service response; unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    id: str
    status: str | None = None
    output_text: str | None = None
    output: list[ResponseOutput] | None = None


class FlatResponse(BaseModel):
    kind: Literal["flat"] = "flat"
    id: str
    status: str | None = None
    output_text: str


class StructuredResponse(BaseModel):
    kind: Literal["structured"] = "structured"
    id: str
    status: str | None = None
    output: list[ResponseOutput] = Field(default_factory=list)


ModelResponse = Annotated[
    Union[FlatResponse, StructuredResponse], Field(discriminator="kind")
]


class ExtractedText(BaseModel):
    """Model output reduced to text, with the shape it came from."""

    text: str
    source: Literal["output_text", "output"]
    response_id: str


def normalize_response(raw: Mapping[str, Any] | ResponsesPayload) -> FlatResponse | StructuredResponse:
    """Classify a raw payload as flat (non-blank output_text) or structured."""
    if isinstance(raw, ResponsesPayload):
        payload = raw
    else:
        try:
            payload = ResponsesPayload.model_validate(raw)
        except ValidationError as e:
            raise ResponseShapeError(f"Malformed Responses API payload: {e}") from e
    if payload.output_text and payload.output_text.strip():
        return FlatResponse(id=payload.id, status=payload.status, output_text=payload.output_text)
    return StructuredResponse(id=payload.id, status=payload.status, output=payload.output or [])


def extract_text(response: FlatResponse | StructuredResponse) -> ExtractedText:
    """Reduce a normalized response to its text.

    Structured output is the newline-join of every item's text followed by
    its nested fragments, in order. Raises ResponseShapeError when nothing
    non-blank remains.
    """
    if isinstance(response, FlatResponse):
        return ExtractedText(
            text=response.output_text.strip(), source="output_text", response_id=response.id
        )

    collected: list[str] = []
    for item in response.output:
        if item.text:
            collected.append(item.text)
        for fragment in item.content or []:
            if fragment.text:
                collected.append(fragment.text)
    combined = "\n".join(collected).strip()
    if not combined:
        raise ResponseShapeError("Responses API payload did not include textual output.")
    return ExtractedText(text=combined, source="output", response_id=response.id)
