"""Wire models for the Gemini ``generateContent`` REST API.

Field names are camelCase on the wire (``functionCall``, ``functionResponse``,
``functionDeclarations``, ``generationConfig``) and snake_case in Python.
Always serialize through :meth:`GeminiModel.to_wire` so aliases are used and
unset optional fields are left out.

A :class:`Part` holds exactly one of ``text``, ``function_call`` or
``function_response``; unknown part kinds (inline data, thoughts, ...) are
accepted on input and ignored by the translators.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class GeminiModel(BaseModel):
    """Base for wire models: camelCase aliases, unknown fields tolerated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FunctionCall(GeminiModel):
    name: str
    args: dict[str, Any] = {}


class FunctionResponse(GeminiModel):
    name: str
    response: dict[str, Any]


class Part(GeminiModel):
    text: str | None = None
    function_call: FunctionCall | None = None
    function_response: FunctionResponse | None = None

    @model_validator(mode="after")
    def _at_most_one_kind(self) -> Part:
        present = [
            field
            for field in ("text", "function_call", "function_response")
            if getattr(self, field) is not None
        ]
        if len(present) > 1:
            msg = f"A part holds exactly one kind, got {', '.join(present)}"
            raise ValueError(msg)
        return self

    @classmethod
    def from_text(cls, text: str) -> Part:
        return cls(text=text)

    @classmethod
    def from_function_call(cls, name: str, args: dict[str, Any]) -> Part:
        return cls(function_call=FunctionCall(name=name, args=args))

    @classmethod
    def from_function_response(cls, name: str, response: dict[str, Any]) -> Part:
        return cls(function_response=FunctionResponse(name=name, response=response))


class Content(GeminiModel):
    role: Literal["user", "model"] | None = None
    parts: list[Part] = []


class FunctionDeclaration(GeminiModel):
    name: str
    description: str = ""
    parameters: dict[str, Any] | None = None


class Tool(GeminiModel):
    function_declarations: list[FunctionDeclaration] = []


class GenerationConfig(GeminiModel):
    temperature: float | None = None
    max_output_tokens: int | None = None
    top_k: int | None = None
    top_p: float | None = None


class GenerateContentRequest(GeminiModel):
    contents: list[Content] = []
    tools: list[Tool] | None = None
    generation_config: GenerationConfig | None = None


class Candidate(GeminiModel):
    content: Content | None = None
    finish_reason: str | None = None
    index: int | None = None


class GenerateContentResponse(GeminiModel):
    """One aggregated reply, or one chunk of a streamed reply.

    ``candidates`` is optional here so trailing usage-only stream chunks
    validate; the response translator decides when its absence is an error.
    """

    candidates: list[Candidate] | None = None
    usage_metadata: dict[str, Any] | None = None
    model_version: str | None = None
