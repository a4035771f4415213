"""Conversation model — the internal types the translation core works on.

The orchestrator converts its own message types into these before calling
a backend, and consumes the normalized :data:`ResponseEvent` sequence that
comes back. The core never imports orchestrator types.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from turnbridge.core.document import Document, ObjectDocument, from_json

# ---------------------------------------------------------------------------
# Tools — specifications, invocations and results
# ---------------------------------------------------------------------------


class ToolSpecification(BaseModel):
    """A tool the model may call. ``input_schema`` is a JSON-Schema document."""

    name: str
    description: str = ""
    input_schema: Document = Field(default_factory=ObjectDocument)


class ToolUse(BaseModel):
    """A tool invocation issued by an assistant turn."""

    tool_use_id: str
    name: str
    input: Document = Field(default_factory=ObjectDocument)


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class JsonBlock(BaseModel):
    type: Literal["json"] = "json"
    json_value: Document = Field(alias="json")

    model_config = {"populate_by_name": True}


ToolResultContentBlock = Annotated[Union[TextBlock, JsonBlock], Field(discriminator="type")]


class ToolResultStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class ToolResult(BaseModel):
    """The outcome of running a tool, answering a prior :class:`ToolUse`."""

    tool_use_id: str
    content: list[ToolResultContentBlock] = []
    status: ToolResultStatus = ToolResultStatus.SUCCESS

    @classmethod
    def from_text(
        cls,
        tool_use_id: str,
        text: str,
        status: ToolResultStatus = ToolResultStatus.SUCCESS,
    ) -> ToolResult:
        """Create a ToolResult with a single text block."""
        blocks: list[ToolResultContentBlock] = [TextBlock(text=text)]
        return cls(tool_use_id=tool_use_id, content=blocks, status=status)

    @classmethod
    def from_document(cls, tool_use_id: str, document: Document) -> ToolResult:
        """Create a successful ToolResult with a single JSON block."""
        blocks: list[ToolResultContentBlock] = [JsonBlock(json=document)]
        return cls(tool_use_id=tool_use_id, content=blocks)


# ---------------------------------------------------------------------------
# Chat messages — one turn of history each
# ---------------------------------------------------------------------------


class AssistantMessage(BaseModel):
    """A model turn: optional text followed by optional tool calls."""

    role: Literal["assistant"] = "assistant"
    content: str = ""
    tool_uses: list[ToolUse] | None = None


class UserMessage(BaseModel):
    """A user turn: text, tool results answering the previous turn, or both."""

    role: Literal["user"] = "user"
    content: str = ""
    tool_results: list[ToolResult] | None = None

    @property
    def is_empty(self) -> bool:
        return not self.content and not self.tool_results


ChatMessage = Annotated[Union[AssistantMessage, UserMessage], Field(discriminator="role")]


class ConversationState(BaseModel):
    """Everything needed for one outbound request.

    ``history`` is ordered oldest first. ``user_input`` is the current turn;
    it may carry tool results for the calls made by the last assistant turn.
    """

    conversation_id: str | None = None
    history: list[ChatMessage] = []
    user_input: UserMessage = Field(default_factory=UserMessage)
    tools: list[ToolSpecification] | None = None


# ---------------------------------------------------------------------------
# Normalized response events
# ---------------------------------------------------------------------------


class TextDelta(BaseModel):
    type: Literal["text_delta"] = "text_delta"
    content: str


class ToolUseStart(BaseModel):
    """Start of a tool invocation.

    ``partial_input`` is JSON text. Backends that deliver arguments in one
    piece put the complete arguments here.
    """

    type: Literal["tool_use_start"] = "tool_use_start"
    tool_use_id: str
    name: str
    partial_input: str = ""

    def input_document(self) -> Document:
        """Decode ``partial_input`` into a document (empty object when blank)."""
        if not self.partial_input:
            return ObjectDocument()
        return from_json(self.partial_input)


class ToolUseStop(BaseModel):
    type: Literal["tool_use_stop"] = "tool_use_stop"
    tool_use_id: str


ResponseEvent = Annotated[Union[TextDelta, ToolUseStart, ToolUseStop], Field(discriminator="type")]
