"""RequestTranslator — conversation state to a Gemini ``generateContent`` request.

Key differences from the internal model:
- Role "assistant" becomes "model"; tool results travel in "user" turns.
- Tool calls and results carry no ID. A result is sent under the *name* of
  the call it answers, resolved through the :class:`ToolCallRegistry`.
- Empty user turns are not sent.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from turnbridge.backends.gemini.models import (
    Content,
    FunctionDeclaration,
    GenerateContentRequest,
    GenerationConfig,
    Part,
    Tool,
)
from turnbridge.backends.gemini.schema import clean_parameters
from turnbridge.core.document import ObjectDocument, to_generic
from turnbridge.core.errors import InvalidToolSchemaError
from turnbridge.core.models import (
    AssistantMessage,
    ChatMessage,
    ConversationState,
    JsonBlock,
    TextBlock,
    ToolResult,
    ToolResultStatus,
    ToolSpecification,
    UserMessage,
)
from turnbridge.core.registry import ToolCallRegistry

logger = logging.getLogger(__name__)


class RequestTranslator:
    """Builds :class:`GenerateContentRequest` objects.

    Args:
        generation_config: Sent as ``generationConfig`` when given.
        clean_schemas: Reduce tool schemas to the subset Gemini accepts.
    """

    def __init__(
        self,
        generation_config: GenerationConfig | None = None,
        *,
        clean_schemas: bool = True,
    ) -> None:
        self.generation_config = generation_config
        self.clean_schemas = clean_schemas

    def to_request(self, state: ConversationState, registry: ToolCallRegistry) -> GenerateContentRequest:
        """Translate ``state`` into a request.

        ``registry`` must have been built from ``state.history``; results are
        claimed from it in order, so use a fresh registry per request.

        Raises:
            InvalidToolSchemaError: A tool's input schema is not an object.
            UnknownToolCallError: A tool result references an unknown call.
            CorrelationOrderError: Results are out of order (strict registry).
        """
        tools = self._tools(state.tools) if state.tools else None

        contents: list[Content] = []
        for message in state.history:
            content = self._message_to_gemini(message, registry)
            if content is not None:
                contents.append(content)

        current = self._user_to_gemini(state.user_input, registry)
        if current is not None:
            contents.append(current)

        logger.debug(
            "Translated %d history turn(s) into %d content entries",
            len(state.history),
            len(contents),
        )
        return GenerateContentRequest(
            contents=contents,
            tools=tools,
            generation_config=self.generation_config,
        )

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def _tools(self, specs: list[ToolSpecification]) -> list[Tool]:
        declarations = [self._declaration(spec) for spec in specs]
        return [Tool(function_declarations=declarations)]

    def _declaration(self, spec: ToolSpecification) -> FunctionDeclaration:
        if not isinstance(spec.input_schema, ObjectDocument):
            raise InvalidToolSchemaError(spec.name, spec.input_schema.kind)
        parameters: dict[str, Any] = to_generic(spec.input_schema)  # type: ignore[assignment]
        if self.clean_schemas:
            parameters = clean_parameters(parameters)
        return FunctionDeclaration(
            name=spec.name,
            description=spec.description,
            parameters=parameters,
        )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _message_to_gemini(self, message: ChatMessage, registry: ToolCallRegistry) -> Content | None:
        if isinstance(message, AssistantMessage):
            registry.begin_assistant_turn()
            return self._assistant_to_gemini(message)
        return self._user_to_gemini(message, registry)

    def _assistant_to_gemini(self, message: AssistantMessage) -> Content | None:
        parts: list[Part] = []
        if message.content:
            parts.append(Part.from_text(message.content))
        for tool_use in message.tool_uses or []:
            args: dict[str, Any]
            if isinstance(tool_use.input, ObjectDocument):
                args = to_generic(tool_use.input)  # type: ignore[assignment]
            else:
                # Gemini args are always an object
                args = {"value": to_generic(tool_use.input)}
            parts.append(Part.from_function_call(tool_use.name, args))
        if not parts:
            return None
        return Content(role="model", parts=parts)

    def _user_to_gemini(self, message: UserMessage, registry: ToolCallRegistry) -> Content | None:
        if message.is_empty:
            return None
        parts: list[Part] = []
        for result in message.tool_results or []:
            name = registry.claim(result.tool_use_id)
            parts.append(Part.from_function_response(name, function_response_payload(result)))
        if message.content:
            parts.append(Part.from_text(message.content))
        return Content(role="user", parts=parts)


def function_response_payload(result: ToolResult) -> dict[str, Any]:
    """Build the ``response`` object for a tool result.

    Success yields ``{"result": value}`` (one block: its value, several: a
    list of values, none: null). Error yields ``{"error": text}``.
    """
    if result.status is ToolResultStatus.ERROR:
        return {"error": "\n".join(_block_text(block) for block in result.content)}

    values = [_block_value(block) for block in result.content]
    if not values:
        return {"result": None}
    if len(values) == 1:
        return {"result": values[0]}
    return {"result": values}


def _block_value(block: TextBlock | JsonBlock) -> Any:
    if isinstance(block, TextBlock):
        return block.text
    return to_generic(block.json_value)


def _block_text(block: TextBlock | JsonBlock) -> str:
    if isinstance(block, TextBlock):
        return block.text
    return json.dumps(to_generic(block.json_value), separators=(",", ":"))
