"""GeminiBackend — the Gemini variant of :class:`~turnbridge.backends.base.Backend`."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from turnbridge.backends.gemini.client import GeminiClient
from turnbridge.backends.gemini.config import GeminiConfig
from turnbridge.backends.gemini.models import GenerationConfig
from turnbridge.backends.gemini.request import RequestTranslator
from turnbridge.backends.gemini.response import ResponseTranslator
from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import ConversationState
from turnbridge.core.registry import ToolCallRegistry
from turnbridge.utils.telemetry import (
    ATTR_BACKEND,
    ATTR_CONTENT_ENTRIES,
    ATTR_FINISH_REASON,
    ATTR_HISTORY_TURNS,
    ATTR_MODEL,
    ATTR_STREAMED,
    ATTR_TOOL_COUNT,
    get_tracer,
)

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


class GeminiBackend:
    """Talks to Gemini through :class:`GeminiClient`.

    Args:
        config: Validated Gemini settings.
        client: Transport; one is created from ``config`` when omitted.
        stream: Use ``streamGenerateContent`` instead of ``generateContent``.
        strict_order: Passed to each per-request :class:`ToolCallRegistry`.
        clean_schemas: Simplify tool schemas before sending them.
    """

    name = "gemini"

    def __init__(
        self,
        config: GeminiConfig,
        client: GeminiClient | None = None,
        *,
        stream: bool = False,
        strict_order: bool = True,
        clean_schemas: bool = True,
    ) -> None:
        self.config = config
        self.client = client or GeminiClient(config)
        self.stream = stream
        self.strict_order = strict_order
        self.request_translator = RequestTranslator(
            GenerationConfig(
                temperature=config.temperature,
                max_output_tokens=config.max_output_tokens,
            ),
            clean_schemas=clean_schemas,
        )
        self.response_translator = ResponseTranslator(self.client.error_mapper)

    async def __aenter__(self) -> GeminiBackend:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    def new_registry(self, state: ConversationState) -> ToolCallRegistry:
        return ToolCallRegistry.build(state.history, strict=self.strict_order)

    def translate_request(self, state: ConversationState, registry: ToolCallRegistry) -> dict[str, Any]:
        return self.request_translator.to_request(state, registry).to_wire()

    def translate_response(
        self,
        response: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        registry: ToolCallRegistry,
    ) -> ResponseEventStream:
        return self.response_translator.translate(response, registry)

    async def send_message(self, state: ConversationState) -> ResponseEventStream:
        """Send one turn and return its events.

        The registry is rebuilt from ``state.history``. IDs minted for the
        reply's function calls reach the caller only through ``ToolUseStart``
        events; the caller must append them to its history for the next turn.
        """
        with _tracer.start_as_current_span("gemini.send_message") as span:
            span.set_attribute(ATTR_BACKEND, self.name)
            span.set_attribute(ATTR_MODEL, self.config.model)
            span.set_attribute(ATTR_STREAMED, self.stream)
            span.set_attribute(ATTR_HISTORY_TURNS, len(state.history))

            registry = self.new_registry(state)
            request = self.translate_request(state, registry)
            span.set_attribute(ATTR_CONTENT_ENTRIES, len(request["contents"]))
            span.set_attribute(ATTR_TOOL_COUNT, len(state.tools or []))

            if self.stream:
                chunks = [chunk async for chunk in self.client.stream_generate_content(request)]
                logger.debug("Received %d stream chunk(s)", len(chunks))
                events = self.translate_response(chunks, registry)
            else:
                payload = await self.client.generate_content(request)
                events = self.translate_response(payload, registry)

            if events.metadata.get("finish_reason"):
                span.set_attribute(ATTR_FINISH_REASON, events.metadata["finish_reason"])
            return events
