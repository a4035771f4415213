"""PassthroughBackend — for backends that already speak the normalized format.

The orchestrator's native backend has its own request and response types,
which the core must not import. This variant wraps an async callable that
takes the :class:`ConversationState` and returns normalized events, so the
native backend can sit behind the same :class:`Backend` protocol.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import ConversationState, ResponseEvent
from turnbridge.core.registry import ToolCallRegistry

SendFn = Callable[[ConversationState], Awaitable[Iterable[ResponseEvent]]]


class PassthroughBackend:
    """Delegates the whole exchange to ``send``; no translation happens."""

    def __init__(self, send: SendFn, *, name: str = "native") -> None:
        self._send = send
        self.name = name

    def translate_request(self, state: ConversationState, registry: ToolCallRegistry) -> dict[str, Any]:
        return state.model_dump(mode="json", by_alias=True)

    def translate_response(self, response: Iterable[ResponseEvent], registry: ToolCallRegistry) -> ResponseEventStream:
        return ResponseEventStream(response, registry=registry)

    async def send_message(self, state: ConversationState) -> ResponseEventStream:
        registry = ToolCallRegistry.build(state.history)
        events = await self._send(state)
        return self.translate_response(events, registry)

    async def aclose(self) -> None:
        pass
