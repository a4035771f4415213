"""MockBackend — replays scripted event batches, one batch per turn.

Useful for orchestrator tests::

    backend = MockBackend([[TextDelta(content="Hello!")]])
    stream = await backend.send_message(state)
    assert stream.recv() == TextDelta(content="Hello!")
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from typing import Any

from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import ConversationState, ResponseEvent, ToolUseStart
from turnbridge.core.registry import ToolCallRegistry


class MockBackend:
    """A backend whose replies are fixed in advance.

    Once the script runs out every further turn yields an empty stream.
    Requests sent through :meth:`send_message` are kept in ``requests``.
    """

    name = "mock"

    def __init__(self, script: Iterable[Sequence[ResponseEvent]] = ()) -> None:
        self._script: deque[list[ResponseEvent]] = deque(list(batch) for batch in script)
        self.requests: list[dict[str, Any]] = []

    def push(self, batch: Sequence[ResponseEvent]) -> None:
        """Append one more scripted turn."""
        self._script.append(list(batch))

    def translate_request(self, state: ConversationState, registry: ToolCallRegistry) -> dict[str, Any]:
        return state.model_dump(mode="json", by_alias=True)

    def translate_response(
        self,
        response: Sequence[ResponseEvent],
        registry: ToolCallRegistry,
    ) -> ResponseEventStream:
        # Scripted events already carry their IDs; record them so results
        # in the next turn resolve.
        for event in response:
            if isinstance(event, ToolUseStart):
                registry.record(event.name, event.tool_use_id)
        return ResponseEventStream(list(response), registry=registry)

    async def send_message(self, state: ConversationState) -> ResponseEventStream:
        registry = ToolCallRegistry.build(state.history)
        self.requests.append(self.translate_request(state, registry))
        batch = self._script.popleft() if self._script else []
        return self.translate_response(batch, registry)

    async def aclose(self) -> None:
        pass

    @property
    def remaining(self) -> int:
        return len(self._script)
