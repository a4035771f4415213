"""Backend protocol — one variant per model backend.

Every backend turns a :class:`ConversationState` into its own request shape
and its own reply into the shared :class:`ResponseEventStream`. New backends
are added as new classes; existing ones are never touched.
"""

from __future__ import annotations

from typing import Any, Protocol

from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import ConversationState
from turnbridge.core.registry import ToolCallRegistry


class Backend(Protocol):
    """Protocol for chat backends."""

    name: str

    def translate_request(self, state: ConversationState, registry: ToolCallRegistry) -> dict[str, Any]:
        """Convert a conversation state into the backend's request payload."""
        ...

    def translate_response(self, response: Any, registry: ToolCallRegistry) -> ResponseEventStream:
        """Convert the backend's reply into normalized events.

        Any tool-call IDs the backend does not provide are minted in
        ``registry``.
        """
        ...

    async def send_message(self, state: ConversationState) -> ResponseEventStream:
        """Translate, send and translate back one conversation turn.

        The only suspension point is the transport call.
        """
        ...

    async def aclose(self) -> None:
        """Release any connections the backend holds."""
        ...
