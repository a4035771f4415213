"""ToolCallRegistry — correlates opaque tool-call IDs with bare function names.

The second backend identifies function calls and responses only by name and
turn order. The registry keeps, per function name, the queue of calls that
have not been answered yet, in emission order. A result is paired with the
oldest unmatched call of its name.

One registry belongs to one conversation turn. It is rebuilt from history
for every outbound request and threaded explicitly through the translators;
there is no process-wide state.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from uuid import uuid4

from turnbridge.core.errors import CorrelationOrderError, UnknownToolCallError
from turnbridge.core.models import AssistantMessage, ChatMessage

logger = logging.getLogger(__name__)

MINTED_ID_PREFIX = "tooluse_"


class ToolCallRegistry:
    """Per-conversation map of tool-call IDs to function names.

    Args:
        strict: When ``True`` (the default) a result that does not answer the
            oldest unmatched call of its name raises
            :class:`CorrelationOrderError`. When ``False`` the result is paired
            by position and a warning is logged.
    """

    def __init__(self, *, strict: bool = True) -> None:
        self.strict = strict
        self._names: dict[str, str] = {}
        self._unmatched: dict[str, deque[str]] = {}
        self._pending: list[str] = []
        self._turns: list[list[str]] = []
        self._position = 0

    @classmethod
    def build(cls, history: Iterable[ChatMessage], *, strict: bool = True) -> ToolCallRegistry:
        """Replay history top to bottom, recording every assistant tool call.

        Tool results are not consumed here; they are resolved on demand by
        :meth:`claim` while the request is translated. The translator calls
        :meth:`begin_assistant_turn` as it passes each assistant turn.
        """
        registry = cls(strict=strict)
        for message in history:
            if isinstance(message, AssistantMessage):
                tool_uses = message.tool_uses or []
                for tool_use in tool_uses:
                    registry.record(tool_use.name, tool_use.tool_use_id)
                registry._turns.append([tool_use.tool_use_id for tool_use in tool_uses])
        return registry

    def begin_assistant_turn(self) -> list[str]:
        """Advance past the next recorded assistant turn.

        Results answer the assistant turn right before them, so calls of the
        previous assistant turn that are still unmatched are retired: they
        leave the queues but keep resolving by ID. Returns the retired IDs.
        """
        retired: list[str] = []
        if 0 < self._position <= len(self._turns):
            for tool_use_id in self._turns[self._position - 1]:
                queue = self._unmatched.get(self._names[tool_use_id])
                if queue is not None and tool_use_id in queue:
                    queue.remove(tool_use_id)
                    retired.append(tool_use_id)
        if retired:
            logger.debug("Retired %d unanswered tool call(s): %s", len(retired), ", ".join(retired))
        self._position += 1
        return retired

    def record(self, name: str, tool_use_id: str) -> None:
        """Enqueue a call of ``name`` identified by ``tool_use_id``."""
        self._names[tool_use_id] = name
        self._unmatched.setdefault(name, deque()).append(tool_use_id)

    def resolve_name(self, tool_use_id: str) -> str:
        """Return the function name for ``tool_use_id``.

        Raises:
            UnknownToolCallError: If no assistant turn issued this ID.
        """
        try:
            return self._names[tool_use_id]
        except KeyError:
            raise UnknownToolCallError(tool_use_id) from None

    def claim(self, tool_use_id: str) -> str:
        """Match a result against the oldest unmatched call of its name.

        Returns the function name to send over the wire.

        Raises:
            UnknownToolCallError: If the ID was never issued.
            CorrelationOrderError: In strict mode, if the ID is not the oldest
                unmatched call of its name, or has already been answered.
        """
        name = self.resolve_name(tool_use_id)
        queue = self._unmatched.get(name)
        if not queue:
            raise CorrelationOrderError(tool_use_id, name)
        if tool_use_id not in queue:
            raise CorrelationOrderError(tool_use_id, name)

        oldest = queue[0]
        if oldest != tool_use_id:
            if self.strict:
                raise CorrelationOrderError(tool_use_id, name, expected=oldest)
            logger.warning(
                "Result for %s (%s) arrived before %s; pairing by position",
                tool_use_id,
                name,
                oldest,
            )
            # The wire pairs this result with the oldest slot; the oldest ID
            # stays open for the next result of this name.
            queue.remove(tool_use_id)
            return name

        queue.popleft()
        return name

    def mint_id(self, name: str) -> str:
        """Create a fresh ID for a call of ``name`` seen in a backend reply.

        The ID is enqueued like any recorded call and stays pending until
        :meth:`commit` or :meth:`discard_pending`.
        """
        tool_use_id = f"{MINTED_ID_PREFIX}{uuid4().hex}"
        while tool_use_id in self._names:
            tool_use_id = f"{MINTED_ID_PREFIX}{uuid4().hex}"
        self.record(name, tool_use_id)
        self._pending.append(tool_use_id)
        logger.debug("Minted tool use id %s for %s", tool_use_id, name)
        return tool_use_id

    def commit(self) -> list[str]:
        """Accept all pending minted IDs. Returns the IDs committed."""
        committed = list(self._pending)
        self._pending.clear()
        return committed

    def discard_pending(self) -> list[str]:
        """Forget all pending minted IDs (the turn was aborted)."""
        discarded = list(self._pending)
        for tool_use_id in discarded:
            name = self._names.pop(tool_use_id)
            queue = self._unmatched.get(name)
            if queue is not None and tool_use_id in queue:
                queue.remove(tool_use_id)
        self._pending.clear()
        if discarded:
            logger.debug("Discarded %d minted tool use id(s)", len(discarded))
        return discarded

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    def unmatched(self, name: str) -> list[str]:
        """IDs of calls of ``name`` still waiting for a result, oldest first."""
        return list(self._unmatched.get(name, ()))

    def __contains__(self, tool_use_id: object) -> bool:
        return tool_use_id in self._names

    def __len__(self) -> int:
        return len(self._names)
