"""ResponseEventStream — the ordered, pop-from-front event sequence of one turn.

The stream is lazy: events are produced from the backend reply only as the
reader asks for them, so tool-call IDs are minted no earlier than the
:class:`~turnbridge.core.models.ToolUseStart` that carries them. Reaching the
end commits the minted IDs to the registry; closing early discards them.

The stream is single-reader and not restartable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from turnbridge.core.models import ResponseEvent
from turnbridge.core.registry import ToolCallRegistry

logger = logging.getLogger(__name__)


class ResponseEventStream:
    """Iterator over the normalized events of a single backend reply.

    Usage::

        stream = backend.translate_response(payload, registry)
        while (event := stream.recv()) is not None:
            handle(event)
    """

    def __init__(
        self,
        events: Iterable[ResponseEvent],
        registry: ToolCallRegistry | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self._events: Iterator[ResponseEvent] = iter(events)
        self.registry = registry
        self.metadata: dict[str, Any] = metadata if metadata is not None else {}
        self._finished = False
        self._received = 0

    def __iter__(self) -> ResponseEventStream:
        return self

    def __next__(self) -> ResponseEvent:
        if self._finished:
            raise StopIteration
        try:
            event = next(self._events)
        except StopIteration:
            self._finish(completed=True)
            raise
        except BaseException:
            self._finish(completed=False)
            raise
        self._received += 1
        return event

    def recv(self) -> ResponseEvent | None:
        """Pop the next event, or return ``None`` once the stream is exhausted."""
        return next(self, None)

    def collect(self) -> list[ResponseEvent]:
        """Drain the remaining events into a list."""
        return list(self)

    def close(self) -> None:
        """Abandon the stream; IDs minted so far are discarded."""
        if not self._finished:
            logger.debug("Event stream closed after %d event(s)", self._received)
            self._finish(completed=False)

    @property
    def finished(self) -> bool:
        return self._finished

    def _finish(self, *, completed: bool) -> None:
        self._finished = True
        close = getattr(self._events, "close", None)
        if close is not None:
            close()
        if self.registry is None:
            return
        if completed:
            self.registry.commit()
        else:
            self.registry.discard_pending()

    def __enter__(self) -> ResponseEventStream:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
