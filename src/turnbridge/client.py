"""StreamingClient — backend selection for the orchestrator.

Picks the Gemini backend when its configuration file is present, otherwise
the orchestrator's fallback backend. Configuration failures are one-time
errors: with a fallback they downgrade to a warning, without one they are
raised as ``BackendError(kind=CONFIGURATION)``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from turnbridge.backends.base import Backend
from turnbridge.backends.gemini.backend import GeminiBackend
from turnbridge.backends.gemini.config import GeminiConfig, config_exists, default_config_path, load_config
from turnbridge.backends.mock import MockBackend
from turnbridge.core.errors import BackendError, ErrorKind
from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import ConversationState
from turnbridge.utils.telemetry import ATTR_BACKEND, ATTR_CONVERSATION_ID, ATTR_ERROR_KIND, get_tracer

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


def get_backend(name: str, config: GeminiConfig | None = None, **kwargs: Any) -> Backend:
    """Return a backend by name.

    ``gemini`` and ``google`` need a ``config``; ``mock`` takes an optional
    ``script``.
    """
    if name in ("gemini", "google"):
        if config is None:
            raise BackendError(ErrorKind.CONFIGURATION, f"Backend {name!r} requires a configuration")
        return GeminiBackend(config, **kwargs)
    if name == "mock":
        return MockBackend(kwargs.get("script", ()))
    raise BackendError(ErrorKind.CONFIGURATION, f"Unknown backend: {name!r}")


class StreamingClient:
    """Sends conversation turns through one selected backend.

    Usage::

        client = StreamingClient.from_config_file(fallback=native_backend)
        stream = await client.send_message(state)

    or, to close the backend's connections afterwards::

        async with StreamingClient.from_config_file(fallback=native_backend) as client:
            stream = await client.send_message(state)
    """

    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    async def __aenter__(self) -> StreamingClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release whatever the selected backend holds open."""
        await self.backend.aclose()

    @classmethod
    def from_config_file(
        cls,
        path: Path | None = None,
        *,
        fallback: Backend | None = None,
        **backend_options: Any,
    ) -> StreamingClient:
        """Use Gemini when ``path`` (default location if omitted) exists."""
        config_path = path or default_config_path()
        if not config_exists(config_path):
            if fallback is None:
                raise BackendError(
                    ErrorKind.CONFIGURATION,
                    f"No Gemini configuration at {config_path} and no fallback backend",
                )
            logger.debug("No Gemini configuration at %s; using %s", config_path, fallback.name)
            return cls(fallback)

        try:
            config = load_config(config_path)
        except BackendError as exc:
            if fallback is None:
                raise
            logger.warning("Ignoring Gemini configuration (%s); using %s", exc, fallback.name)
            return cls(fallback)

        logger.info("Gemini configuration found at %s", config_path)
        return cls(GeminiBackend(config, **backend_options))

    async def send_message(self, state: ConversationState) -> ResponseEventStream:
        with _tracer.start_as_current_span("client.send_message") as span:
            span.set_attribute(ATTR_BACKEND, self.backend.name)
            if state.conversation_id:
                span.set_attribute(ATTR_CONVERSATION_ID, state.conversation_id)
            try:
                return await self.backend.send_message(state)
            except BackendError as exc:
                span.set_attribute(ATTR_ERROR_KIND, exc.kind.value)
                raise
