"""Error types for the translation core.

Two families live here:

- :class:`TranslationError` and its subclasses are raised while converting a
  conversation into a backend request or a backend reply into events. They
  are fatal to the current turn and are never retried.
- :class:`BackendError` is the single, kind-tagged error surface for
  transport, parse and configuration failures. Its message is always
  scrubbed of credentials (see :mod:`turnbridge.core.error_mapper`).
"""

from __future__ import annotations

from enum import Enum


class TranslationError(Exception):
    """Base error for all translation failures."""


class EncodingError(TranslationError):
    """A value cannot be represented in the target document system."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Cannot encode value: {detail}")


class UnknownToolCallError(TranslationError):
    """A tool result references an ID never issued by an assistant turn."""

    def __init__(self, tool_use_id: str) -> None:
        self.tool_use_id = tool_use_id
        super().__init__(f"Unknown tool call: {tool_use_id}")


class CorrelationOrderError(TranslationError):
    """A tool result does not answer the oldest unmatched call of its name."""

    def __init__(self, tool_use_id: str, name: str, expected: str | None = None) -> None:
        self.tool_use_id = tool_use_id
        self.name = name
        self.expected = expected
        if expected is None:
            msg = f"Tool call {tool_use_id} ({name}) has already been answered or is no longer open"
        else:
            msg = (
                f"Tool result {tool_use_id} ({name}) is out of order; "
                f"expected a result for {expected} first"
            )
        super().__init__(msg)


class InvalidToolSchemaError(TranslationError):
    """A tool specification's input schema is not a JSON object."""

    def __init__(self, tool_name: str, found: str) -> None:
        self.tool_name = tool_name
        self.found = found
        super().__init__(f"Input schema for tool {tool_name} must be an object, got {found}")


class ErrorKind(str, Enum):
    """Stable taxonomy for backend failures."""

    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    INVALID_RESPONSE = "invalid_response"
    CONFIGURATION = "configuration"
    OTHER = "other"


class BackendError(Exception):
    """A transport, parse or configuration failure with a kind tag.

    The message must already be secret-free when this is constructed;
    build instances through :class:`~turnbridge.core.error_mapper.ErrorMapper`
    whenever the text could contain a credential.
    """

    def __init__(self, kind: ErrorKind, message: str, *, status_code: int | None = None) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{kind.value}] {message}")

    @property
    def is_configuration_error(self) -> bool:
        """True for one-time configuration failures (as opposed to per-turn ones)."""
        return self.kind is ErrorKind.CONFIGURATION
