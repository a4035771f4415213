"""Backend implementations behind the :class:`Backend` protocol."""

from turnbridge.backends.base import Backend
from turnbridge.backends.gemini import GeminiBackend
from turnbridge.backends.mock import MockBackend
from turnbridge.backends.passthrough import PassthroughBackend

__all__ = ["Backend", "GeminiBackend", "MockBackend", "PassthroughBackend"]
