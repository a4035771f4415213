"""turnbridge — conversation and tool-call translation between LLM backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from turnbridge.backends.gemini.backend import GeminiBackend as GeminiBackend
    from turnbridge.client import StreamingClient as StreamingClient

_LAZY_EXPORTS = {
    "GeminiBackend": "turnbridge.backends.gemini.backend",
    "StreamingClient": "turnbridge.client",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'turnbridge' has no attribute {name!r}")
