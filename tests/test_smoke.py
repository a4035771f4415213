"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import turnbridge

    assert turnbridge.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from turnbridge.cli import main

    assert callable(main)


def test_core_imports() -> None:
    from turnbridge.core import (
        BackendError,
        ConversationState,
        ErrorMapper,
        ResponseEventStream,
        ToolCallRegistry,
        from_generic,
        to_generic,
    )

    assert ToolCallRegistry is not None
    assert ErrorMapper is not None
    assert ResponseEventStream is not None
    assert ConversationState is not None
    assert BackendError is not None
    assert from_generic is not None
    assert to_generic is not None


def test_backend_imports() -> None:
    from turnbridge.backends import Backend, MockBackend, PassthroughBackend
    from turnbridge.backends.gemini import GeminiBackend, GeminiClient, RequestTranslator, ResponseTranslator

    assert Backend is not None
    assert MockBackend is not None
    assert PassthroughBackend is not None
    assert GeminiBackend is not None
    assert GeminiClient is not None
    assert RequestTranslator is not None
    assert ResponseTranslator is not None


def test_lazy_import_from_turnbridge() -> None:
    import turnbridge

    assert turnbridge.StreamingClient is not None
    assert turnbridge.GeminiBackend is not None
