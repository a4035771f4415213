"""Tests for ResponseEventStream."""

from collections.abc import Iterator

import pytest

from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import ResponseEvent, TextDelta, ToolUseStart, ToolUseStop
from turnbridge.core.registry import ToolCallRegistry


def _minting_events(registry: ToolCallRegistry, *names: str) -> Iterator[ResponseEvent]:
    for name in names:
        tid = registry.mint_id(name)
        yield ToolUseStart(tool_use_id=tid, name=name, partial_input="{}")
        yield ToolUseStop(tool_use_id=tid)


class TestResponseEventStream:
    def test_recv_pops_in_order(self) -> None:
        stream = ResponseEventStream([TextDelta(content="a"), TextDelta(content="b")])
        first = stream.recv()
        second = stream.recv()
        assert isinstance(first, TextDelta) and first.content == "a"
        assert isinstance(second, TextDelta) and second.content == "b"
        assert stream.recv() is None
        assert stream.finished

    def test_recv_after_exhaustion_stays_none(self) -> None:
        stream = ResponseEventStream([])
        assert stream.recv() is None
        assert stream.recv() is None

    def test_collect(self) -> None:
        events = [TextDelta(content="x")]
        assert ResponseEventStream(events).collect() == events

    def test_metadata_defaults_to_empty(self) -> None:
        assert ResponseEventStream([]).metadata == {}

    def test_ids_minted_lazily(self) -> None:
        registry = ToolCallRegistry()
        stream = ResponseEventStream(_minting_events(registry, "getWeather"), registry=registry)
        assert len(registry) == 0
        event = stream.recv()
        assert isinstance(event, ToolUseStart)
        assert event.tool_use_id in registry

    def test_exhaustion_commits(self) -> None:
        registry = ToolCallRegistry()
        stream = ResponseEventStream(_minting_events(registry, "getWeather", "getTime"), registry=registry)
        events = stream.collect()
        assert len(events) == 4
        assert registry.pending == []
        assert len(registry) == 2

    def test_close_early_discards(self) -> None:
        registry = ToolCallRegistry()
        stream = ResponseEventStream(_minting_events(registry, "getWeather"), registry=registry)
        start = stream.recv()
        assert isinstance(start, ToolUseStart)
        stream.close()
        assert start.tool_use_id not in registry
        assert stream.finished
        assert stream.recv() is None

    def test_close_after_exhaustion_keeps_ids(self) -> None:
        registry = ToolCallRegistry()
        stream = ResponseEventStream(_minting_events(registry, "getTime"), registry=registry)
        stream.collect()
        stream.close()
        assert len(registry) == 1

    def test_context_manager_closes(self) -> None:
        registry = ToolCallRegistry()
        with ResponseEventStream(_minting_events(registry, "getTime"), registry=registry) as stream:
            stream.recv()
        assert stream.finished
        assert len(registry) == 0

    def test_error_mid_stream_discards(self) -> None:
        registry = ToolCallRegistry()

        def events() -> Iterator[ResponseEvent]:
            yield from _minting_events(registry, "getTime")
            raise RuntimeError("boom")

        stream = ResponseEventStream(events(), registry=registry)
        with pytest.raises(RuntimeError, match="boom"):
            stream.collect()
        assert len(registry) == 0
        assert stream.finished
