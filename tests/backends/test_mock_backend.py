"""Tests for MockBackend and PassthroughBackend."""

from collections.abc import Iterable

from turnbridge.backends.mock import MockBackend
from turnbridge.backends.passthrough import PassthroughBackend
from turnbridge.core.models import (
    AssistantMessage,
    ConversationState,
    ResponseEvent,
    TextDelta,
    ToolUse,
    ToolUseStart,
    ToolUseStop,
    UserMessage,
)
from turnbridge.core.registry import ToolCallRegistry


class TestMockBackend:
    async def test_replays_script_in_order(self) -> None:
        backend = MockBackend([[TextDelta(content="one")], [TextDelta(content="two")]])
        state = ConversationState(user_input=UserMessage(content="hi"))
        assert (await backend.send_message(state)).collect() == [TextDelta(content="one")]
        assert backend.remaining == 1
        assert (await backend.send_message(state)).collect() == [TextDelta(content="two")]

    async def test_exhausted_script_yields_empty_stream(self) -> None:
        backend = MockBackend()
        stream = await backend.send_message(ConversationState())
        assert stream.recv() is None

    async def test_records_requests(self) -> None:
        backend = MockBackend([[]])
        await backend.send_message(ConversationState(conversation_id="c-1", user_input=UserMessage(content="hi")))
        assert backend.requests[0]["conversation_id"] == "c-1"
        assert backend.requests[0]["user_input"]["content"] == "hi"

    async def test_push(self) -> None:
        backend = MockBackend()
        backend.push([TextDelta(content="late")])
        assert backend.remaining == 1
        events = (await backend.send_message(ConversationState())).collect()
        assert events == [TextDelta(content="late")]

    def test_translate_response_records_scripted_ids(self) -> None:
        backend = MockBackend()
        registry = ToolCallRegistry()
        events = [
            ToolUseStart(tool_use_id="T1", name="getTime", partial_input="{}"),
            ToolUseStop(tool_use_id="T1"),
        ]
        backend.translate_response(events, registry).collect()
        assert registry.resolve_name("T1") == "getTime"


class TestPassthroughBackend:
    async def test_delegates_to_send(self) -> None:
        seen: list[ConversationState] = []

        async def send(state: ConversationState) -> Iterable[ResponseEvent]:
            seen.append(state)
            return [TextDelta(content="native reply")]

        backend = PassthroughBackend(send)
        state = ConversationState(
            history=[AssistantMessage(tool_uses=[ToolUse(tool_use_id="N1", name="readFile")])],
            user_input=UserMessage(content="go"),
        )
        stream = await backend.send_message(state)
        assert backend.name == "native"
        assert stream.collect() == [TextDelta(content="native reply")]
        assert seen == [state]
        assert stream.registry is not None
        assert "N1" in stream.registry

    def test_translate_request_dumps_state(self) -> None:
        async def send(state: ConversationState) -> Iterable[ResponseEvent]:
            return []

        backend = PassthroughBackend(send, name="codewhisperer")
        wire = backend.translate_request(ConversationState(user_input=UserMessage(content="x")), ToolCallRegistry())
        assert wire["user_input"]["role"] == "user"
        assert backend.name == "codewhisperer"

    async def test_closing_is_a_no_op(self) -> None:
        async def send(state: ConversationState) -> Iterable[ResponseEvent]:
            return [TextDelta(content="still here")]

        backend = PassthroughBackend(send)
        await backend.aclose()
        await MockBackend().aclose()
        stream = await backend.send_message(ConversationState(user_input=UserMessage(content="x")))
        assert stream.collect() == [TextDelta(content="still here")]
