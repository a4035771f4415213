"""Tests for GeminiBackend end to end over a mocked transport."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from turnbridge.backends.gemini.backend import GeminiBackend
from turnbridge.backends.gemini.client import GeminiClient
from turnbridge.backends.gemini.config import GeminiConfig
from turnbridge.core.errors import BackendError, CorrelationOrderError, ErrorKind
from turnbridge.core.models import (
    AssistantMessage,
    ConversationState,
    TextDelta,
    ToolResult,
    ToolUse,
    ToolUseStart,
    ToolUseStop,
    UserMessage,
)

API_KEY = "AIzaSy-backend-secret"


def _config() -> GeminiConfig:
    return GeminiConfig(api_key=API_KEY, temperature=0.3, base_url="https://gemini.test/v1beta")


def _backend(handler, **kwargs) -> GeminiBackend:
    config = _config()
    client = GeminiClient(config, transport=httpx.MockTransport(handler))
    return GeminiBackend(config, client, **kwargs)


def _function_call_reply(*names: str) -> dict:
    parts = [{"functionCall": {"name": name, "args": {}}} for name in names]
    return {"candidates": [{"content": {"role": "model", "parts": parts}, "finishReason": "STOP"}]}


class TestTranslateRequest:
    def test_generation_config_from_settings(self) -> None:
        backend = GeminiBackend(_config(), MagicMock())
        state = ConversationState(user_input=UserMessage(content="hi"))
        wire = backend.translate_request(state, backend.new_registry(state))
        assert wire["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 4096}

    def test_strict_order_passed_to_registry(self) -> None:
        backend = GeminiBackend(_config(), MagicMock(), strict_order=False)
        assert backend.new_registry(ConversationState()).strict is False


class TestSendMessage:
    async def test_text_turn(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"role": "model", "parts": [{"text": "Hello world!"}]}}]},
            )

        backend = _backend(handler)
        stream = await backend.send_message(ConversationState(user_input=UserMessage(content="Say hello")))
        assert stream.collect() == [TextDelta(content="Hello world!")]
        assert bodies[0]["contents"] == [{"role": "user", "parts": [{"text": "Say hello"}]}]

    async def test_tool_round_trip_across_turns(self) -> None:
        replies = [
            _function_call_reply("getWeather", "getTime"),
            {"candidates": [{"content": {"role": "model", "parts": [{"text": "Sunny at noon."}]}}]},
        ]
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=replies[len(bodies) - 1])

        backend = _backend(handler)
        first = ConversationState(user_input=UserMessage(content="Weather and time?"))
        events = (await backend.send_message(first)).collect()

        starts = [event for event in events if isinstance(event, ToolUseStart)]
        stops = [event for event in events if isinstance(event, ToolUseStop)]
        assert [start.name for start in starts] == ["getWeather", "getTime"]
        assert len({start.tool_use_id for start in starts}) == 2
        assert [stop.tool_use_id for stop in stops] == [start.tool_use_id for start in starts]

        # The orchestrator appends the minted ids to history and answers them.
        second = ConversationState(
            history=[
                first.user_input,
                AssistantMessage(
                    tool_uses=[ToolUse(tool_use_id=s.tool_use_id, name=s.name) for s in starts],
                ),
            ],
            user_input=UserMessage(
                tool_results=[
                    ToolResult.from_text(starts[0].tool_use_id, "sunny"),
                    ToolResult.from_text(starts[1].tool_use_id, "12:00"),
                ]
            ),
        )
        events = (await backend.send_message(second)).collect()
        assert events == [TextDelta(content="Sunny at noon.")]

        sent = bodies[1]["contents"]
        assert [c["role"] for c in sent] == ["user", "model", "user"]
        assert [p["functionCall"]["name"] for p in sent[1]["parts"]] == ["getWeather", "getTime"]
        responses = [p["functionResponse"] for p in sent[2]["parts"]]
        assert responses == [
            {"name": "getWeather", "response": {"result": "sunny"}},
            {"name": "getTime", "response": {"result": "12:00"}},
        ]

    async def test_streaming(self) -> None:
        body = (
            'data: {"candidates":[{"content":{"role":"model","parts":[{"text":"Hi "}]}}]}\n\n'
            'data: {"candidates":[{"content":{"role":"model","parts":[{"text":"there"}]},"finishReason":"STOP"}]}\n\n'
        )
        backend = _backend(lambda request: httpx.Response(200, text=body), stream=True)
        stream = await backend.send_message(ConversationState(user_input=UserMessage(content="hi")))
        assert stream.collect() == [TextDelta(content="Hi "), TextDelta(content="there")]
        assert stream.metadata["finish_reason"] == "STOP"

    async def test_missing_candidates(self) -> None:
        backend = _backend(lambda request: httpx.Response(200, json={"promptFeedback": {}}))
        with pytest.raises(BackendError) as exc_info:
            await backend.send_message(ConversationState(user_input=UserMessage(content="hi")))
        assert exc_info.value.kind is ErrorKind.INVALID_RESPONSE

    async def test_translation_error_before_transport(self) -> None:
        client = MagicMock()
        client.generate_content = AsyncMock()
        backend = GeminiBackend(_config(), client)
        state = ConversationState(
            history=[AssistantMessage(tool_uses=[ToolUse(tool_use_id="A", name="f"), ToolUse(tool_use_id="B", name="f")])],
            user_input=UserMessage(tool_results=[ToolResult.from_text("B", "x")]),
        )
        with pytest.raises(CorrelationOrderError):
            await backend.send_message(state)
        client.generate_content.assert_not_awaited()


class TestLifecycle:
    async def test_aclose_closes_client(self) -> None:
        client = MagicMock(aclose=AsyncMock())
        backend = GeminiBackend(_config(), client)
        await backend.aclose()
        client.aclose.assert_awaited_once()

    async def test_context_manager_releases_connections(self) -> None:
        backend = _backend(lambda request: httpx.Response(200, json=_function_call_reply("getTime")))
        async with backend:
            await backend.send_message(ConversationState(user_input=UserMessage(content="time?")))
            assert backend.client._client is not None
        assert backend.client._client is None
