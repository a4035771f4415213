"""ResponseTranslator — Gemini replies to normalized response events.

Accepts one aggregated ``generateContent`` payload or the ordered chunks of a
``streamGenerateContent`` reply; both produce the same event contract. Every
payload is validated up front, so a malformed reply fails before the first
event. Events themselves are produced lazily: a function call's ID is minted
only when the reader reaches it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from turnbridge.backends.gemini.models import GenerateContentResponse, Part
from turnbridge.core.error_mapper import ErrorMapper
from turnbridge.core.errors import ErrorKind
from turnbridge.core.events import ResponseEventStream
from turnbridge.core.models import ResponseEvent, TextDelta, ToolUseStart, ToolUseStop
from turnbridge.core.registry import ToolCallRegistry

logger = logging.getLogger(__name__)

GeminiPayload = Mapping[str, Any]


class ResponseTranslator:
    """Converts Gemini payloads into a :class:`ResponseEventStream`."""

    def __init__(self, error_mapper: ErrorMapper | None = None) -> None:
        self.error_mapper = error_mapper or ErrorMapper()

    def translate(
        self,
        response: GeminiPayload | Sequence[GeminiPayload],
        registry: ToolCallRegistry,
    ) -> ResponseEventStream:
        """Validate ``response`` and return its event stream.

        Raises:
            BackendError: ``INVALID_RESPONSE`` when a payload is malformed or
                lacks ``candidates``; the mapped kind when a payload carries
                an ``error`` object.
        """
        if isinstance(response, Mapping):
            chunks = [self._parse(response, streamed=False)]
        elif not isinstance(response, Sequence) or isinstance(response, (str, bytes)):
            raise self.error_mapper.error(
                ErrorKind.INVALID_RESPONSE,
                f"Expected a JSON object or a list of chunks, got {type(response).__name__}",
            )
        else:
            streamed = len(response) > 1
            chunks = [self._parse(payload, streamed=streamed) for payload in response]
            if not chunks:
                raise self.error_mapper.error(ErrorKind.INVALID_RESPONSE, "Empty response stream")

        metadata = _metadata(chunks)
        return ResponseEventStream(_events(chunks, registry), registry=registry, metadata=metadata)

    def _parse(self, payload: Any, *, streamed: bool) -> GenerateContentResponse:
        if not isinstance(payload, Mapping):
            raise self.error_mapper.error(
                ErrorKind.INVALID_RESPONSE,
                f"Expected a JSON object, got {type(payload).__name__}",
            )
        if "error" in payload:
            raise self.error_mapper.from_payload(payload)
        try:
            parsed = GenerateContentResponse.model_validate(payload)
        except ValidationError as exc:
            raise self.error_mapper.map(exc) from exc

        if parsed.candidates is None:
            # A trailing stream chunk may carry usage only.
            if streamed and parsed.usage_metadata is not None:
                return parsed
            raise self.error_mapper.error(
                ErrorKind.INVALID_RESPONSE,
                "Response is missing the required 'candidates' field",
            )
        return parsed


def _events(chunks: list[GenerateContentResponse], registry: ToolCallRegistry) -> Iterator[ResponseEvent]:
    for chunk in chunks:
        for part in _first_candidate_parts(chunk):
            if part.text:
                yield TextDelta(content=part.text)
            elif part.function_call is not None:
                call = part.function_call
                tool_use_id = registry.mint_id(call.name)
                yield ToolUseStart(
                    tool_use_id=tool_use_id,
                    name=call.name,
                    partial_input=json.dumps(call.args, separators=(",", ":")),
                )
                yield ToolUseStop(tool_use_id=tool_use_id)
            elif part.function_response is not None:
                logger.debug("Ignoring functionResponse part in model reply")


def _first_candidate_parts(chunk: GenerateContentResponse) -> list[Part]:
    if not chunk.candidates:
        return []
    content = chunk.candidates[0].content
    if content is None:
        return []
    return content.parts


def _metadata(chunks: list[GenerateContentResponse]) -> dict[str, Any]:
    metadata: dict[str, Any] = {"finish_reason": None}
    for chunk in chunks:
        if chunk.candidates and chunk.candidates[0].finish_reason:
            metadata["finish_reason"] = chunk.candidates[0].finish_reason
        if chunk.usage_metadata:
            metadata["usage"] = chunk.usage_metadata
        if chunk.model_version:
            metadata["model_version"] = chunk.model_version
    return metadata
