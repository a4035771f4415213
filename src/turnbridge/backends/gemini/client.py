"""GeminiClient — async HTTP transport for the Gemini REST API.

This is the transport collaborator of the translation core: it moves wire
dictionaries over HTTP and nothing else. No retries; every failure comes
back as a scrubbed :class:`~turnbridge.core.errors.BackendError`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from turnbridge.backends.gemini.config import GeminiConfig
from turnbridge.core.error_mapper import ErrorMapper
from turnbridge.core.errors import ErrorKind
from turnbridge.utils.telemetry import ATTR_BACKEND, ATTR_ERROR_KIND, ATTR_MODEL, get_tracer

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)

_SSE_DATA = "data:"


class GeminiClient:
    """Sends requests to ``models/{model}:generateContent`` and its streaming twin.

    Usage::

        async with GeminiClient(config) as client:
            payload = await client.generate_content(request)
    """

    def __init__(
        self,
        config: GeminiConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.error_mapper = ErrorMapper([config.api_key])
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GeminiClient:
        self._client = self._build_client()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/") + "/",
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.config.api_key.get_secret_value(),
            },
            timeout=self.config.timeout,
            transport=self._transport,
        )

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _endpoint(self, method: str) -> str:
        return f"models/{self.config.model}:{method}"

    async def generate_content(self, request: dict[str, Any]) -> dict[str, Any]:
        """POST an aggregated request and return the decoded JSON reply."""
        with _tracer.start_as_current_span("gemini.generate_content") as span:
            span.set_attribute(ATTR_BACKEND, "gemini")
            span.set_attribute(ATTR_MODEL, self.config.model)
            logger.debug("Sending request with %d content entries", len(request.get("contents", [])))
            try:
                response = await self._http().post(self._endpoint("generateContent"), json=request)
                response.raise_for_status()
                payload = response.json()
            except (httpx.HTTPError, json.JSONDecodeError, UnicodeDecodeError) as exc:
                error = self.error_mapper.map(exc)
                span.set_attribute(ATTR_ERROR_KIND, error.kind.value)
                logger.error("Gemini request failed: %s", error)
                raise error from exc
            if not isinstance(payload, dict):
                raise self.error_mapper.error(
                    ErrorKind.INVALID_RESPONSE,
                    f"Expected a JSON object, got {type(payload).__name__}",
                )
            return payload

    async def stream_generate_content(self, request: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
        """POST a streaming request and yield each server-sent payload."""
        with _tracer.start_as_current_span("gemini.stream_generate_content") as span:
            span.set_attribute(ATTR_BACKEND, "gemini")
            span.set_attribute(ATTR_MODEL, self.config.model)
            try:
                async with self._http().stream(
                    "POST",
                    self._endpoint("streamGenerateContent"),
                    params={"alt": "sse"},
                    json=request,
                ) as response:
                    if response.is_error:
                        await response.aread()
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        payload = self._decode_event(line)
                        if payload is not None:
                            yield payload
            except (httpx.HTTPError, json.JSONDecodeError, UnicodeDecodeError) as exc:
                error = self.error_mapper.map(exc)
                span.set_attribute(ATTR_ERROR_KIND, error.kind.value)
                logger.error("Gemini streaming request failed: %s", error)
                raise error from exc

    def _decode_event(self, line: str) -> dict[str, Any] | None:
        if not line.startswith(_SSE_DATA):
            return None
        data = line[len(_SSE_DATA):].strip()
        if not data:
            return None
        payload = json.loads(data)
        if not isinstance(payload, dict):
            raise self.error_mapper.error(
                ErrorKind.INVALID_RESPONSE,
                f"Expected a JSON object in stream, got {type(payload).__name__}",
            )
        return payload
