"""Span names and attribute keys for turnbridge tracing.

Spans are opened in three places:

* ``client.send_message`` in :class:`~turnbridge.client.StreamingClient`
  records the selected backend, the conversation ID and, on failure, the
  error kind.
* ``gemini.send_message`` in :class:`~turnbridge.backends.gemini.backend.GeminiBackend`
  records the size of the translated request and the reply's finish reason.
* ``gemini.generate_content`` / ``gemini.stream_generate_content`` wrap the
  HTTP call itself.

Without an SDK provider every span is a no-op. The CLI's ``--trace`` flag
calls :func:`configure_telemetry` to print spans to the console.
"""

from __future__ import annotations

from opentelemetry import trace

ATTR_BACKEND = "turnbridge.backend"
ATTR_MODEL = "turnbridge.model"
ATTR_CONVERSATION_ID = "turnbridge.conversation.id"
ATTR_HISTORY_TURNS = "turnbridge.history.turns"
ATTR_CONTENT_ENTRIES = "turnbridge.request.contents"
ATTR_TOOL_COUNT = "turnbridge.request.tools"
ATTR_STREAMED = "turnbridge.streamed"
ATTR_FINISH_REASON = "turnbridge.finish_reason"
ATTR_ERROR_KIND = "turnbridge.error.kind"


def get_tracer(module: str) -> trace.Tracer:
    return trace.get_tracer(module)


def configure_telemetry(*, service_name: str = "turnbridge") -> None:
    """Install an SDK tracer provider that prints finished spans to stdout.

    Needs the ``otel`` extra (``pip install turnbridge[otel]``).
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
    except ImportError as exc:
        raise ImportError("--trace needs opentelemetry-sdk: pip install turnbridge[otel]") from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
