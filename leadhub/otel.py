from __future__ import annotations

import os
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from leadhub.core.config import Settings


SERVICE_NAME = "leadhub-api"

_provider: TracerProvider | None = None
_exporters_attached = False


def _get_or_create_provider(environment: str) -> TracerProvider:
    global _provider

    if _provider is None:
        resource = Resource.create(
            {
                "service.name": SERVICE_NAME,
                "service.version": os.getenv("APP_VERSION", "0.1.0"),
                "deployment.environment": environment,
            }
        )
        _provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(_provider)
    return _provider


def setup_otel(settings: Settings) -> TracerProvider | None:
    """Install the tracer provider when tracing is enabled.

    Spans go to the OTLP HTTP endpoint named by ``OTEL_EXPORTER_OTLP_ENDPOINT``
    and, with ``OTEL_CONSOLE_EXPORTER=true``, to stdout.
    """

    global _exporters_attached

    if not settings.otel_enabled:
        return None

    provider = _get_or_create_provider(settings.app_env)
    if _exporters_attached:
        return provider

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    if os.getenv("OTEL_CONSOLE_EXPORTER", "false").lower() == "true":
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    _exporters_attached = True
    return provider


def setup_inmemory_otel(environment: str = "test") -> InMemorySpanExporter:
    provider = _get_or_create_provider(environment)
    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


def get_fastapi_server_request_hook():
    def server_request_hook(span, scope: dict[str, Any]) -> None:  # type: ignore[no-untyped-def]
        if span is None or not span.is_recording():
            return
        headers = dict(scope.get("headers", []))
        correlation_raw = headers.get(b"x-correlation-id")
        if correlation_raw:
            span.set_attribute("leadhub.correlation_id", correlation_raw.decode("utf-8", errors="replace"))

    return server_request_hook
