"""OpenTelemetry tracing configuration for jira-bridge.

Provides:
- configure_tracing(): one-shot TracerProvider setup
- get_tracer(): returns a named Tracer instance
"""

from __future__ import annotations

import os
import sys

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

_CONFIGURED = False


def configure_tracing() -> None:
    """One-shot OTel TracerProvider setup. Spans are exported only when OTEL_CONSOLE_EXPORT=1."""
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    resource = Resource.create(
        {
            "service.name": os.environ.get("SERVICE_NAME", "jira-bridge"),
            "deployment.environment": os.environ.get("APP_ENV", "local"),
        }
    )
    provider = TracerProvider(resource=resource)
    if os.environ.get("OTEL_CONSOLE_EXPORT") == "1":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    trace.set_tracer_provider(provider)


def get_tracer(name: str = "jira-bridge") -> trace.Tracer:
    """Return a named OTel Tracer."""
    return trace.get_tracer(name)
