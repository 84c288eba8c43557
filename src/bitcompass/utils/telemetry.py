"""OpenTelemetry tracing for the MCP server.

Instrumented modules take a tracer from :func:`get_tracer` at import time;
until :func:`configure_telemetry` installs an SDK provider those tracers
are no-ops, so the ``otel`` extra stays optional.

``bitcompass mcp start --trace`` exports spans to stderr, and
``--otlp-endpoint`` (or ``BITCOMPASS_OTLP_ENDPOINT``) ships them to a
collector over OTLP/gRPC.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

ATTR_MCP_METHOD = "bitcompass.mcp.method"
ATTR_MCP_REQUEST_ID = "bitcompass.mcp.request_id"
ATTR_TOOL_NAME = "bitcompass.tool.name"
ATTR_TOOL_OUTCOME = "bitcompass.tool.outcome"

OTLP_ENDPOINT_ENV = "BITCOMPASS_OTLP_ENDPOINT"

_INSTRUMENTATION_NAME = "bitcompass"

_SDK_HINT = "opentelemetry-sdk is required for tracing. Install it with: pip install bitcompass[otel]"
_OTLP_HINT = (
    "opentelemetry-exporter-otlp is required for --otlp-endpoint. "
    "Install it with: pip install bitcompass[otel]"
)


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    console: bool = True,
    otlp_endpoint: str | None = None,
    service_name: str = _INSTRUMENTATION_NAME,
) -> None:
    """Install a global tracer provider with the requested span exporters.

    Console spans go to stderr because stdout carries the protocol stream.
    Raises ImportError naming the missing package when the SDK or the OTLP
    exporter is not installed; nothing is installed in that case.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        raise ImportError(_SDK_HINT) from exc

    processors: list[Any] = []
    if console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    if otlp_endpoint:
        processors.append(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    for processor in processors:
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError as exc:
        raise ImportError(_OTLP_HINT) from exc
    return OTLPSpanExporter(endpoint=endpoint)
