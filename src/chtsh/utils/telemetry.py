"""Tracing for the request path.

The dispatcher and fetcher open spans through :func:`get_tracer`; until
:func:`configure_telemetry` installs an SDK provider those spans are no-ops.
Stdout carries protocol traffic, so the console exporter always writes to
stderr.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider

    from chtsh.config import ServerConfig

ATTR_RPC_METHOD = "rpc.method"
ATTR_RPC_ID = "rpc.jsonrpc.request_id"
ATTR_RPC_ERROR_CODE = "rpc.jsonrpc.error_code"
ATTR_TOOL_NAME = "chtsh.tool.name"
ATTR_QUERY = "chtsh.query"
ATTR_LANGUAGE = "chtsh.language"
ATTR_URL = "url.full"

_INSTRUMENTATION_NAME = "chtsh"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(config: ServerConfig) -> TracerProvider | None:
    """Install a tracer provider for ``config.telemetry`` / ``config.otlp_endpoint``.

    Returns the installed provider, or ``None`` when neither exporter is
    requested. Raises :class:`ImportError` when the ``otel`` extra is missing.
    """
    if not config.telemetry and not config.otlp_endpoint:
        return None

    try:
        from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for tracing; install chtsh-mcp[otel]"
        raise ImportError(msg) from exc

    provider = TracerProvider(
        resource=Resource.create(
            {SERVICE_NAME: config.server_name, SERVICE_VERSION: config.server_version}
        )
    )

    if config.telemetry:
        console_exporter = ConsoleSpanExporter(out=sys.stderr)
        provider.add_span_processor(SimpleSpanProcessor(console_exporter))

    if config.otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        except ImportError as exc:
            msg = "opentelemetry-exporter-otlp is required for OTLP export; install chtsh-mcp[otel]"
            raise ImportError(msg) from exc
        otlp_exporter = OTLPSpanExporter(endpoint=config.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    trace.set_tracer_provider(provider)
    return provider
