"""
OpenTelemetry configuration and utilities for distributed tracing.
"""
import asyncio
import os
import sys
from typing import Optional, Dict, Any
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, DEPLOYMENT_ENVIRONMENT
from opentelemetry.trace.status import Status, StatusCode

_provider_configured = False


def setup_tracing(
    service_name: str = "mcp-demo",
    environment: str = "development",
    otlp_endpoint: Optional[str] = None,
    service_version: str = "0.0.1",
) -> trace.Tracer:
    """
    Configure OpenTelemetry tracing for the application.

    The global tracer provider can only be set once per process; later calls
    reuse it and just hand back a tracer.

    Args:
        service_name: Name of the service for tracing
        environment: Deployment environment (e.g., 'development', 'production')
        otlp_endpoint: OTLP endpoint URL (e.g., 'http://localhost:4317')
        service_version: Version of the service
    """
    global _provider_configured

    if _provider_configured:
        return trace.get_tracer(service_name, service_version)

    otlp_endpoint = otlp_endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")

    resource = Resource.create({
        SERVICE_NAME: service_name,
        DEPLOYMENT_ENVIRONMENT: environment,
        "service.version": service_version,
    })

    provider = TracerProvider(resource=resource)

    # Console exporter in development for local debugging (but skip during tests)
    is_test = 'pytest' in sys.modules
    enable_console = os.getenv("ENABLE_CONSOLE_EXPORTERS", "false").lower() == "true"
    if environment == "development" and not is_test and enable_console:
        # Stdout carries the stdio protocol, spans go to stderr
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))

    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint))
        )

    trace.set_tracer_provider(provider)
    _provider_configured = True

    return trace.get_tracer(service_name, service_version)


def instrument_fastapi(app):
    """Instrument a FastAPI application for tracing."""
    FastAPIInstrumentor.instrument_app(app)
    return app


def get_tracer(name: str = None) -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name or __name__)


def trace_span(
    name: str,
    attributes: Optional[Dict[str, Any]] = None,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    record_exception: bool = True,
    **kwargs
):
    """Decorator for adding tracing to functions."""
    def decorator(func):
        async def async_wrapper(*args, **inner_kwargs):
            tracer = get_tracer(func.__module__)
            with tracer.start_as_current_span(
                name,
                kind=kind,
                attributes=attributes,
                **kwargs
            ) as span:
                try:
                    return await func(*args, **inner_kwargs)
                except Exception as e:
                    if record_exception:
                        span.record_exception(e)
                        span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise

        def sync_wrapper(*args, **inner_kwargs):
            tracer = get_tracer(func.__module__)
            with tracer.start_as_current_span(
                name,
                kind=kind,
                attributes=attributes,
                **kwargs
            ) as span:
                try:
                    return func(*args, **inner_kwargs)
                except Exception as e:
                    if record_exception:
                        span.record_exception(e)
                        span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise

        return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper

    return decorator


__all__ = [
    'setup_tracing',
    'get_tracer',
    'trace_span',
    'instrument_fastapi',
]
