"""
Tracing using OpenTelemetry.

Spans wrap connects, statements, introspection and each compared table.
Until initialize_tracing() installs an SDK provider every span is a no-op,
so library users pay nothing unless they opt in.
"""

import logging
import sys
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

logger = logging.getLogger(__name__)

_provider: TracerProvider | None = None


def initialize_tracing(service_name: str = "dbcompare", console_export: bool = True) -> trace.Tracer:
    """
    Install an SDK tracer provider.

    Args:
        service_name: Name of the service for identification
        console_export: Export finished spans to stderr, away from the results stream

    Returns:
        Configured tracer instance
    """
    global _provider

    if _provider is not None:
        logger.warning("Tracing already initialized, returning existing tracer")
        return get_tracer()

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))

    trace.set_tracer_provider(provider)
    _provider = provider
    logger.info(f"Tracing initialized: {service_name} (console={console_export})")
    return get_tracer()


def shutdown_tracing() -> None:
    """Flush pending spans and shut the provider down."""
    global _provider

    if _provider is not None:
        _provider.shutdown()
        _provider = None


def get_tracer() -> trace.Tracer:
    """Tracer for dbcompare spans (no-op until a provider is installed)."""
    return trace.get_tracer("dbcompare")


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes
):
    """
    Context manager for tracing operations.

    Args:
        operation_name: Name of the operation being traced
        kind: Span kind (INTERNAL, CLIENT, ...)
        **attributes: Custom attributes to add to the span

    Yields:
        Span instance for adding custom events/attributes

    Example:
        >>> with trace_operation("compare_table", table="account_move") as span:
        ...     result = handler(descriptor, session)
    """
    with get_tracer().start_as_current_span(operation_name, kind=kind) as span:
        for key, value in attributes.items():
            span.set_attribute(key, str(value))

        try:
            yield span
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            span.record_exception(e)
            raise
