"""
OpenTelemetry tracing for the marketplace core.

Spans wrap checkout, cancellation and status transitions. When tracing is
disabled no provider is installed and the API's no-op tracer is used.
"""

import logging
from typing import Optional

from django.conf import settings
from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter


logger = logging.getLogger(__name__)

_initialized = False


def setup_tracing(service_name: str = "marketplace-service", enable: Optional[bool] = None) -> None:
    """
    Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing
        enable: Enable/disable tracing (defaults to MARKETPLACE["TRACING_ENABLED"])
    """
    global _initialized

    if _initialized:
        logger.warning("Tracing already initialized. Skipping.")
        return

    if enable is None:
        enable = settings.MARKETPLACE.get("TRACING_ENABLED", False)

    if not enable:
        logger.info("Tracing disabled via configuration")
        return

    resource = Resource(attributes={SERVICE_NAME: service_name})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(tracer_provider)

    _initialized = True
    logger.info(f"OpenTelemetry tracing initialized for service: {service_name}")


def get_tracer(name: str = __name__) -> trace.Tracer:
    """
    Get tracer instance for creating custom spans.

    Example:
        tracer = get_tracer(__name__)

        with tracer.start_as_current_span("order_cancel"):
            ...
    """
    return trace.get_tracer(name)
