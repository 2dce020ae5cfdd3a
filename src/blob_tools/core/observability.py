"""Structured logging and tracing for blob-tools.

Both are configured from ``settings`` when this module is first imported.
Spans go to the OTLP collector named by ``otel_exporter_endpoint``, or to
the console when no endpoint is set.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)

from .config import Settings, settings

# Per-request chatter from the AWS SDK; kept quiet unless debugging
_NOISY_LOGGERS = ("boto3", "botocore", "urllib3", "s3transfer")


def build_span_exporter(config: Settings) -> SpanExporter:
    """Pick the span exporter for the configured endpoint."""
    if config.otel_exporter_endpoint:
        return OTLPSpanExporter(endpoint=config.otel_exporter_endpoint)
    return ConsoleSpanExporter()


def setup_tracing(config: Settings = settings) -> Optional[TracerProvider]:
    """Install a global tracer provider if tracing is enabled.

    Returns:
        The installed provider, or None when tracing is disabled
    """
    if not config.otel_enabled:
        return None

    resource = Resource.create({"service.name": config.otel_service_name})
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(build_span_exporter(config)))

    trace.set_tracer_provider(provider)
    return provider


def setup_logging(config: Settings = settings) -> None:
    """Set up JSON logging with structlog on top of the stdlib root logger."""
    level = getattr(logging, config.log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer; a no-op tracer unless tracing is enabled."""
    return trace.get_tracer(name)


setup_logging()
setup_tracing()
