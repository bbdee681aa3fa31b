"""Logging and OpenTelemetry initialization helpers."""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from compound_nodes.core.config import Settings, settings

try:  # pragma: no cover - optional dependency
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
except ImportError:  # pragma: no cover - OTLP exporter optional
    OTLPSpanExporter = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)
_TRACING_INITIALIZED = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None, config: Settings = settings) -> None:
    """Configure the root logger from `LOG_LEVEL` unless a level is given."""

    logging.basicConfig(level=(level or config.LOG_LEVEL).upper(), format=LOG_FORMAT, force=True)


def setup_tracing(config: Settings = settings) -> None:
    """Install an SDK tracer provider when tracing is enabled."""

    global _TRACING_INITIALIZED
    if _TRACING_INITIALIZED or not config.ENABLE_TRACING:
        return

    resource = Resource.create(
        {
            "service.name": config.APP_TITLE.lower().replace(" ", "-"),
            "service.version": config.APP_VERSION,
            "environment": config.ENVIRONMENT,
        }
    )
    provider = TracerProvider(resource=resource)
    exporter = _select_exporter(config)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    _TRACING_INITIALIZED = True
    logger.info("OpenTelemetry tracing initialized with %s exporter", exporter.__class__.__name__)


def _select_exporter(config: Settings):
    if config.OTEL_EXPORTER_OTLP_ENDPOINT:
        if OTLPSpanExporter is None:
            logger.warning(
                "OTEL_EXPORTER_OTLP_ENDPOINT is set but the OTLP exporter is unavailable; falling back to console."
            )
        else:
            return OTLPSpanExporter(endpoint=str(config.OTEL_EXPORTER_OTLP_ENDPOINT))
    return ConsoleSpanExporter()


__all__ = ["setup_logging", "setup_tracing"]
