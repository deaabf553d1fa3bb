"""Process-wide tracing setup: provider, exporters and tracer lookup."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from opentelemetry import trace as otel_trace
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from rpctrace import runtime_config
from rpctrace.exporter.console_exporter import ConsoleExporter
from rpctrace.processors.logging_processor import LoggingSpanProcessor
from rpctrace.tracer.provider import TracerProvider
from rpctrace.tracer.tracer import Tracer

logger = logging.getLogger(__name__)

_provider: Optional[TracerProvider] = None
_default_provider: Optional[TracerProvider] = None
_lock = threading.Lock()


def start_tracing(
    service_name: Optional[str] = None,
    *,
    enable_console_exporter: bool = False,
    enable_span_logging: bool = False,
    span_processors: Optional[Iterable[object]] = None,
    set_global: bool = True,
    load_env: bool = True,
) -> TracerProvider:
    """
    Create and install the process tracer provider.

    Calling it again before stop_tracing() logs a warning and returns the
    provider that is already running.

    Args:
        service_name: ``service.name`` resource attribute; falls back to runtime config
        enable_console_exporter: Print finished spans to stdout
        enable_span_logging: Log a summary of each finished span to ``rpctrace.traces``
        span_processors: Extra OTel export or rpctrace enrichment processors
        set_global: Also install as the OpenTelemetry global tracer provider
        load_env: Read RPCTRACE_* environment variables first
    """
    global _provider

    with _lock:
        if _provider is not None:
            logger.warning("start_tracing() called while tracing is already running; reusing provider")
            return _provider

        if load_env:
            runtime_config.load_from_env()
        if service_name:
            runtime_config.set_service_name(service_name)
        if runtime_config.get_debug():
            logging.getLogger("rpctrace").setLevel(logging.DEBUG)

        provider = TracerProvider(resource={"service.name": runtime_config.get_service_name()})
        if enable_console_exporter:
            provider.add_span_processor(BatchSpanProcessor(ConsoleExporter()))
        if enable_span_logging:
            provider.add_span_processor(LoggingSpanProcessor())
        for processor in span_processors or []:
            provider.add_span_processor(processor)

        if set_global:
            otel_trace.set_tracer_provider(provider.otel_tracer_provider)

        _provider = provider
        logger.debug(
            "Tracing started for service %s with %d export processor(s)",
            runtime_config.get_service_name(),
            len(provider.export_processors),
        )
        return provider


def stop_tracing(flush_timeout: Optional[float] = None) -> None:
    """Flush and shut down the running provider, if any."""
    global _provider

    with _lock:
        provider, _provider = _provider, None
    if provider is None:
        return
    provider.force_flush(flush_timeout)
    provider.shutdown()


def flush(timeout: Optional[float] = None) -> None:
    """Export any spans still buffered by the running provider."""
    provider = _provider
    if provider is not None:
        provider.force_flush(timeout)


def get_tracer_provider() -> TracerProvider:
    """
    The running provider, or a default one without exporters when
    start_tracing() has not been called.
    """
    global _default_provider

    provider = _provider
    if provider is not None:
        return provider
    with _lock:
        if _default_provider is None:
            _default_provider = TracerProvider(
                resource={"service.name": runtime_config.get_service_name()}
            )
        return _default_provider


def get_tracer(name: str) -> Tracer:
    return get_tracer_provider().get_tracer(name)
