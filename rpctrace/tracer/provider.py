"""TracerProvider using OpenTelemetry SDK."""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from opentelemetry.sdk.trace import TracerProvider as OTelTracerProvider
from opentelemetry.sdk.trace import SpanProcessor as OTelSpanProcessor
from opentelemetry.sdk.resources import Resource as OTelResource

from rpctrace.tracer.tracer import Tracer

logger = logging.getLogger(__name__)


class SpanProcessor:
    """
    Base span processor interface for rpctrace enrichment processors.

    Enrichment processors run BEFORE span.end() (span is mutable).
    Export processors use OTel's SpanProcessor interface (run AFTER span.end()).
    """

    def on_end(self, span) -> None:
        """
        Called when a span ends, before the OTel span ends.

        Args:
            span: rpctrace Span instance (mutable)
        """
        pass

    def shutdown(self) -> None:
        """Shutdown the processor."""
        pass

    def force_flush(self, timeout: Optional[float] = None) -> None:
        """Force flush any pending spans."""
        pass


class TracerProvider:
    """
    TracerProvider using OpenTelemetry SDK.

    Separates enrichment processors (rpctrace) from export processors (OTel).
    """

    def __init__(self, resource: Optional[Dict[str, str]] = None) -> None:
        """
        Args:
            resource: Resource attributes dictionary (converted to OTel Resource)
        """
        self._otel_provider = OTelTracerProvider(resource=OTelResource.create(resource or {}))
        self.resource = resource or {}

        self._enrichment_processors: List[SpanProcessor] = []
        self._export_processors: List[OTelSpanProcessor] = []

        self._tracers: Dict[str, Tracer] = {}
        self._lock = threading.Lock()

    def get_tracer(self, name: str) -> Tracer:
        """Get a tracer by instrumentation scope name."""
        with self._lock:
            tracer = self._tracers.get(name)
            if tracer is None:
                tracer = Tracer(self, name)
                self._tracers[name] = tracer
            return tracer

    def add_span_processor(self, processor: Any) -> None:
        """
        Add a span processor.

        OTel processors are handed to the OTel provider, anything else is
        run as an rpctrace enrichment processor.
        """
        if isinstance(processor, OTelSpanProcessor):
            self._otel_provider.add_span_processor(processor)
            self._export_processors.append(processor)
        else:
            self._enrichment_processors.append(processor)

    def force_flush(self, timeout: Optional[float] = None) -> None:
        """Force flush all processors."""
        self._otel_provider.force_flush(timeout_millis=int(timeout * 1000) if timeout is not None else 30000)

        for processor in self._enrichment_processors:
            try:
                processor.force_flush(timeout=timeout)
            except Exception:
                logger.debug("Failed to flush %r", processor, exc_info=True)

    def shutdown(self) -> None:
        """Shutdown the provider and all processors."""
        self._otel_provider.shutdown()

        for processor in self._enrichment_processors:
            try:
                processor.shutdown()
            except Exception:
                logger.debug("Failed to shut down %r", processor, exc_info=True)

    @property
    def export_processors(self) -> Tuple[OTelSpanProcessor, ...]:
        """OpenTelemetry processors registered through add_span_processor."""
        return tuple(self._export_processors)

    @property
    def otel_tracer_provider(self) -> OTelTracerProvider:
        """The underlying OpenTelemetry TracerProvider."""
        return self._otel_provider
