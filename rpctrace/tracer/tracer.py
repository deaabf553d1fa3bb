"""Tracer using OpenTelemetry SDK."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, TYPE_CHECKING

from opentelemetry.context import Context
from opentelemetry.trace import NonRecordingSpan, SpanKind
from opentelemetry.trace import Tracer as OTelTracer
from opentelemetry.trace import set_span_in_context

from rpctrace.tracer.span import Span
from rpctrace.tracer.span_context import SpanContext

if TYPE_CHECKING:
    from rpctrace.tracer.provider import TracerProvider

logger = logging.getLogger(__name__)


class Tracer:
    """Tracer wrapper that uses OpenTelemetry Tracer internally."""

    def __init__(self, provider: "TracerProvider", instrumentation_scope: str):
        """
        Initialize tracer with OpenTelemetry Tracer.

        Args:
            provider: rpctrace TracerProvider instance
            instrumentation_scope: Instrumentation scope name
        """
        self._provider = provider
        self.instrumentation_scope = instrumentation_scope
        self._otel_tracer: OTelTracer = provider._otel_provider.get_tracer(instrumentation_scope)

    def start_span(
        self,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        parent_context: Optional[SpanContext] = None,
        kind: SpanKind = SpanKind.INTERNAL,
    ) -> Span:
        """
        Start a new span.

        Args:
            name: Span name
            attributes: Optional attributes dictionary
            parent_context: Immediate parent; the current span is used when omitted.
                A context without a span id starts a new root span.
            kind: OpenTelemetry span kind

        Returns:
            rpctrace Span instance (wraps OTel Span)
        """
        otel_parent_context = None
        if parent_context is not None and parent_context.is_root():
            # An empty context hides the current span; the SDK picks the trace id.
            otel_parent_context = Context()
            parent_context = None
        elif parent_context is not None:
            otel_parent_context = set_span_in_context(NonRecordingSpan(parent_context.to_otel()))

        otel_span = self._otel_tracer.start_span(
            name=name,
            context=otel_parent_context,
            kind=kind,
            attributes=attributes,
        )
        span = Span(otel_span, self, parent_context)
        for key, value in (attributes or {}).items():
            span.attributes[key] = value
        return span

    @contextmanager
    def start_as_current_span(
        self,
        name: str,
        attributes: Optional[Dict[str, Any]] = None,
        parent_context: Optional[SpanContext] = None,
        kind: SpanKind = SpanKind.INTERNAL,
    ) -> Iterator[Span]:
        """
        Start a span that is current inside the block and ended when it exits.
        """
        with self.start_span(
            name=name,
            attributes=attributes,
            parent_context=parent_context,
            kind=kind,
        ) as span:
            yield span

    def _run_enrichment_processors(self, span: Span) -> None:
        """
        Run enrichment processors before span ends.

        Called by Span.end() before the OTel span is ended.
        """
        for processor in self._provider._enrichment_processors:
            try:
                processor.on_end(span)
            except Exception:
                # Processors should not crash tracing
                logger.debug("Enrichment processor %r failed", processor, exc_info=True)
