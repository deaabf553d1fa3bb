"""Span processor that logs spans when they end."""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry.trace.span import format_span_id, format_trace_id

from rpctrace.tracer.provider import SpanProcessor


class LoggingSpanProcessor(SpanProcessor):
    """Logs span summary on end using the standard logging module."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("rpctrace.traces")

    def on_end(self, span) -> None:
        if span.is_noop:
            return
        parent = format_span_id(span.parent.span_id) if span.parent else "-"
        self.logger.info(
            "[trace] name=%s trace_id=%s span_id=%s parent_id=%s status=%s duration_ns=%s attrs=%s",
            span.name,
            format_trace_id(span.context.trace_id),
            format_span_id(span.context.span_id),
            parent,
            span.status.name,
            span.duration_ns,
            span.attributes,
        )

    def shutdown(self) -> None:
        return None

    def force_flush(self, timeout: Optional[float] = None) -> None:
        return None
