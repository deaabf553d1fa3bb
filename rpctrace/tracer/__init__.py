"""Tracer components wrapping the OpenTelemetry SDK."""

from rpctrace.tracer.provider import SpanProcessor, TracerProvider
from rpctrace.tracer.span import Span, SpanStatus
from rpctrace.tracer.span_context import SpanContext
from rpctrace.tracer.tracer import Tracer

__all__ = [
    "Span",
    "SpanStatus",
    "SpanContext",
    "Tracer",
    "TracerProvider",
    "SpanProcessor",
]
