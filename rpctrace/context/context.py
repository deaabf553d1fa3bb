"""Context helpers for managing the active span - using OpenTelemetry directly."""

from contextvars import Token
from typing import Optional, TYPE_CHECKING

from opentelemetry.trace import get_current_span as otel_get_current_span
from opentelemetry.trace import set_span_in_context
from opentelemetry import context as context_api

from rpctrace.tracer.span_context import SpanContext

if TYPE_CHECKING:
    from rpctrace.tracer.span import Span


def get_current_span_context() -> Optional[SpanContext]:
    """
    Return the context of the currently active span.

    None when no span is active or the active span is a no-op.
    """
    otel_context = otel_get_current_span().get_span_context()
    if not otel_context.is_valid:
        return None
    return SpanContext.from_otel(otel_context)


def push_span(span: "Span") -> Token:
    """
    Set a span as current.

    Returns:
        Token needed to restore the previous state
    """
    otel_span = getattr(span, "_otel_span", span)
    return context_api.attach(set_span_in_context(otel_span))


def pop_span(token: Token) -> None:
    """
    Restore the previous span context using the provided token.

    Args:
        token: Token returned by push_span()
    """
    context_api.detach(token)
