"""Span implementation - minimal wrapper around OpenTelemetry Span."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Dict, Optional, TYPE_CHECKING

from opentelemetry.trace import INVALID_SPAN, Span as OTelSpan, Status, StatusCode
from opentelemetry.trace import set_span_in_context
from opentelemetry import context as context_api

from rpctrace.tracer.span_context import SpanContext

if TYPE_CHECKING:
    from rpctrace.tracer.tracer import Tracer


class SpanStatus(Enum):
    UNSET = 0
    OK = 1
    ERROR = 2


_OTEL_STATUS_CODES = {
    SpanStatus.UNSET: StatusCode.UNSET,
    SpanStatus.OK: StatusCode.OK,
    SpanStatus.ERROR: StatusCode.ERROR,
}


class Span:
    """
    Minimal wrapper around OpenTelemetry Span.

    A span built without a tracer around ``INVALID_SPAN`` is a no-op: it
    records nothing, and while it is current no trace context is
    propagated downstream.
    """

    def __init__(
        self,
        otel_span: OTelSpan,
        tracer: Optional["Tracer"] = None,
        parent: Optional[SpanContext] = None,
    ) -> None:
        """
        Initialize span wrapper.

        Args:
            otel_span: OpenTelemetry Span instance
            tracer: Tracer that started the span (None for no-op spans)
            parent: Context this span was parented to, if any
        """
        self._otel_span = otel_span
        self.tracer = tracer
        self.parent = parent
        self._ended = False
        self._activation_token = None

        self.context = SpanContext.from_otel(otel_span.get_span_context())
        self.name = getattr(otel_span, "name", "noop")
        self.start_time_ns = time.time_ns()
        self.end_time_ns: Optional[int] = None

        self.status = SpanStatus.UNSET
        self.status_description: Optional[str] = None

        self._attributes: Dict[str, Any] = {}

    @classmethod
    def noop(cls) -> "Span":
        return cls(INVALID_SPAN)

    @property
    def is_noop(self) -> bool:
        return not self.context.is_valid()

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def attributes(self) -> Dict[str, Any]:
        return self._attributes

    @property
    def duration_ns(self) -> Optional[int]:
        if self.end_time_ns is None:
            return None
        return self.end_time_ns - self.start_time_ns

    def is_recording(self) -> bool:
        return not self._ended and self._otel_span.is_recording()

    def set_attribute(self, key: str, value: Any) -> None:
        """Set an attribute on the span."""
        if self._ended:
            return

        self._attributes[key] = value
        try:
            self._otel_span.set_attribute(key, value)
        except Exception:
            pass

    def record_exception(self, error: BaseException) -> None:
        """Record an exception event on the span."""
        if self._ended:
            return

        try:
            self._otel_span.record_exception(error)
        except Exception:
            pass

        self.set_status(SpanStatus.ERROR, f"{type(error).__name__}: {error}")

    def set_status(self, status: SpanStatus, description: Optional[str] = None) -> None:
        """Set the span status."""
        if self._ended:
            return

        self.status = status
        self.status_description = description

        # OTel only keeps a description on ERROR statuses.
        if status != SpanStatus.ERROR:
            description = None
        try:
            self._otel_span.set_status(
                Status(status_code=_OTEL_STATUS_CODES[status], description=description)
            )
        except Exception:
            pass

    def end(self) -> None:
        """
        End the span. Later calls are ignored.

        Enrichment processors run BEFORE the OTel span ends (span is still mutable).
        Export processors run AFTER (OTel handles this automatically).
        """
        if self._ended:
            return

        self.end_time_ns = time.time_ns()
        if self.status == SpanStatus.UNSET:
            self.set_status(SpanStatus.OK)

        if self.tracer is not None:
            self.tracer._run_enrichment_processors(self)

        try:
            self._otel_span.end(end_time=self.end_time_ns)
        except Exception:
            pass

        self._ended = True

    def _activate(self) -> None:
        ctx = set_span_in_context(self._otel_span)
        self._activation_token = context_api.attach(ctx)

    def close(self, exc: Optional[BaseException] = None) -> None:
        """Record the outcome of ``exc`` (if any), end the span and deactivate it."""
        try:
            if isinstance(exc, Exception):
                self.record_exception(exc)
            elif exc is not None:
                # Cancellation, generator close and interpreter exit.
                self.set_status(SpanStatus.ERROR, type(exc).__name__)
            self.end()
        finally:
            if self._activation_token:
                context_api.detach(self._activation_token)
                self._activation_token = None

    # Context manager support
    def __enter__(self) -> "Span":
        self._activate()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close(exc)
        return False

    async def __aenter__(self) -> "Span":
        self._activate()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self.close(exc)
        return False
